from __future__ import annotations

import logging
from dataclasses import replace
from typing import Optional, Set

from ..dungeon.room import Room
from ..dungeon.tiles import Coord
from .los import has_line_of_sight

logger = logging.getLogger(__name__)


class VisibilityCalculator:
    """
    Recomputes per-tile fog-of-war flags from a viewer position.

    - visible: Manhattan distance <= radius and an unobstructed line of sight.
      Reflects only the current instant.
    - discovered: sticky; once set it stays set for the room's lifetime.
    """

    def __init__(self, radius: int = 6) -> None:
        if radius < 0:
            raise ValueError("radius must be >= 0")
        self.radius = radius

    def visible_coords(self, room: Room, viewer: Coord) -> Set[Coord]:
        if not room.in_bounds(viewer.x, viewer.y):
            raise ValueError(f"viewer {viewer} out of bounds for room {room.id}")
        return {
            t.coord
            for t in room.tiles
            if t.coord.manhattan(viewer) <= self.radius and has_line_of_sight(room, viewer, t.coord)
        }

    def recompute(self, room: Room, viewer: Coord, radius: Optional[int] = None) -> Room:
        """Return a copy of ``room`` with fresh visible/discovered flags.

        The input room is left untouched; the entity list is shared, not copied.
        """
        calc = self if radius is None else VisibilityCalculator(radius)
        visible = calc.visible_coords(room, viewer)
        tiles = []
        for t in room.tiles:
            is_visible = t.coord in visible
            tiles.append(replace(t, visible=is_visible, discovered=t.discovered or is_visible))
        logger.debug("Visibility in %s from %s: %d visible tiles", room.id, viewer, len(visible))
        return replace(room, tiles=tiles)
