from __future__ import annotations

import logging
from typing import List

from ..dungeon.room import Room
from ..dungeon.tiles import Coord

logger = logging.getLogger(__name__)


def bresenham_line(start: Coord, end: Coord) -> List[Coord]:
    """
    Bresenham's line algorithm. Returns the cells from start to end inclusive.

    Ties step x before y, so the traced line is fixed for a given
    (start, end) pair.
    """
    x0, y0 = start.x, start.y
    x1, y1 = end.x, end.y
    dx = abs(x1 - x0)
    dy = abs(y1 - y0)
    sx = 1 if x0 < x1 else -1
    sy = 1 if y0 < y1 else -1
    err = dx - dy

    points: List[Coord] = []
    while True:
        points.append(Coord(x0, y0))
        if x0 == x1 and y0 == y1:
            break
        e2 = 2 * err
        if e2 > -dy:
            err -= dy
            x0 += sx
        if e2 < dx:
            err += dx
            y0 += sy
    return points


def has_line_of_sight(room: Room, viewer: Coord, target: Coord) -> bool:
    """
    True when no cell strictly between viewer and target blocks sight.

    The viewer's own cell and the target cell are never checked, so a wall
    or door is itself visible while hiding everything behind it.
    """
    if not room.in_bounds(viewer.x, viewer.y) or not room.in_bounds(target.x, target.y):
        return False
    line = bresenham_line(viewer, target)
    for cell in line[1:-1]:
        if room.tile_at(cell).kind.blocks_sight:
            logger.debug("LoS blocked at %s between %s->%s", cell, viewer, target)
            return False
    return True
