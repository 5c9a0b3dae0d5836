from __future__ import annotations

import logging
from typing import List, Optional

from ..config import EngineConfig
from ..core.rng import RNG
from ..data.catalog import Catalog
from .room import Entity, Room
from .tiles import Coord, Tile, TileKind

logger = logging.getLogger(__name__)


class RoomGenerator:
    """Produces one randomized room for a difficulty tier.

    Rolls happen in a fixed order (size, then per-tile walls and loot in
    row-major order, then per-tile enemy spawns) so a seeded RNG reproduces
    the same room.
    """

    def __init__(self, catalog: Catalog, config: Optional[EngineConfig] = None, rng: Optional[RNG] = None) -> None:
        self.catalog = catalog
        self.config = config or EngineConfig()
        self.rng = rng or RNG(self.config.seed)

    def generate(self, room_id: str, difficulty_tier: int, is_start: bool = False, is_exit: bool = False) -> Room:
        cfg = self.config
        rng = self.rng
        width = rng.randint(cfg.room_min_size, cfg.room_max_size)
        height = rng.randint(cfg.room_min_size, cfg.room_max_size)
        floor_loot = self.catalog.common_items(cfg.common_value_threshold)

        tiles: List[Tile] = []
        for y in range(height):
            for x in range(width):
                kind = TileKind.FLOOR
                if x in (0, width - 1) or y in (0, height - 1):
                    kind = TileKind.WALL
                elif not is_start and rng.chance(cfg.interior_wall_chance):
                    kind = TileKind.WALL
                loot = None
                if kind is TileKind.FLOOR and floor_loot and rng.chance(cfg.floor_loot_chance):
                    loot = rng.choice(floor_loot)
                tiles.append(Tile(Coord(x, y), kind, loot=loot))

        room = Room(room_id, width, height, tiles, difficulty_tier)
        if is_start:
            self._mark_center(room, TileKind.START)
        if is_exit:
            self._mark_center(room, TileKind.EXIT)
        # Enemies only spawn on plain floor, never on the start or exit tile
        if not is_start:
            self._spawn_enemies(room, is_exit)

        logger.debug(
            "Generated room %s: %dx%d tier=%d start=%s exit=%s entities=%d",
            room_id, width, height, difficulty_tier, is_start, is_exit, len(room.entities),
        )
        return room

    def _spawn_enemies(self, room: Room, is_exit: bool) -> None:
        cfg = self.config
        chance = cfg.enemy_base_chance + room.difficulty_tier * cfg.enemy_tier_scaling
        pool = self.catalog.enemy_pool(room.difficulty_tier)
        if not pool:
            return
        for tile in room.tiles:
            if tile.kind is not TileKind.FLOOR or not self.rng.chance(chance):
                continue
            template = self.catalog.enemy(self.rng.choice(pool))
            # Bosses belong to the exit room only; the roll is discarded, not re-rolled
            if template.boss and not is_exit:
                logger.debug("Discarded boss roll %s in non-exit room %s", template.id, room.id)
                continue
            room.entities.append(
                Entity(
                    id=f"{room.id}-e{len(room.entities) + 1}",
                    template_id=template.id,
                    coord=tile.coord,
                    hp=template.hp,
                    max_hp=template.max_hp,
                )
            )

    @staticmethod
    def _mark_center(room: Room, kind: TileKind) -> None:
        center = room.tile_at(room.center())
        room.set_tile(center.with_kind(kind).with_loot(None))
