from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional

from ..config import EngineConfig
from ..core.rng import RNG
from ..data.catalog import Catalog, EnemyTemplate
from ..dungeon.room import Entity, Room
from ..dungeon.tiles import Coord, TileKind
from ..fov.los import has_line_of_sight
from ..player.state import PlayerState

logger = logging.getLogger(__name__)


class ActionKind(Enum):
    DORMANT = "dormant"
    ATTACK = "attack"
    MOVE = "move"
    IDLE = "idle"
    BLOCKED = "blocked"


@dataclass(frozen=True)
class EnemyAction:
    """What one entity did during an enemy turn."""

    entity_id: str
    template: EnemyTemplate
    kind: ActionKind
    spotted: bool = False
    origin: Optional[Coord] = None
    destination: Optional[Coord] = None
    damage: int = 0
    sanity_damage: int = 0


def greedy_step(origin: Coord, target: Coord) -> Coord:
    """One axis step reducing Manhattan distance; the x axis goes first."""
    if origin.x < target.x:
        return origin.offset(1, 0)
    if origin.x > target.x:
        return origin.offset(-1, 0)
    if origin.y < target.y:
        return origin.offset(0, 1)
    if origin.y > target.y:
        return origin.offset(0, -1)
    return origin


class EntityAI:
    """
    Per-entity perception and movement, run once per completed player action.

    States:
    - Dormant (alerted=False): wakes when the target is within sight range
      and in line of sight; alerting is permanent and the entity acts on the
      same turn it wakes.
    - Alerted, adjacent: attacks (hp and sanity damage), does not move.
    - Alerted, pursuing: idles with ``idle_chance``; otherwise takes one greedy
      step, idling instead if the destination is a wall, a door or occupied.

    Entities resolve independently in room order (spawn order).
    """

    def __init__(self, catalog: Catalog, config: Optional[EngineConfig] = None, rng: Optional[RNG] = None) -> None:
        self.catalog = catalog
        self.config = config or EngineConfig()
        self.rng = rng or RNG(self.config.seed)

    def resolve_turn(self, room: Room, target: Coord, player: PlayerState) -> List[EnemyAction]:
        actions = [self._act(room, entity, target, player) for entity in list(room.entities)]
        logger.debug("Enemy turn in %s: %d entities acted", room.id, len(actions))
        return actions

    def _act(self, room: Room, entity: Entity, target: Coord, player: PlayerState) -> EnemyAction:
        tmpl = self.catalog.enemy(entity.template_id)
        dist = entity.coord.manhattan(target)

        spotted = False
        if not entity.alerted:
            if dist <= tmpl.sight_range and has_line_of_sight(room, entity.coord, target):
                entity.alerted = True
                spotted = True
                logger.debug("%s (%s) spotted target at %s", entity.id, tmpl.id, target)
            else:
                return EnemyAction(entity.id, tmpl, ActionKind.DORMANT, origin=entity.coord)

        if dist == 1:
            player.apply_damage(tmpl.damage, tmpl.sanity_damage)
            return EnemyAction(
                entity.id, tmpl, ActionKind.ATTACK, spotted, entity.coord,
                damage=tmpl.damage, sanity_damage=tmpl.sanity_damage,
            )

        if self.rng.chance(self.config.idle_chance):
            return EnemyAction(entity.id, tmpl, ActionKind.IDLE, spotted, entity.coord)

        origin = entity.coord
        dest = greedy_step(origin, target)
        if not room.in_bounds(dest.x, dest.y) or self._blocked(room, entity, dest):
            return EnemyAction(entity.id, tmpl, ActionKind.BLOCKED, spotted, origin, dest)

        entity.move_to(dest)
        return EnemyAction(entity.id, tmpl, ActionKind.MOVE, spotted, origin, dest)

    @staticmethod
    def _blocked(room: Room, entity: Entity, dest: Coord) -> bool:
        if room.tile_at(dest).kind in (TileKind.WALL, TileKind.DOOR):
            return True
        other = room.entity_at(dest)
        return other is not None and other.id != entity.id
