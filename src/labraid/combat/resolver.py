from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

from ..ai.entity_ai import EnemyAction, EntityAI
from ..config import EngineConfig
from ..core.rng import RNG
from ..data.catalog import Catalog, EnemyTemplate, ItemDefinition
from ..dungeon.room import Entity, Room
from ..dungeon.tiles import Coord
from ..player.state import PlayerState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttackOutcome:
    """Result of one player attack.

    ``enemy_actions`` is empty after a kill: the enemy turn is skipped.
    """

    entity_id: str
    template: EnemyTemplate
    damage: int
    remaining_hp: int
    killed: bool
    loot: Optional[ItemDefinition] = None
    loot_at: Optional[Coord] = None
    enemy_actions: List[EnemyAction] = field(default_factory=list)


class CombatResolver:
    """Melee resolution between the player and the first adjacent entity."""

    def __init__(
        self,
        catalog: Catalog,
        config: Optional[EngineConfig] = None,
        rng: Optional[RNG] = None,
        ai: Optional[EntityAI] = None,
    ) -> None:
        self.catalog = catalog
        self.config = config or EngineConfig()
        self.rng = rng or RNG(self.config.seed)
        self.ai = ai or EntityAI(catalog, self.config, self.rng)

    @staticmethod
    def find_target(room: Room, position: Coord) -> Optional[Entity]:
        """First entity (room order) at Manhattan distance 1 from ``position``."""
        return next(room.entities_adjacent_to(position), None)

    def attack(self, room: Room, position: Coord, player: PlayerState) -> Optional[AttackOutcome]:
        """Hit the first adjacent entity. Returns None when nothing is in reach.

        A killed entity is removed and may drop one item from its loot table
        onto the tile it stood on. A survivor becomes alerted and the enemy
        turn runs.
        """
        target = self.find_target(room, position)
        if target is None:
            return None

        tmpl = self.catalog.enemy(target.template_id)
        damage = player.attack_damage(self.config.base_damage)
        target.hp -= damage
        logger.debug("Player hit %s for %d (hp now %d)", target.id, damage, target.hp)

        if not target.alive:
            room.remove_entity(target.id)
            loot = self._roll_loot(tmpl)
            if loot is not None:
                tile = room.tile_at(target.coord)
                room.set_tile(tile.with_loot(loot))
            logger.info("%s eliminated in %s (loot=%s)", target.id, room.id, loot.id if loot else None)
            return AttackOutcome(
                target.id, tmpl, damage, 0, True,
                loot=loot, loot_at=target.coord if loot else None,
            )

        target.alerted = True
        actions = self.ai.resolve_turn(room, position, player)
        return AttackOutcome(target.id, tmpl, damage, target.hp, False, enemy_actions=actions)

    def _roll_loot(self, tmpl: EnemyTemplate) -> Optional[ItemDefinition]:
        if not tmpl.loot_table:
            return None
        if not self.rng.chance(self.config.loot_drop_chance):
            return None
        return self.catalog.item(self.rng.choice(tmpl.loot_table))
