from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..config import EngineConfig
from ..data.catalog import ItemDefinition

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PlayerSnapshot:
    """Read-only copy of the player state for HUD display."""

    hp: int
    max_hp: int
    sanity: int
    max_sanity: int
    inventory: Tuple[ItemDefinition, ...]
    max_inventory_size: int
    secure_container: Tuple[ItemDefinition, ...]
    credits: int
    equipped_weapon: Optional[ItemDefinition]


@dataclass
class PlayerState:
    """
    Player vitals, backpack, secure container and wallet.

    Items are catalog references; ``equipped_weapon`` points at a definition
    that is also carried in ``inventory``.
    """

    hp: int = 100
    max_hp: int = 100
    sanity: int = 100
    max_sanity: int = 100
    inventory: List[ItemDefinition] = field(default_factory=list)
    max_inventory_size: int = 10
    secure_container: List[ItemDefinition] = field(default_factory=list)
    secure_capacity: int = 1
    credits: int = 100
    equipped_weapon: Optional[ItemDefinition] = None

    @classmethod
    def from_config(cls, config: EngineConfig) -> "PlayerState":
        return cls(
            hp=config.max_hp,
            max_hp=config.max_hp,
            sanity=config.max_sanity,
            max_sanity=config.max_sanity,
            max_inventory_size=config.max_inventory_size,
            secure_capacity=config.secure_capacity,
            credits=config.starting_credits,
        )

    @property
    def is_dead(self) -> bool:
        return self.hp <= 0

    @property
    def is_broken(self) -> bool:
        return self.sanity <= 0

    @property
    def inventory_full(self) -> bool:
        return len(self.inventory) >= self.max_inventory_size

    @property
    def secure_full(self) -> bool:
        return len(self.secure_container) >= self.secure_capacity

    def apply_damage(self, hp: int, sanity: int = 0) -> None:
        self.hp = max(0, self.hp - hp)
        self.sanity = max(0, self.sanity - sanity)
        logger.debug("Player took %d hp / %d sanity damage -> %d/%d", hp, sanity, self.hp, self.sanity)

    def restore(self, hp: int = 0, sanity: int = 0) -> Tuple[int, int]:
        """Add hp/sanity clamped to their maxima; returns the amounts gained."""
        old_hp, old_sanity = self.hp, self.sanity
        self.hp = min(self.max_hp, self.hp + hp)
        self.sanity = min(self.max_sanity, self.sanity + sanity)
        return self.hp - old_hp, self.sanity - old_sanity

    def attack_damage(self, base_damage: int) -> int:
        bonus = self.equipped_weapon.weapon_bonus if self.equipped_weapon else 0
        return base_damage + bonus

    def snapshot(self) -> PlayerSnapshot:
        return PlayerSnapshot(
            hp=self.hp,
            max_hp=self.max_hp,
            sanity=self.sanity,
            max_sanity=self.max_sanity,
            inventory=tuple(self.inventory),
            max_inventory_size=self.max_inventory_size,
            secure_container=tuple(self.secure_container),
            credits=self.credits,
            equipped_weapon=self.equipped_weapon,
        )
