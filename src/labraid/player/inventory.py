from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Sequence, Tuple

from ..data.catalog import Catalog, ItemDefinition, ItemType
from ..exceptions import (
    ContainerEmptyError,
    InsufficientCreditsError,
    InventoryFullError,
    ItemNotFoundError,
    SecureContainerFullError,
    WrongItemTypeError,
)
from .state import PlayerState

logger = logging.getLogger(__name__)


class ItemSource(Enum):
    INVENTORY = "inventory"
    SECURE = "secure"


def fuzzy_find(items: Sequence[ItemDefinition], query: Optional[str]) -> Optional[int]:
    """Index of the first item whose name contains ``query``, case-insensitively.

    A blank query matches nothing.
    """
    if query is None:
        return None
    needle = query.strip().lower()
    if not needle:
        return None
    for idx, item in enumerate(items):
        if needle in item.name.lower():
            return idx
    return None


@dataclass(frozen=True)
class ConsumeResult:
    item: ItemDefinition
    hp_gained: int
    sanity_gained: int


class InventoryManager:
    """
    All-or-nothing item transactions on a PlayerState.

    Every precondition is checked before anything is mutated; a rejected
    operation raises an InventoryError subclass and leaves the player as it
    was. Invariants after every call: len(inventory) <= max_inventory_size,
    len(secure_container) <= secure_capacity, credits >= 0.
    """

    def __init__(self, player: PlayerState, catalog: Catalog) -> None:
        self.player = player
        self.catalog = catalog

    # ---- Helpers ---------------------------------------------------------
    def _match(self, items: Sequence[ItemDefinition], query: Optional[str], where: str = "backpack") -> int:
        idx = fuzzy_find(items, query)
        if idx is None:
            raise ItemNotFoundError(f'Item "{(query or "").strip()}" not found in {where}')
        return idx

    def _unequip_if(self, item: ItemDefinition) -> None:
        equipped = self.player.equipped_weapon
        if equipped is not None and equipped.id == item.id:
            self.player.equipped_weapon = None
            logger.debug("Unequipped %s", item.id)

    # ---- Shop ------------------------------------------------------------
    def buy(self, item_id: str) -> ItemDefinition:
        item = self.catalog.item(item_id)
        if self.player.inventory_full:
            raise InventoryFullError("Inventory full")
        if self.player.credits < item.value:
            raise InsufficientCreditsError(
                f"Cannot afford {item.name}: costs {item.value}, have {self.player.credits}"
            )
        self.player.credits -= item.value
        self.player.inventory.append(item)
        logger.debug("Bought %s for %d (credits left: %d)", item.id, item.value, self.player.credits)
        return item

    def sell(self, index: int, source: ItemSource = ItemSource.INVENTORY) -> Tuple[ItemDefinition, int]:
        """Sell the item at ``index`` of ``source`` for half its value (rounded down)."""
        items = self.player.secure_container if source is ItemSource.SECURE else self.player.inventory
        if not 0 <= index < len(items):
            raise ItemNotFoundError(f"No item at {source.value} slot {index}")
        item = items.pop(index)
        refund = item.value // 2
        self.player.credits += refund
        if source is ItemSource.INVENTORY:
            self._unequip_if(item)
        logger.debug("Sold %s from %s for %d", item.id, source.value, refund)
        return item, refund

    # ---- Backpack --------------------------------------------------------
    def pick_up(self, item: ItemDefinition) -> None:
        if self.player.inventory_full:
            raise InventoryFullError("Inventory full")
        self.player.inventory.append(item)

    def drop(self, query: Optional[str]) -> ItemDefinition:
        idx = self._match(self.player.inventory, query)
        item = self.player.inventory.pop(idx)
        self._unequip_if(item)
        return item

    def equip(self, query: Optional[str]) -> ItemDefinition:
        item = self.player.inventory[self._match(self.player.inventory, query)]
        if item.type is not ItemType.WEAPON:
            raise WrongItemTypeError(f"{item.name} is not a weapon")
        self.player.equipped_weapon = item
        logger.debug("Equipped %s (+%d dmg)", item.id, item.weapon_bonus)
        return item

    def consume(self, query: Optional[str] = None) -> ConsumeResult:
        inventory = self.player.inventory
        if query is None or not query.strip():
            idx = next((i for i, it in enumerate(inventory) if it.type is ItemType.CONSUMABLE), None)
            if idx is None:
                raise ItemNotFoundError("Nothing to consume")
        else:
            idx = self._match(inventory, query)
        item = inventory[idx]
        if item.type is not ItemType.CONSUMABLE:
            raise WrongItemTypeError(f"Can't consume {item.name}")
        hp, sanity = (item.effect.hp_delta, item.effect.sanity_delta) if item.effect else (0, 0)
        gained_hp, gained_sanity = self.player.restore(hp, sanity)
        inventory.pop(idx)
        logger.debug("Consumed %s: +%d hp, +%d sanity", item.id, gained_hp, gained_sanity)
        return ConsumeResult(item, gained_hp, gained_sanity)

    # ---- Secure container ------------------------------------------------
    def secure(self, query: Optional[str]) -> ItemDefinition:
        if self.player.secure_full:
            raise SecureContainerFullError("Secure container is full")
        idx = self._match(self.player.inventory, query)
        item = self.player.inventory.pop(idx)
        self._unequip_if(item)
        self.player.secure_container.append(item)
        return item

    def unsecure(self, query: Optional[str] = None) -> ItemDefinition:
        if self.player.inventory_full:
            raise InventoryFullError("Backpack full")
        container = self.player.secure_container
        if not container:
            raise ContainerEmptyError("Secure container is empty")
        idx = 0
        if query is not None and query.strip():
            idx = self._match(container, query, where="secure container")
        item = container.pop(idx)
        self.player.inventory.append(item)
        return item
