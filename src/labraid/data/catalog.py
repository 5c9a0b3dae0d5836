from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Tuple

import yaml
from jsonschema import Draft7Validator

from ..exceptions import CatalogError

logger = logging.getLogger(__name__)

_PKG = "labraid.data"
_SCHEMA_PKG = "labraid.data.schemas"


class Rarity(str, Enum):
    JUNK = "Junk"
    COMMON = "Common"
    RARE = "Rare"
    LEGENDARY = "Legendary"


class ItemType(str, Enum):
    MATERIAL = "Material"
    WEAPON = "Weapon"
    CONSUMABLE = "Consumable"
    KEY = "Key"
    DATA = "Data"


@dataclass(frozen=True)
class ItemEffect:
    hp_delta: int = 0
    sanity_delta: int = 0


@dataclass(frozen=True)
class ItemDefinition:
    """
    Immutable item definition. Carried items are references to these
    definitions; nothing in the game owns a private copy.

    For weapons ``effect.hp_delta`` is the damage bonus, not a heal.
    """

    id: str
    name: str
    rarity: Rarity
    type: ItemType
    value: int
    description: str = ""
    effect: Optional[ItemEffect] = None

    @property
    def weapon_bonus(self) -> int:
        if self.type != ItemType.WEAPON or self.effect is None:
            return 0
        return self.effect.hp_delta


@dataclass(frozen=True)
class EnemyTemplate:
    id: str
    name: str
    hp: int
    max_hp: int
    damage: int
    sanity_damage: int
    sight_range: int
    loot_table: Tuple[str, ...] = ()
    symbol: str = "?"
    description: str = ""
    boss: bool = False


@dataclass(frozen=True)
class SpawnPool:
    min_tier: int
    enemies: Tuple[str, ...]


def load_schema(name: str = "catalog") -> Dict[str, Any]:
    text = resources.files(_SCHEMA_PKG).joinpath(f"{name}.schema.json").read_text(encoding="utf-8")
    return json.loads(text)


def validate_catalog_data(data: Any) -> None:
    """Validate raw catalog data against the bundled JSON Schema."""
    validator = Draft7Validator(load_schema("catalog"))
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.path])
    if errors:
        raise CatalogError("Catalog validation failed for schema 'catalog'", errors)


def _item_from_raw(raw: Dict[str, Any]) -> ItemDefinition:
    effect = None
    if raw.get("effect"):
        effect = ItemEffect(
            hp_delta=int(raw["effect"].get("hp", 0)),
            sanity_delta=int(raw["effect"].get("sanity", 0)),
        )
    return ItemDefinition(
        id=str(raw["id"]),
        name=str(raw["name"]),
        rarity=Rarity(raw["rarity"]),
        type=ItemType(raw["type"]),
        value=int(raw["value"]),
        description=str(raw.get("description", "")),
        effect=effect,
    )


def _enemy_from_raw(raw: Dict[str, Any]) -> EnemyTemplate:
    return EnemyTemplate(
        id=str(raw["id"]),
        name=str(raw["name"]),
        hp=int(raw["hp"]),
        max_hp=int(raw["max_hp"]),
        damage=int(raw["damage"]),
        sanity_damage=int(raw["sanity_damage"]),
        sight_range=int(raw["sight_range"]),
        loot_table=tuple(raw.get("loot_table", ())),
        symbol=str(raw.get("symbol", raw["name"][:1].upper())),
        description=str(raw.get("description", "")),
        boss=bool(raw.get("boss", False)),
    )


class Catalog:
    """Id-keyed registry of item definitions, enemy templates and spawn pools.

    Cross references (loot tables, spawn pools, shop stock) are plain ids and
    are checked once at construction.
    """

    def __init__(
        self,
        items: Iterable[ItemDefinition],
        enemies: Iterable[EnemyTemplate],
        spawn_pools: Iterable[SpawnPool],
        shop: Iterable[str] = (),
    ) -> None:
        self._items: Dict[str, ItemDefinition] = {}
        self._enemies: Dict[str, EnemyTemplate] = {}
        for item in items:
            if item.id in self._items:
                raise CatalogError(f"Duplicate item id: {item.id}")
            self._items[item.id] = item
        for enemy in enemies:
            if enemy.id in self._enemies:
                raise CatalogError(f"Duplicate enemy id: {enemy.id}")
            self._enemies[enemy.id] = enemy
        self._pools: List[SpawnPool] = sorted(spawn_pools, key=lambda p: p.min_tier)
        self._shop: Tuple[str, ...] = tuple(shop)
        self._check_references()

    def _check_references(self) -> None:
        for enemy in self._enemies.values():
            for item_id in enemy.loot_table:
                if item_id not in self._items:
                    raise CatalogError(f"Enemy '{enemy.id}' drops unknown item '{item_id}'")
        for pool in self._pools:
            for enemy_id in pool.enemies:
                if enemy_id not in self._enemies:
                    raise CatalogError(f"Spawn pool for tier {pool.min_tier} names unknown enemy '{enemy_id}'")
        for item_id in self._shop:
            if item_id not in self._items:
                raise CatalogError(f"Shop stocks unknown item '{item_id}'")

    # ---- Lookup ----------------------------------------------------------
    def item(self, item_id: str) -> ItemDefinition:
        try:
            return self._items[item_id]
        except KeyError as exc:
            raise CatalogError(f"Unknown item id: {item_id}") from exc

    def enemy(self, enemy_id: str) -> EnemyTemplate:
        try:
            return self._enemies[enemy_id]
        except KeyError as exc:
            raise CatalogError(f"Unknown enemy id: {enemy_id}") from exc

    def items(self) -> List[ItemDefinition]:
        return list(self._items.values())

    def enemies(self) -> List[EnemyTemplate]:
        return list(self._enemies.values())

    def common_items(self, value_threshold: int) -> List[ItemDefinition]:
        """Items cheap enough to lie around on the floor."""
        return [i for i in self._items.values() if i.value < value_threshold]

    def enemy_pool(self, tier: int) -> Tuple[str, ...]:
        """Enemy ids allowed at a difficulty tier (highest unlocked pool wins)."""
        chosen: Tuple[str, ...] = ()
        for pool in self._pools:
            if pool.min_tier <= tier:
                chosen = pool.enemies
        return chosen

    def shop_items(self) -> List[ItemDefinition]:
        return [self._items[i] for i in self._shop]

    def in_shop(self, item_id: str) -> bool:
        return item_id in self._shop

    # ---- Construction ----------------------------------------------------
    @classmethod
    def from_dict(cls, data: Dict[str, Any], *, validate: bool = True) -> "Catalog":
        if validate:
            validate_catalog_data(data)
        catalog = cls(
            items=[_item_from_raw(r) for r in data.get("items", [])],
            enemies=[_enemy_from_raw(r) for r in data.get("enemies", [])],
            spawn_pools=[
                SpawnPool(min_tier=int(p["min_tier"]), enemies=tuple(p["enemies"]))
                for p in data.get("spawn_pools", [])
            ],
            shop=data.get("shop", ()),
        )
        logger.debug(
            "Catalog built: %d items, %d enemies, %d spawn pools",
            len(catalog._items),
            len(catalog._enemies),
            len(catalog._pools),
        )
        return catalog

    @classmethod
    def from_yaml(cls, path: os.PathLike | str, *, validate: bool = True) -> "Catalog":
        p = Path(path)
        if not p.exists():
            raise FileNotFoundError(p)
        with p.open("r", encoding="utf-8") as fh:
            data = yaml.safe_load(fh) or {}
        logger.info("Loaded catalog from %s", p)
        return cls.from_dict(data, validate=validate)


@lru_cache(maxsize=1)
def default_catalog() -> Catalog:
    """The catalog bundled with the package."""
    text = resources.files(_PKG).joinpath("catalog.yaml").read_text(encoding="utf-8")
    return Catalog.from_dict(yaml.safe_load(text))
