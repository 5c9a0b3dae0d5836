from .catalog import (
    Catalog,
    EnemyTemplate,
    ItemDefinition,
    ItemEffect,
    ItemType,
    Rarity,
    SpawnPool,
    default_catalog,
)

__all__ = [
    "Catalog",
    "EnemyTemplate",
    "ItemDefinition",
    "ItemEffect",
    "ItemType",
    "Rarity",
    "SpawnPool",
    "default_catalog",
]
