from __future__ import annotations

import copy
from pathlib import Path

import pytest
import yaml

from labraid.data.catalog import (
    Catalog,
    EnemyTemplate,
    ItemType,
    Rarity,
    SpawnPool,
    default_catalog,
    validate_catalog_data,
)
from labraid.exceptions import CatalogError


def _raw():
    return {
        "items": [
            {"id": "coffee", "name": "Instant Coffee", "rarity": "Common", "type": "Consumable",
             "value": 50, "effect": {"sanity": 25}},
            {"id": "pipette", "name": "Pipette", "rarity": "Common", "type": "Weapon",
             "value": 100, "effect": {"hp": 8}},
        ],
        "enemies": [
            {"id": "undergrad", "name": "Undergrad", "hp": 20, "max_hp": 20, "damage": 3,
             "sanity_damage": 5, "sight_range": 5, "loot_table": ["coffee"]},
        ],
        "spawn_pools": [{"min_tier": 0, "enemies": ["undergrad"]}],
        "shop": ["coffee"],
    }


def test_default_catalog_contents():
    cat = default_catalog()
    assert len(cat.items()) == 14
    assert {e.id for e in cat.enemies()} == {"undergrad", "postdoc", "professor"}
    assert cat.enemy("professor").boss is True
    assert cat.enemy("undergrad").boss is False
    assert cat.item("a100").rarity is Rarity.LEGENDARY


def test_weapon_bonus_comes_from_effect_hp():
    cat = default_catalog()
    assert cat.item("pipette").weapon_bonus == 8
    assert cat.item("soldering_iron").weapon_bonus == 35
    # A consumable's hp effect is a heal, not a damage bonus
    assert cat.item("sandwich").weapon_bonus == 0


@pytest.mark.parametrize(
    "tier, expected",
    [
        (0, ("undergrad",)),
        (1, ("undergrad",)),
        (2, ("undergrad", "postdoc")),
        (3, ("undergrad", "postdoc")),
        (4, ("postdoc", "professor")),
        (9, ("postdoc", "professor")),
    ],
)
def test_enemy_pool_is_tier_gated(tier, expected):
    assert default_catalog().enemy_pool(tier) == expected


def test_common_items_exclude_valuables():
    common = default_catalog().common_items(1000)
    ids = {i.id for i in common}
    assert "soldering_iron" not in ids
    assert "a100" not in ids
    assert "nature_paper" not in ids
    assert all(i.value < 1000 for i in common)


def test_shop_stock_resolves_to_items():
    cat = default_catalog()
    assert cat.in_shop("energy_bar")
    assert not cat.in_shop("a100")
    assert all(i.type in (ItemType.CONSUMABLE, ItemType.WEAPON) for i in cat.shop_items())


def test_unknown_ids_raise_catalog_error():
    cat = default_catalog()
    with pytest.raises(CatalogError):
        cat.item("unobtainium")
    with pytest.raises(CatalogError):
        cat.enemy("dean")


def test_schema_rejects_missing_required_field():
    data = _raw()
    del data["items"][0]["id"]
    with pytest.raises(CatalogError) as ei:
        Catalog.from_dict(data)
    assert "validation failed" in str(ei.value).lower()
    assert "id" in ei.value.to_human()


def test_schema_rejects_unknown_rarity():
    data = _raw()
    data["items"][1]["rarity"] = "Mythic"
    with pytest.raises(CatalogError):
        validate_catalog_data(data)


def test_dangling_loot_reference_is_rejected():
    data = copy.deepcopy(_raw())
    data["enemies"][0]["loot_table"] = ["ghost_item"]
    with pytest.raises(CatalogError) as ei:
        Catalog.from_dict(data)
    assert "ghost_item" in str(ei.value)


def test_duplicate_ids_are_rejected():
    data = _raw()
    data["items"].append(dict(data["items"][0]))
    with pytest.raises(CatalogError):
        Catalog.from_dict(data)


def test_direct_construction_without_loot():
    cat = Catalog(
        items=[],
        enemies=[EnemyTemplate("rat", "Lab Rat", 5, 5, 1, 0, 3)],
        spawn_pools=[SpawnPool(0, ("rat",))],
    )
    assert cat.enemy("rat").loot_table == ()
    assert cat.enemy_pool(0) == ("rat",)


def test_from_yaml_roundtrip(tmp_path: Path):
    p = tmp_path / "cat.yaml"
    p.write_text(yaml.safe_dump(_raw()), encoding="utf-8")
    cat = Catalog.from_yaml(p)
    assert cat.item("coffee").effect.sanity_delta == 25
    assert cat.enemy("undergrad").symbol == "U"


def test_from_yaml_missing_file(tmp_path: Path):
    with pytest.raises(FileNotFoundError):
        Catalog.from_yaml(tmp_path / "missing.yaml")
