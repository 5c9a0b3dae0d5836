from __future__ import annotations

import random

import pytest

from labraid.exceptions import (
    ContainerEmptyError,
    InsufficientCreditsError,
    InventoryError,
    InventoryFullError,
    ItemNotFoundError,
    SecureContainerFullError,
    WrongItemTypeError,
)
from labraid.player.inventory import InventoryManager, ItemSource, fuzzy_find
from labraid.player.state import PlayerState


@pytest.fixture
def player():
    return PlayerState()


@pytest.fixture
def manager(player, catalog):
    return InventoryManager(player, catalog)


def _give(player, catalog, *ids):
    for item_id in ids:
        player.inventory.append(catalog.item(item_id))


def test_fuzzy_find_rules(catalog):
    items = [catalog.item("coffee"), catalog.item("wire"), catalog.item("sandwich")]
    assert fuzzy_find(items, "COFFEE") == 0
    assert fuzzy_find(items, "wi") == 1  # "Copper Wire" before "Stale Sandwich"
    assert fuzzy_find(items, "nope") is None
    assert fuzzy_find(items, "") is None
    assert fuzzy_find(items, "   ") is None
    assert fuzzy_find(items, None) is None


def test_buy_spends_credits(manager, player):
    item = manager.buy("energy_bar")
    assert player.credits == 60
    assert player.inventory == [item]


def test_buy_rejected_when_full(manager, player, catalog):
    _give(player, catalog, *["wire"] * 10)
    with pytest.raises(InventoryFullError):
        manager.buy("energy_bar")
    assert player.credits == 100
    assert len(player.inventory) == 10


def test_buy_rejected_when_too_expensive(manager, player):
    with pytest.raises(InsufficientCreditsError):
        manager.buy("laser_pointer")
    assert player.credits == 100
    assert player.inventory == []


@pytest.mark.parametrize("item_id, refund", [("pipette", 50), ("burnt_resistor", 2), ("a100", 2500)])
def test_sell_refunds_half_rounded_down(manager, player, catalog, item_id, refund):
    _give(player, catalog, item_id)
    item, got = manager.sell(0)
    assert item.id == item_id
    assert got == refund
    assert player.credits == 100 + refund
    assert player.inventory == []


def test_sell_equipped_weapon_unequips(manager, player, catalog):
    _give(player, catalog, "pipette")
    manager.equip("pipette")
    manager.sell(0)
    assert player.equipped_weapon is None


def test_sell_from_secure_container(manager, player, catalog):
    player.secure_container.append(catalog.item("hard_drive"))
    _, refund = manager.sell(0, ItemSource.SECURE)
    assert refund == 400
    assert player.secure_container == []


def test_sell_bad_index(manager, player):
    with pytest.raises(ItemNotFoundError):
        manager.sell(3)
    assert player.credits == 100


def test_equip_requires_weapon(manager, player, catalog):
    _give(player, catalog, "coffee", "scalpel")
    with pytest.raises(WrongItemTypeError):
        manager.equip("coffee")
    with pytest.raises(ItemNotFoundError):
        manager.equip("laser")
    assert player.equipped_weapon is None
    assert manager.equip("rusty").id == "scalpel"
    assert player.attack_damage(5) == 17


def test_secure_rejected_when_container_full(manager, player, catalog):
    player.secure_container.append(catalog.item("hard_drive"))
    _give(player, catalog, "a100", "coffee")
    before = list(player.inventory)
    with pytest.raises(SecureContainerFullError):
        manager.secure("nvidia")
    assert player.inventory == before
    assert [i.id for i in player.secure_container] == ["hard_drive"]


def test_secure_moves_item_and_unequips(manager, player, catalog):
    _give(player, catalog, "pipette")
    manager.equip("pipette")
    manager.secure("pip")
    assert player.inventory == []
    assert player.equipped_weapon is None
    assert player.secure_container[0].id == "pipette"


def test_equip_then_drop_clears_weapon(manager, player, catalog):
    _give(player, catalog, "scalpel")
    manager.equip("scalpel")
    dropped = manager.drop("scalpel")
    assert dropped.id == "scalpel"
    assert player.equipped_weapon is None


def test_drop_unknown_item(manager, player, catalog):
    _give(player, catalog, "wire")
    with pytest.raises(ItemNotFoundError):
        manager.drop("pizza")
    assert len(player.inventory) == 1


def test_consume_clamps_and_removes(manager, player, catalog):
    player.hp = 90
    _give(player, catalog, "sandwich")
    result = manager.consume("stale")
    assert result.hp_gained == 10
    assert player.hp == 100
    assert player.inventory == []


def test_consume_defaults_to_first_consumable(manager, player, catalog):
    player.sanity = 50
    _give(player, catalog, "wire", "coffee", "energy_bar")
    result = manager.consume()
    assert result.item.id == "coffee"
    assert player.sanity == 75
    assert [i.id for i in player.inventory] == ["wire", "energy_bar"]


def test_consume_rejects_non_consumables(manager, player, catalog):
    _give(player, catalog, "wire")
    with pytest.raises(WrongItemTypeError):
        manager.consume("wire")
    assert len(player.inventory) == 1
    with pytest.raises(ItemNotFoundError):
        manager.consume()


def test_unsecure_rules(manager, player, catalog):
    with pytest.raises(ContainerEmptyError):
        manager.unsecure()
    player.secure_container.append(catalog.item("hard_drive"))
    _give(player, catalog, *["wire"] * 10)
    with pytest.raises(InventoryFullError):
        manager.unsecure()
    player.inventory.pop()
    with pytest.raises(ItemNotFoundError):
        manager.unsecure("pizza")
    assert manager.unsecure().id == "hard_drive"
    assert player.secure_container == []


def test_invariants_hold_under_random_operations(manager, player, catalog):
    rnd = random.Random(8)
    names = ["coffee", "pip", "scal", "wire", "bar", "drive", "", "zzz"]
    shop = [i.id for i in catalog.shop_items()] + ["wire"]
    for _ in range(500):
        op = rnd.choice(["buy", "sell", "equip", "consume", "secure", "unsecure", "drop", "pick"])
        try:
            if op == "buy":
                player.credits += rnd.choice([0, 0, 100])
                manager.buy(rnd.choice(shop))
            elif op == "sell":
                manager.sell(rnd.randrange(12), rnd.choice(list(ItemSource)))
            elif op == "pick":
                manager.pick_up(catalog.item(rnd.choice(shop)))
            elif op == "unsecure":
                manager.unsecure(rnd.choice(names))
            else:
                getattr(manager, op)(rnd.choice(names))
        except InventoryError:
            pass
        assert len(player.inventory) <= player.max_inventory_size
        assert len(player.secure_container) <= player.secure_capacity
        assert player.credits >= 0
        if player.equipped_weapon is not None:
            assert player.equipped_weapon in player.inventory
