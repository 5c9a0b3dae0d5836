from __future__ import annotations

import pytest

from labraid.config import EngineConfig
from labraid.core.rng import RNG
from labraid.data.catalog import default_catalog
from labraid.dungeon.graph import Direction, DungeonGraph, room_id_for
from labraid.dungeon.room import Room
from labraid.dungeon.tiles import Coord, TileKind


def _build(seed, **overrides):
    cfg = EngineConfig(**overrides)
    return DungeonGraph(default_catalog(), cfg, RNG(seed)).build()


@pytest.mark.parametrize("seed", range(8))
def test_every_room_reachable_from_start(seed):
    state = _build(seed)
    assert len(state.rooms) == 9
    assert state.reachable_room_ids() == set(state.rooms)


def test_layout_tiers_start_and_exit():
    state = _build(1)
    assert state.start_room_id == "room_0_0"
    assert state.exit_room_id == "room_2_2"
    assert state.current_room_id == state.start_room_id
    for gy in range(3):
        for gx in range(3):
            assert state.rooms[room_id_for(gx, gy)].difficulty_tier == gx + gy

    starts = [rid for rid, r in state.rooms.items() if r.find_kind(TileKind.START)]
    exits = [rid for rid, r in state.rooms.items() if r.find_kind(TileKind.EXIT)]
    assert starts == ["room_0_0"]
    assert exits == ["room_2_2"]
    assert state.player == state.rooms["room_0_0"].find_kind(TileKind.START).coord


def test_door_counts_follow_grid_position():
    state = _build(2)
    doors = {rid: len(r.tiles_of_kind(TileKind.DOOR)) for rid, r in state.rooms.items()}
    assert doors["room_0_0"] == 2
    assert doors["room_1_0"] == 3
    assert doors["room_1_1"] == 4
    assert doors["room_2_2"] == 2


@pytest.mark.parametrize("seed", range(5))
def test_doors_link_both_ways_onto_walkable_cells(seed):
    state = _build(seed, interior_wall_chance=0.5)
    for rid, room in state.rooms.items():
        for door in room.tiles_of_kind(TileKind.DOOR):
            assert room.is_border(door.x, door.y)
            target = door.door_target
            other = state.rooms[target.room_id]
            arrival = other.tile_at(target.coord)
            assert not other.is_border(arrival.x, arrival.y)
            assert arrival.kind not in (TileKind.WALL, TileKind.DOOR)
            back = [d.door_target.room_id for d in other.tiles_of_kind(TileKind.DOOR)]
            assert rid in back


def test_connect_east_uses_midpoints_and_clears_arrival():
    a = Room.from_ascii("a", [
        "#######",
        "#.....#",
        "#....##",
        "#.....#",
        "#######",
    ])
    b = Room.filled("b", 5, 7)
    door_a, door_b = DungeonGraph.connect(a, b, Direction.EAST)
    assert door_a == Coord(6, 2)
    assert door_b == Coord(0, 3)
    assert a.tile_at(door_a).door_target.room_id == "b"
    assert a.tile_at(door_a).door_target.coord == Coord(1, 3)
    assert b.tile_at(door_b).door_target.coord == Coord(5, 2)
    # The interior wall next to a's door was opened up
    assert a.tile_at(Coord(5, 2)).kind is TileKind.FLOOR


def test_connect_south_aligns_on_x():
    a = Room.filled("a", 9, 5)
    b = Room.filled("b", 7, 6)
    door_a, door_b = DungeonGraph.connect(a, b, Direction.SOUTH)
    assert door_a == Coord(4, 4)
    assert door_b == Coord(3, 0)
    assert a.tile_at(door_a).door_target.coord == Coord(3, 1)
    assert b.tile_at(door_b).door_target.coord == Coord(4, 3)


def test_same_seed_same_dungeon():
    a, b = _build(21), _build(21)
    for rid in a.rooms:
        assert a.rooms[rid].to_str_lines() == b.rooms[rid].to_str_lines()


def test_larger_grid():
    state = _build(4, grid_size=4)
    assert len(state.rooms) == 16
    assert state.exit_room_id == "room_3_3"
    assert state.reachable_room_ids() == set(state.rooms)


def test_connect_clears_enemy_from_arrival_cell(spawn):
    a = Room.filled("a", 7, 5)
    b = Room.filled("b", 7, 5)
    spawn(b, "undergrad", 1, 2)
    keeper = spawn(b, "undergrad", 3, 3)
    DungeonGraph.connect(a, b, Direction.EAST)
    assert b.entity_at(Coord(1, 2)) is None
    assert b.entities == [keeper]


@pytest.mark.parametrize("seed", range(40))
def test_built_doors_never_lead_onto_an_enemy(seed):
    # Crowded rooms make a spawn next to a door midpoint likely
    state = _build(seed, enemy_base_chance=0.6)
    assert any(room.entities for room in state.rooms.values())
    for room in state.rooms.values():
        for door in room.tiles_of_kind(TileKind.DOOR):
            target = door.door_target
            assert state.rooms[target.room_id].entity_at(target.coord) is None


@pytest.mark.parametrize("seed", range(10))
def test_exit_room_can_be_entered_from_each_neighbour(seed):
    state = _build(seed, enemy_base_chance=0.6)
    entrances = [
        door.door_target
        for rid in state.neighbors(state.exit_room_id)
        for door in state.rooms[rid].tiles_of_kind(TileKind.DOOR)
        if door.door_target.room_id == state.exit_room_id
    ]
    assert len(entrances) == 2
    exit_room = state.rooms[state.exit_room_id]
    for target in entrances:
        assert exit_room.entity_at(target.coord) is None
        assert exit_room.tile_at(target.coord).kind is not TileKind.WALL
