from __future__ import annotations

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional

from ..data.catalog import ItemDefinition


class TileKind(Enum):
    """Dungeon tile kinds.

    - WALL: blocks movement and sight
    - DOOR: walkable link to another room; blocks sight like a wall
    - FLOOR / START / EXIT: walkable open tiles
    """

    FLOOR = "FLOOR"
    WALL = "WALL"
    DOOR = "DOOR"
    START = "START"
    EXIT = "EXIT"

    @property
    def blocks_sight(self) -> bool:
        return self in (TileKind.WALL, TileKind.DOOR)

    @property
    def glyph(self) -> str:
        return {
            TileKind.FLOOR: ".",
            TileKind.WALL: "#",
            TileKind.DOOR: "+",
            TileKind.START: "S",
            TileKind.EXIT: "E",
        }[self]


@dataclass(frozen=True)
class Coord:
    """Room-local integer coordinate; (0,0) is top-left, y grows down."""

    x: int
    y: int

    def manhattan(self, other: "Coord") -> int:
        return abs(self.x - other.x) + abs(self.y - other.y)

    def offset(self, dx: int, dy: int) -> "Coord":
        return Coord(self.x + dx, self.y + dy)


@dataclass(frozen=True)
class DoorTarget:
    """Where a door leads: another room's id and the arrival cell inside it."""

    room_id: str
    coord: Coord


@dataclass(frozen=True)
class Tile:
    coord: Coord
    kind: TileKind = TileKind.FLOOR
    discovered: bool = False
    visible: bool = False
    loot: Optional[ItemDefinition] = None
    door_target: Optional[DoorTarget] = None

    def __post_init__(self) -> None:
        if (self.kind is TileKind.DOOR) != (self.door_target is not None):
            raise ValueError(f"Tile at {self.coord}: door_target must be set iff kind is DOOR")

    @property
    def x(self) -> int:
        return self.coord.x

    @property
    def y(self) -> int:
        return self.coord.y

    @property
    def walkable(self) -> bool:
        return self.kind is not TileKind.WALL

    def with_kind(self, kind: TileKind) -> "Tile":
        return replace(self, kind=kind, door_target=None)

    def as_door(self, target: DoorTarget) -> "Tile":
        return replace(self, kind=TileKind.DOOR, door_target=target, loot=None)

    def with_loot(self, loot: Optional[ItemDefinition]) -> "Tile":
        return replace(self, loot=loot)
