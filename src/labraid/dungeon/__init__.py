from .generator import RoomGenerator
from .graph import Direction, DungeonGraph, DungeonState
from .room import Entity, Room, RoomSnapshot
from .tiles import Coord, DoorTarget, Tile, TileKind

__all__ = [
    "Coord",
    "DoorTarget",
    "Direction",
    "DungeonGraph",
    "DungeonState",
    "Entity",
    "Room",
    "RoomGenerator",
    "RoomSnapshot",
    "Tile",
    "TileKind",
]
