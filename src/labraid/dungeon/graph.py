from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple

from ..config import EngineConfig
from ..core.rng import RNG
from ..data.catalog import Catalog
from .generator import RoomGenerator
from .room import Room
from .tiles import Coord, DoorTarget, TileKind

logger = logging.getLogger(__name__)


class Direction(Enum):
    EAST = "E"
    SOUTH = "S"


def room_id_for(gx: int, gy: int) -> str:
    return f"room_{gx}_{gy}"


@dataclass
class DungeonState:
    """All rooms of one raid plus where the player stands.

    Rooms reference each other only through ids stored on door tiles.
    """

    rooms: Dict[str, Room]
    current_room_id: str
    player: Coord
    start_room_id: str
    exit_room_id: str
    grid: List[List[str]] = field(default_factory=list)

    @property
    def current_room(self) -> Room:
        return self.rooms[self.current_room_id]

    def neighbors(self, room_id: str) -> List[str]:
        """Ids of rooms reachable through one door, in tile order."""
        out: List[str] = []
        for tile in self.rooms[room_id].tiles_of_kind(TileKind.DOOR):
            assert tile.door_target is not None
            if tile.door_target.room_id not in out:
                out.append(tile.door_target.room_id)
        return out

    def reachable_room_ids(self, from_id: Optional[str] = None) -> Set[str]:
        """BFS over door links starting at ``from_id`` (default: start room)."""
        start = from_id or self.start_room_id
        seen = {start}
        dq = deque([start])
        while dq:
            rid = dq.popleft()
            for nxt in self.neighbors(rid):
                if nxt not in seen:
                    seen.add(nxt)
                    dq.append(nxt)
        return seen


class DungeonGraph:
    """Lays rooms out on an N x N grid and wires doors between neighbours.

    A room's tier is its Manhattan distance from the origin cell. The origin
    is the start room, the opposite corner the exit room. Every east and
    south neighbour pair is connected exactly once, so the result is a grid
    graph and every room is reachable from the start.
    """

    def __init__(
        self,
        catalog: Catalog,
        config: Optional[EngineConfig] = None,
        rng: Optional[RNG] = None,
        generator: Optional[RoomGenerator] = None,
    ) -> None:
        self.config = config or EngineConfig()
        self.rng = rng or RNG(self.config.seed)
        self.generator = generator or RoomGenerator(catalog, self.config, self.rng)

    def build(self) -> DungeonState:
        n = self.config.grid_size
        rooms: Dict[str, Room] = {}
        grid = [["" for _ in range(n)] for _ in range(n)]

        for gy in range(n):
            for gx in range(n):
                rid = room_id_for(gx, gy)
                is_start = gx == 0 and gy == 0
                is_exit = gx == n - 1 and gy == n - 1
                rooms[rid] = self.generator.generate(rid, gx + gy, is_start, is_exit)
                grid[gy][gx] = rid

        for gy in range(n):
            for gx in range(n):
                current = rooms[grid[gy][gx]]
                if gx < n - 1:
                    self.connect(current, rooms[grid[gy][gx + 1]], Direction.EAST)
                if gy < n - 1:
                    self.connect(current, rooms[grid[gy + 1][gx]], Direction.SOUTH)

        start_id = grid[0][0]
        exit_id = grid[n - 1][n - 1]
        start_tile = rooms[start_id].find_kind(TileKind.START)
        player = start_tile.coord if start_tile is not None else Coord(1, 1)
        logger.info("Built %dx%d dungeon; start=%s exit=%s", n, n, start_id, exit_id)
        return DungeonState(rooms, start_id, player, start_id, exit_id, grid)

    @staticmethod
    def connect(room_a: Room, room_b: Room, direction: Direction) -> Tuple[Coord, Coord]:
        """Turn the shared-edge midpoints of two rooms into linked doors.

        ``room_b`` lies east or south of ``room_a``. Each door targets the cell
        one step inside the other room, aligned with that room's midpoint.
        Returns the two door coordinates (in a, in b).
        """
        if direction is Direction.EAST:
            y1, y2 = room_a.height // 2, room_b.height // 2
            door_a, door_b = Coord(room_a.width - 1, y1), Coord(0, y2)
            arrive_b, arrive_a = Coord(1, y2), Coord(room_a.width - 2, y1)
        elif direction is Direction.SOUTH:
            x1, x2 = room_a.width // 2, room_b.width // 2
            door_a, door_b = Coord(x1, room_a.height - 1), Coord(x2, 0)
            arrive_b, arrive_a = Coord(x2, 1), Coord(x1, room_a.height - 2)
        else:  # pragma: no cover - enum is exhaustive
            raise ValueError(f"Unsupported direction: {direction}")

        room_a.set_tile(room_a.tile_at(door_a).as_door(DoorTarget(room_b.id, arrive_b)))
        room_b.set_tile(room_b.tile_at(door_b).as_door(DoorTarget(room_a.id, arrive_a)))
        # The arrival cells double as the only approach to each door; they
        # start out walkable and unoccupied
        for room, cell in ((room_a, arrive_a), (room_b, arrive_b)):
            tile = room.tile_at(cell)
            if tile.kind is TileKind.WALL:
                room.set_tile(tile.with_kind(TileKind.FLOOR))
            squatter = room.entity_at(cell)
            if squatter is not None:
                room.remove_entity(squatter.id)
                logger.debug("Removed %s from arrival cell %s of %s", squatter.id, cell, room.id)
        logger.debug("Connected %s %s -> %s at %s/%s", room_a.id, direction.value, room_b.id, door_a, door_b)
        return door_a, door_b
