from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, Iterator, List, Optional, Sequence, Tuple

from .tiles import Coord, Tile, TileKind

logger = logging.getLogger(__name__)


@dataclass
class Entity:
    """An enemy instance living in exactly one room."""

    id: str
    template_id: str
    coord: Coord
    hp: int
    max_hp: int
    alerted: bool = False

    @property
    def alive(self) -> bool:
        return self.hp > 0

    def move_to(self, coord: Coord) -> None:
        self.coord = coord


@dataclass(frozen=True)
class RoomSnapshot:
    """Read-only view of a room handed to the presentation layer."""

    id: str
    width: int
    height: int
    difficulty_tier: int
    tiles: Tuple[Tile, ...]
    entities: Tuple[Entity, ...]

    def tile_at(self, x: int, y: int) -> Tile:
        return self.tiles[y * self.width + x]


@dataclass
class Room:
    """
    A walled rectangle of tiles stored row-major, plus the entities inside it.

    Entities are kept in spawn order; that order is the order in which they
    act during an enemy turn. All tile access is bounds-checked.
    """

    id: str
    width: int
    height: int
    tiles: List[Tile]
    difficulty_tier: int = 0
    entities: List[Entity] = field(default_factory=list)

    def __post_init__(self) -> None:
        if self.width < 3 or self.height < 3:
            raise ValueError("Room must be at least 3x3 to maintain wall borders")
        if len(self.tiles) != self.width * self.height:
            raise ValueError(
                f"Room {self.id}: expected {self.width * self.height} tiles, got {len(self.tiles)}"
            )

    @classmethod
    def filled(cls, room_id: str, width: int, height: int, kind: TileKind = TileKind.FLOOR,
               difficulty_tier: int = 0) -> "Room":
        """An open room of ``kind`` tiles with a wall border."""
        tiles = []
        for y in range(height):
            for x in range(width):
                border = x in (0, width - 1) or y in (0, height - 1)
                tiles.append(Tile(Coord(x, y), TileKind.WALL if border else kind))
        return cls(room_id, width, height, tiles, difficulty_tier)

    @classmethod
    def from_ascii(cls, room_id: str, rows: Sequence[str], difficulty_tier: int = 0) -> "Room":
        """Build a room from glyph rows ('#', '.', 'S', 'E'). Doors are wired separately."""
        if not rows or any(len(r) != len(rows[0]) for r in rows):
            raise ValueError("rows must be non-empty and rectangular")
        by_glyph: Dict[str, TileKind] = {k.glyph: k for k in TileKind if k is not TileKind.DOOR}
        tiles = [
            Tile(Coord(x, y), by_glyph[ch])
            for y, row in enumerate(rows)
            for x, ch in enumerate(row)
        ]
        return cls(room_id, len(rows[0]), len(rows), tiles, difficulty_tier)

    # ---- Safety / Bounds -------------------------------------------------
    def in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def is_border(self, x: int, y: int) -> bool:
        return x in (0, self.width - 1) or y in (0, self.height - 1)

    def _index(self, x: int, y: int) -> int:
        if not self.in_bounds(x, y):
            raise IndexError(f"Tile out of bounds: ({x},{y}) not in [0,{self.width})x[0,{self.height})")
        return y * self.width + x

    def tile_at(self, coord: Coord) -> Tile:
        return self.tiles[self._index(coord.x, coord.y)]

    def set_tile(self, tile: Tile) -> None:
        self.tiles[self._index(tile.x, tile.y)] = tile

    def center(self) -> Coord:
        return Coord(self.width // 2, self.height // 2)

    # ---- Query -----------------------------------------------------------
    def tiles_of_kind(self, kind: TileKind) -> List[Tile]:
        return [t for t in self.tiles if t.kind is kind]

    def find_kind(self, kind: TileKind) -> Optional[Tile]:
        for t in self.tiles:
            if t.kind is kind:
                return t
        return None

    def entity_at(self, coord: Coord) -> Optional[Entity]:
        for e in self.entities:
            if e.coord == coord:
                return e
        return None

    def entities_adjacent_to(self, coord: Coord) -> Iterator[Entity]:
        return (e for e in self.entities if e.coord.manhattan(coord) == 1)

    def remove_entity(self, entity_id: str) -> Entity:
        for i, e in enumerate(self.entities):
            if e.id == entity_id:
                return self.entities.pop(i)
        raise KeyError(f"No entity {entity_id} in room {self.id}")

    # ---- Export ----------------------------------------------------------
    def snapshot(self) -> RoomSnapshot:
        return RoomSnapshot(
            id=self.id,
            width=self.width,
            height=self.height,
            difficulty_tier=self.difficulty_tier,
            tiles=tuple(self.tiles),
            entities=tuple(replace(e) for e in self.entities),
        )

    def to_str_lines(self, player: Optional[Coord] = None, *, fog: bool = False,
                     symbols: Optional[Dict[str, str]] = None) -> List[str]:
        """ASCII rendering for logs, tests and the console client.

        With ``fog`` undiscovered tiles render blank and entities only show on
        visible tiles. ``symbols`` maps enemy template ids to glyphs.
        """
        symbols = symbols or {}
        occupants = {e.coord: symbols.get(e.template_id, "e") for e in self.entities}
        lines: List[str] = []
        for y in range(self.height):
            row = []
            for x in range(self.width):
                tile = self.tiles[y * self.width + x]
                c = tile.coord
                if fog and not tile.discovered:
                    row.append(" ")
                elif player is not None and c == player:
                    row.append("@")
                elif c in occupants and (tile.visible or not fog):
                    row.append(occupants[c])
                elif tile.loot is not None and tile.kind is TileKind.FLOOR:
                    row.append("$")
                else:
                    row.append(tile.kind.glyph)
            lines.append("".join(row))
        return lines
