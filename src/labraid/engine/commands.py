"""Raid command grammar.

A command is a case-insensitive verb optionally followed by free text. Verbs
are looked up in an ordered synonym table; the first verb listing a word
wins, so ``w`` resolves to north rather than west.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple


class Verb(Enum):
    NORTH = "north"
    SOUTH = "south"
    EAST = "east"
    WEST = "west"
    SEARCH = "search"
    ATTACK = "attack"
    FIGHT = "fight"
    CONSUME = "eat"
    DROP = "drop"
    SECURE = "secure"
    UNSECURE = "unsecure"
    EQUIP = "equip"
    SCAN = "scan"
    STATUS = "status"
    EXTRACT = "extract"
    HELP = "help"
    UNKNOWN = "unknown"


SYNONYMS: List[Tuple[Verb, Tuple[str, ...]]] = [
    (Verb.NORTH, ("north", "n", "up", "w")),
    (Verb.SOUTH, ("south", "s", "down")),
    (Verb.EAST, ("east", "e", "right", "d")),
    (Verb.WEST, ("west", "w", "left", "a")),
    (Verb.SEARCH, ("search", "f", "scavenge")),
    (Verb.ATTACK, ("attack", "space", "k")),
    (Verb.FIGHT, ("fight", "kill", "auto")),
    (Verb.CONSUME, ("eat", "consume", "drink")),
    (Verb.DROP, ("drop", "discard")),
    (Verb.SECURE, ("secure", "save")),
    (Verb.UNSECURE, ("unsecure", "retrieve")),
    (Verb.EQUIP, ("equip", "use")),
    (Verb.SCAN, ("scan", "look")),
    (Verb.STATUS, ("status", "me", "stats")),
    (Verb.EXTRACT, ("extract", "exit")),
    (Verb.HELP, ("help", "h", "?")),
]

MOVES: Dict[Verb, Tuple[int, int]] = {
    Verb.NORTH: (0, -1),
    Verb.SOUTH: (0, 1),
    Verb.EAST: (1, 0),
    Verb.WEST: (-1, 0),
}


def _build_lookup() -> Dict[str, Verb]:
    lookup: Dict[str, Verb] = {}
    for verb, words in SYNONYMS:
        for word in words:
            # First listing wins
            lookup.setdefault(word, verb)
    return lookup


_LOOKUP = _build_lookup()


@dataclass(frozen=True)
class Command:
    verb: Verb
    word: str
    arg: str = ""
    raw: str = ""

    @property
    def is_move(self) -> bool:
        return self.verb in MOVES

    @property
    def delta(self) -> Tuple[int, int]:
        return MOVES[self.verb]


def resolve_verb(word: str) -> Verb:
    return _LOOKUP.get(word.lower(), Verb.UNKNOWN)


def parse_command(text: str) -> Optional[Command]:
    """Split ``text`` into verb and argument. Blank input yields None."""
    parts = text.strip().split()
    if not parts:
        return None
    word = parts[0].lower()
    return Command(resolve_verb(word), word, " ".join(parts[1:]), text.strip())


HELP_TEXT = (
    "CMDS: MOVE [N/S/E/W], ATTACK, FIGHT, SEARCH, EAT [ITEM], DROP [ITEM], "
    "SECURE [ITEM], UNSECURE [ITEM], EQUIP [ITEM], SCAN, STATUS, EXTRACT"
)
