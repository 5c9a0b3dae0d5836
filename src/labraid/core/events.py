from __future__ import annotations

import logging
from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Iterable, List, Optional

logger = logging.getLogger(__name__)


class EventKind(str, Enum):
    INFO = "info"
    COMBAT = "combat"
    LOOT = "loot"
    DANGER = "danger"
    STORY = "story"
    COMMAND = "command-echo"


@dataclass(frozen=True)
class LogEvent:
    """A single player-facing log entry.

    Attributes:
        seq: Position in the log, starting at 1. Never reused, even after old
            entries fall off the capacity window.
        kind: Semantic category used by the presentation layer for styling.
        message: Human-readable text.
        timestamp: Wall-clock time of emission, ``HH:MM:SS``.
    """

    seq: int
    kind: EventKind
    message: str
    timestamp: str

    def to_dict(self) -> dict:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


class EventLog:
    """Append-only in-memory log of game events.

    - Keeps a finite history (capacity); the oldest entries are dropped first.
    - ``since(seq)`` returns everything emitted after a given sequence number,
      which is how the engine reports the events produced by one command.
    """

    def __init__(self, capacity: int = 1000) -> None:
        if capacity <= 0:
            raise ValueError("capacity must be positive")
        self._capacity = capacity
        self._events: List[LogEvent] = []
        self._seq = 0
        logger.debug("EventLog initialized with capacity=%d", capacity)

    @property
    def capacity(self) -> int:
        return self._capacity

    @property
    def last_seq(self) -> int:
        return self._seq

    def __len__(self) -> int:  # pragma: no cover - trivial
        return len(self._events)

    def add(self, message: str, kind: EventKind = EventKind.INFO, *, timestamp: Optional[str] = None) -> LogEvent:
        self._seq += 1
        ev = LogEvent(
            seq=self._seq,
            kind=EventKind(kind),
            message=message,
            timestamp=timestamp or datetime.now().strftime("%H:%M:%S"),
        )
        self._events.append(ev)
        if len(self._events) > self._capacity:
            dropped = len(self._events) - self._capacity
            del self._events[0:dropped]
            logger.debug("EventLog capacity exceeded, dropped=%d old events", dropped)
        logger.debug("Log [%s] %s", ev.kind.value, ev.message)
        return ev

    def events(self) -> List[LogEvent]:
        return list(self._events)

    def since(self, seq: int) -> List[LogEvent]:
        return [e for e in self._events if e.seq > seq]

    def get_recent(self, n: int) -> List[LogEvent]:
        if n <= 0:
            return []
        return self._events[-n:]

    def of_kind(self, kind: EventKind) -> Iterable[LogEvent]:
        return (e for e in self._events if e.kind == kind)

    def messages(self) -> List[str]:
        return [e.message for e in self._events]
