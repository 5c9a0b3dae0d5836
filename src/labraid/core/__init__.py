from .events import EventKind, EventLog, LogEvent
from .rng import RNG

__all__ = ["EventKind", "EventLog", "LogEvent", "RNG"]
