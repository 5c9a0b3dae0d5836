from .commands import Command, Verb, parse_command
from .game import GameEngine, GamePhase

__all__ = ["Command", "GameEngine", "GamePhase", "Verb", "parse_command"]
