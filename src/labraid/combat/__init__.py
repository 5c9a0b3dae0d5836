from .auto import AutoCombat, StopReason
from .resolver import AttackOutcome, CombatResolver

__all__ = ["AttackOutcome", "AutoCombat", "CombatResolver", "StopReason"]
