from .inventory import ConsumeResult, InventoryManager, ItemSource, fuzzy_find
from .state import PlayerSnapshot, PlayerState

__all__ = [
    "ConsumeResult",
    "InventoryManager",
    "ItemSource",
    "PlayerSnapshot",
    "PlayerState",
    "fuzzy_find",
]
