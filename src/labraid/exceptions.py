class LabRaidError(Exception):
    """Base exception for the Lab Raid project."""


class ConfigError(LabRaidError):
    """Raised when engine configuration values are invalid."""


class CatalogError(LabRaidError):
    """Raised for unknown catalog ids or invalid catalog data."""

    def __init__(self, message: str, errors=None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])

    def to_human(self) -> str:
        parts = [str(self)]
        for e in self.errors:
            path = "/".join(str(p) for p in e.path) or "<root>"
            parts.append(f" - at {path}: {e.message}")
        return "\n".join(parts)


class InvalidActionError(LabRaidError):
    """Raised when an operation is not allowed in the current game phase."""


class InventoryError(LabRaidError):
    """Base class for rejected inventory transactions."""


class InventoryFullError(InventoryError):
    """Raised when the backpack has no free slot."""


class SecureContainerFullError(InventoryError):
    """Raised when the secure container already holds its single item."""


class ContainerEmptyError(InventoryError):
    """Raised when retrieving from an empty secure container."""


class InsufficientCreditsError(InventoryError):
    """Raised when a purchase costs more credits than the player has."""


class ItemNotFoundError(InventoryError):
    """Raised when a name or index does not resolve to a carried item."""


class WrongItemTypeError(InventoryError):
    """Raised when an item is used for an action its type does not allow."""
