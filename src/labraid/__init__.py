"""
Lab Raid package root.

Turn-based fog-of-war raid simulation: procedural rooms wired by doors,
line-of-sight visibility, enemy perception, combat, loot and inventory.
Presentation is left to callers; the engine consumes commands and emits
log events plus read-only snapshots.
"""

from importlib.metadata import version, PackageNotFoundError

__all__ = ["__version__"]

try:
    __version__ = version("lab-raid")
except PackageNotFoundError:  # pragma: no cover - during tests without packaging
    __version__ = "0.0.0"
