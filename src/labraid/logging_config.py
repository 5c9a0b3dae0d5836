import logging
import os
from typing import Optional

LOG_LEVEL_ENV = "LABRAID_LOG_LEVEL"


def resolve_level(value: Optional[str]) -> Optional[int]:
    """Parse a level name such as ``debug`` or a number; None if unrecognised."""
    raw = (value or "").strip()
    if raw.isdigit():
        return int(raw)
    level = logging.getLevelName(raw.upper())
    return level if isinstance(level, int) else None


def configure_logging(default_level: int = logging.WARNING, seed: Optional[int] = None) -> None:
    """Configure the root logger for a console session.

    ``LABRAID_LOG_LEVEL`` overrides ``default_level``. Every record carries
    the session seed so a logged raid can be replayed with ``--seed``.
    """
    raw = os.getenv(LOG_LEVEL_ENV)
    level = resolve_level(raw) if raw else None
    logging.basicConfig(
        level=default_level if level is None else level,
        format=f"[%(asctime)s] [%(levelname)s] [seed={'-' if seed is None else seed}] %(name)s: %(message)s",
    )
    if raw and level is None:
        logging.getLogger(__name__).warning("Ignoring unknown %s=%r", LOG_LEVEL_ENV, raw)
