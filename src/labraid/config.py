from __future__ import annotations

import dataclasses
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, Optional

import yaml

from .exceptions import ConfigError

logger = logging.getLogger(__name__)

ENV_PREFIX = "LABRAID_"

_TRUE_WORDS = frozenset({"1", "true", "yes", "on"})
_FALSE_WORDS = frozenset({"0", "false", "no", "off"})


def _as_flag(value: str) -> bool:
    """Env switch such as ``LABRAID_AUTO_COMBAT_STOP_ON_KILL=off``; unknown words are errors."""
    word = value.strip().lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"expected one of {sorted(_TRUE_WORDS | _FALSE_WORDS)}")


def _as_seed(value: Any) -> Optional[int]:
    if value is None:
        return None
    if isinstance(value, str) and value.strip().lower() in {"", "none", "null"}:
        return None
    return int(value)


@dataclass
class EngineConfig:
    """Every tunable constant of the raid simulation.

    Values can be layered from (lowest to highest precedence): dataclass
    defaults < YAML file < ``LABRAID_*`` environment variables.
    """

    # Room generation
    room_min_size: int = 8
    room_max_size: int = 13
    interior_wall_chance: float = 0.10
    floor_loot_chance: float = 0.05
    common_value_threshold: int = 1000
    enemy_base_chance: float = 0.02
    enemy_tier_scaling: float = 0.015
    grid_size: int = 3

    # Perception / AI
    vision_radius: int = 6
    idle_chance: float = 0.30

    # Combat
    base_damage: int = 5
    loot_drop_chance: float = 0.60
    auto_combat_min_hp: int = 20
    auto_combat_delay: float = 0.5
    auto_combat_stop_on_kill: bool = True

    # Player
    max_hp: int = 100
    max_sanity: int = 100
    starting_credits: int = 100
    max_inventory_size: int = 10
    secure_capacity: int = 1
    respawn_hp: int = 50
    respawn_sanity: int = 50
    rest_cost: int = 20

    # Engine
    seed: Optional[int] = None
    log_capacity: int = 1000

    def validate(self) -> None:
        """Raise ConfigError for values the simulation cannot run with."""
        if self.room_min_size < 3:
            raise ConfigError("room_min_size must be >= 3 to keep a walled border")
        if self.room_min_size > self.room_max_size:
            raise ConfigError(
                f"room_min_size ({self.room_min_size}) exceeds room_max_size ({self.room_max_size})"
            )
        for name in ("interior_wall_chance", "floor_loot_chance", "enemy_base_chance",
                     "enemy_tier_scaling", "idle_chance", "loot_drop_chance"):
            value = getattr(self, name)
            if not 0.0 <= value <= 1.0:
                raise ConfigError(f"{name} must be within [0, 1], got {value}")
        if self.grid_size < 2:
            raise ConfigError("grid_size must be >= 2 so start and exit differ")
        if self.vision_radius < 0:
            raise ConfigError("vision_radius must be >= 0")
        if self.auto_combat_delay < 0:
            raise ConfigError("auto_combat_delay must be >= 0")
        for name in ("max_hp", "max_sanity", "max_inventory_size", "secure_capacity",
                     "respawn_hp", "respawn_sanity", "log_capacity"):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive")
        if self.starting_credits < 0 or self.rest_cost < 0 or self.base_damage < 0:
            raise ConfigError("credits, rest_cost and base_damage cannot be negative")

    # ------------------------ Loading & Overrides ------------------------
    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "EngineConfig":
        allowed = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - allowed)
        if unknown:
            logger.warning("Ignoring unknown config keys: %s", ", ".join(unknown))
        filtered = {k: v for k, v in data.items() if k in allowed}
        cfg = cls(**filtered)
        cfg.validate()
        return cfg

    @classmethod
    def from_yaml_file(cls, path: Path) -> Dict[str, Any]:
        if not path.exists():
            raise ConfigError(f"Config file not found: {path}")
        with path.open("r", encoding="utf-8") as f:
            raw = yaml.safe_load(f) or {}
        if not isinstance(raw, dict):
            raise ConfigError(f"Config file {path} must contain a mapping at top level")
        # Allow grouping under sections, e.g. [generation], [combat]
        flat: Dict[str, Any] = {}
        for k, v in raw.items():
            if isinstance(v, dict):
                flat.update(v)
            else:
                flat[k] = v
        logger.debug("Loaded %d config keys from %s", len(flat), path)
        return flat

    @classmethod
    def from_env(cls, env: Optional[Dict[str, str]] = None) -> Dict[str, Any]:
        env = os.environ if env is None else env
        casters: Dict[type, Callable[[Any], Any]] = {int: int, float: float, bool: _as_flag}
        out: Dict[str, Any] = {}
        for f in dataclasses.fields(cls):
            key = ENV_PREFIX + f.name.upper()
            if key not in env or env[key] == "":
                continue
            default_type = type(f.default)
            caster = _as_seed if f.name == "seed" else casters.get(default_type, str)
            try:
                out[f.name] = caster(env[key])
            except ValueError as exc:
                raise ConfigError(f"Invalid env for {key}={env[key]!r}: {exc}") from exc
        return out

    @classmethod
    def from_sources(
        cls,
        *,
        env: Optional[Dict[str, str]] = None,
        file_path: Optional[Path | str] = None,
        **overrides: Any,
    ) -> "EngineConfig":
        env = os.environ if env is None else env
        data: Dict[str, Any] = {}
        chosen = file_path or env.get(ENV_PREFIX + "CONFIG_FILE")
        if chosen:
            data.update(cls.from_yaml_file(Path(chosen).expanduser()))
        data.update(cls.from_env(env))
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.from_dict(data)
