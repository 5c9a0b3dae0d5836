from __future__ import annotations

import logging
from pathlib import Path

import pytest

from labraid.config import EngineConfig
from labraid.exceptions import ConfigError
from labraid.logging_config import resolve_level


def test_defaults_match_game_rules():
    cfg = EngineConfig()
    cfg.validate()
    assert (cfg.room_min_size, cfg.room_max_size) == (8, 13)
    assert cfg.vision_radius == 6
    assert cfg.base_damage == 5
    assert cfg.loot_drop_chance == pytest.approx(0.6)
    assert cfg.auto_combat_min_hp == 20
    assert cfg.secure_capacity == 1
    assert cfg.seed is None


def test_env_overrides_are_cast_by_field_type():
    env = {
        "LABRAID_VISION_RADIUS": "4",
        "LABRAID_IDLE_CHANCE": "0.5",
        "LABRAID_AUTO_COMBAT_STOP_ON_KILL": "no",
        "LABRAID_SEED": "42",
    }
    cfg = EngineConfig.from_sources(env=env)
    assert cfg.vision_radius == 4
    assert cfg.idle_chance == pytest.approx(0.5)
    assert cfg.auto_combat_stop_on_kill is False
    assert cfg.seed == 42


def test_yaml_sections_are_flattened_and_env_wins(tmp_path: Path):
    p = tmp_path / "labraid.yaml"
    p.write_text(
        "generation:\n  room_min_size: 5\n  room_max_size: 6\ncombat:\n  base_damage: 7\nseed: 3\n",
        encoding="utf-8",
    )
    cfg = EngineConfig.from_sources(env={"LABRAID_BASE_DAMAGE": "9"}, file_path=p)
    assert (cfg.room_min_size, cfg.room_max_size) == (5, 6)
    assert cfg.base_damage == 9
    assert cfg.seed == 3


def test_config_file_from_env_variable(tmp_path: Path):
    p = tmp_path / "cfg.yaml"
    p.write_text("grid_size: 4\n", encoding="utf-8")
    cfg = EngineConfig.from_sources(env={"LABRAID_CONFIG_FILE": str(p)})
    assert cfg.grid_size == 4


def test_explicit_overrides_beat_everything_but_none_is_ignored():
    cfg = EngineConfig.from_sources(env={"LABRAID_SEED": "1"}, seed=99, auto_combat_delay=None)
    assert cfg.seed == 99
    assert cfg.auto_combat_delay == pytest.approx(0.5)


def test_missing_file_raises(tmp_path: Path):
    with pytest.raises(ConfigError):
        EngineConfig.from_sources(env={}, file_path=tmp_path / "nope.yaml")


def test_invalid_env_value_raises():
    with pytest.raises(ConfigError) as ei:
        EngineConfig.from_sources(env={"LABRAID_GRID_SIZE": "three"})
    assert "LABRAID_GRID_SIZE" in str(ei.value)


@pytest.mark.parametrize(
    "data",
    [
        {"room_min_size": 2},
        {"room_min_size": 10, "room_max_size": 9},
        {"loot_drop_chance": 1.5},
        {"idle_chance": -0.1},
        {"secure_capacity": 0},
        {"grid_size": 1},
    ],
)
def test_validate_rejects_impossible_values(data):
    with pytest.raises(ConfigError):
        EngineConfig.from_dict(data)


def test_unknown_keys_are_ignored_with_warning(caplog):
    with caplog.at_level(logging.WARNING, logger="labraid.config"):
        cfg = EngineConfig.from_dict({"bogus": 1, "vision_radius": 3})
    assert cfg.vision_radius == 3
    assert "bogus" in caplog.text


def test_unrecognised_switch_word_is_rejected():
    with pytest.raises(ConfigError, match="LABRAID_AUTO_COMBAT_STOP_ON_KILL"):
        EngineConfig.from_sources(env={"LABRAID_AUTO_COMBAT_STOP_ON_KILL": "maybe"})


@pytest.mark.parametrize(
    "raw, expected",
    [("debug", logging.DEBUG), (" Warning ", logging.WARNING), ("15", 15), ("chatty", None), ("", None)],
)
def test_log_level_parsing(raw, expected):
    assert resolve_level(raw) == expected
