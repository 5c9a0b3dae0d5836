import os
import sys
from pathlib import Path

import pytest

# Ensure 'src' is on sys.path for test imports without installing the package
ROOT = Path(__file__).resolve().parents[1]
src = ROOT / "src"
if str(src) not in sys.path:
    sys.path.insert(0, str(src))

from labraid.data.catalog import default_catalog  # noqa: E402
from labraid.dungeon.room import Entity  # noqa: E402
from labraid.dungeon.tiles import Coord  # noqa: E402


@pytest.fixture
def catalog():
    return default_catalog()


@pytest.fixture
def spawn(catalog):
    """Factory placing an enemy from the default catalog into a room."""

    def _spawn(room, template_id, x, y, hp=None, alerted=False):
        tmpl = catalog.enemy(template_id)
        entity = Entity(
            id=f"{room.id}-e{len(room.entities) + 1}",
            template_id=template_id,
            coord=Coord(x, y),
            hp=tmpl.hp if hp is None else hp,
            max_hp=tmpl.max_hp,
            alerted=alerted,
        )
        room.entities.append(entity)
        return entity

    return _spawn


@pytest.fixture(autouse=True)
def _clean_labraid_env(monkeypatch):
    # Keep a developer's shell settings out of config tests
    for key in list(os.environ):
        if key.startswith("LABRAID_"):
            monkeypatch.delenv(key, raising=False)
