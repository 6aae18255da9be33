"""Pytest configuration to ensure the `src` package layout is importable.

This adds the `src/` directory to `sys.path` so tests can import the
`stellar_arena` package (e.g., `from stellar_arena.domain.ship import Ship`)
without requiring an editable install in CI. Shared fixtures for building
ships and grids live here as well.
"""

import sys
from pathlib import Path

import pytest

SRC_PATH = Path(__file__).resolve().parents[1] / "src"
if str(SRC_PATH) not in sys.path:
    sys.path.insert(0, str(SRC_PATH))

from stellar_arena.domain.enums import Team  # noqa: E402
from stellar_arena.domain.grid import Grid  # noqa: E402
from stellar_arena.domain.ship import ShipOverrides, create_ship  # noqa: E402
from stellar_arena.utils.hex_math import HexCoord  # noqa: E402


class ScriptedRandom:
    """Random source returning queued integers, then ``default`` forever."""

    def __init__(self, values=(), default: int = 0) -> None:
        self.values = list(values)
        self.default = default

    def randrange(self, stop: int) -> int:
        value = self.values.pop(0) if self.values else self.default
        return value % stop

    def random(self) -> float:
        return 0.0


@pytest.fixture
def scripted_rng():
    """Factory for scripted random sources."""

    return ScriptedRandom


@pytest.fixture
def grid() -> Grid:
    return Grid(15, 15)


@pytest.fixture
def make_ship():
    """Factory building a preset ship; keyword overrides follow ShipOverrides."""

    counter = {"n": 0}

    def _make(ship_class: str = "corvette", q: int = 0, r: int = 0, team: Team = Team.PLAYER, **overrides):
        counter["n"] += 1
        overrides.setdefault("id", f"{team.value}-{ship_class}-{counter['n']}")
        overrides.setdefault("name", f"{ship_class.title()} {counter['n']}")
        ship = create_ship(
            ship_class,
            ShipOverrides(team=team, position=HexCoord(q, r), **overrides),
        )
        assert ship is not None
        return ship

    return _make
