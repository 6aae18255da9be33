"""Unit tests for drift-aware pathfinding.

Tests step costs, path search and reachable-set computation on small
hand-built grids.
"""

from __future__ import annotations

from hypothesis import given, settings
from hypothesis import strategies as st

from stellar_arena.domain.grid import Grid
from stellar_arena.domain.models import Velocity
from stellar_arena.domain.pathfinding import drift_direction, move_cost, path_cost
from stellar_arena.domain.ship import ShipOverrides, create_ship
from stellar_arena.utils.hex_math import HexCoord, hex_distance

ORIGIN = HexCoord(0, 0)


def _ship_on(grid: Grid, ship_class: str = "corvette", velocity: Velocity | None = None):
    ship = create_ship(ship_class, ShipOverrides(id="mover", position=ORIGIN))
    if velocity is not None:
        ship.velocity = velocity
    grid.place_ship(ship)
    return ship


class TestMoveCost:
    """Tests for single-step costs."""

    def test_no_drift_costs_one(self, grid):
        ship = _ship_on(grid)
        assert drift_direction(ship.velocity) is None
        assert move_cost(ORIGIN, HexCoord(1, 0), ship) == 1.0

    def test_with_and_against_drift(self, grid):
        ship = _ship_on(grid, velocity=Velocity(q=1.0, r=0.0))
        assert move_cost(ORIGIN, HexCoord(1, 0), ship) == 0.5
        assert move_cost(ORIGIN, HexCoord(-1, 0), ship) == 1.5
        assert move_cost(ORIGIN, HexCoord(1, -1), ship) == 1.0

    def test_path_cost_sums_steps(self, grid):
        ship = _ship_on(grid, velocity=Velocity(q=1.0, r=0.0))
        path = [HexCoord(1, 0), HexCoord(2, 0), HexCoord(2, 1)]
        assert path_cost(path, ORIGIN, ship) == 0.5 + 0.5 + 1.0


class TestFindPath:
    """Tests for the cost-bounded path search."""

    def test_start_equals_goal(self, grid):
        ship = _ship_on(grid)
        assert grid.find_path(ORIGIN, ORIGIN, ship) == []

    def test_straight_path_within_budget(self, grid):
        ship = _ship_on(grid)
        path = grid.find_path(ORIGIN, HexCoord(3, 0), ship)
        assert path is not None
        assert len(path) == 3
        assert path[-1] == HexCoord(3, 0)
        assert ORIGIN not in path

    def test_over_budget_returns_none(self, grid):
        ship = _ship_on(grid)
        assert ship.action_points == 3
        assert grid.find_path(ORIGIN, HexCoord(5, 0), ship) is None

    def test_drift_extends_reach(self, grid):
        """Five steps with the drift cost 2.5 AP, inside a 3 AP budget."""
        ship = _ship_on(grid, velocity=Velocity(q=1.0, r=0.0))
        path = grid.find_path(ORIGIN, HexCoord(5, 0), ship)
        assert path is not None
        assert len(path) == 5
        assert path_cost(path, ORIGIN, ship) == 2.5

    def test_blocked_goal_returns_none(self, grid):
        ship = _ship_on(grid)
        grid.add_obstacle(HexCoord(2, 0))
        assert grid.find_path(ORIGIN, HexCoord(2, 0), ship) is None

    def test_occupied_goal_returns_none(self, grid, make_ship):
        ship = _ship_on(grid)
        grid.place_ship(make_ship(q=2, r=0))
        assert grid.find_path(ORIGIN, HexCoord(2, 0), ship) is None

    def test_routes_around_obstacle(self, grid):
        ship = _ship_on(grid)
        grid.add_obstacle(HexCoord(1, 0))
        path = grid.find_path(ORIGIN, HexCoord(2, 0), ship)
        assert path is not None
        assert len(path) == 3
        assert HexCoord(1, 0) not in path
        assert all(hex_distance(a, b) == 1 for a, b in zip([ORIGIN, *path], path))

    def test_explicit_budget_overrides_action_points(self, grid):
        ship = _ship_on(grid)
        assert grid.find_path(ORIGIN, HexCoord(5, 0), ship, max_cost=5) is not None

    def test_invalid_goal(self, grid):
        ship = _ship_on(grid)
        assert grid.find_path(ORIGIN, HexCoord(20, 0), ship, max_cost=50) is None


class TestReachableHexes:
    """Tests for the reachable set."""

    def test_excludes_start_and_respects_budget(self, grid):
        ship = _ship_on(grid, "destroyer")
        reachable = grid.get_reachable_hexes(ship)
        hexes = {entry.hex for entry in reachable}
        assert ORIGIN not in hexes
        # Two AP without drift: the radius-2 ring minus the center
        assert len(hexes) == 18
        assert all(entry.cost <= ship.action_points for entry in reachable)

    def test_obstacles_and_ships_excluded(self, grid, make_ship):
        ship = _ship_on(grid, "destroyer")
        grid.add_obstacle(HexCoord(1, 0))
        grid.place_ship(make_ship(q=0, r=1))
        hexes = {entry.hex for entry in grid.get_reachable_hexes(ship)}
        assert HexCoord(1, 0) not in hexes
        assert HexCoord(0, 1) not in hexes

    @settings(max_examples=25, deadline=None)
    @given(
        st.floats(min_value=-2, max_value=2, allow_nan=False),
        st.floats(min_value=-2, max_value=2, allow_nan=False),
        st.integers(min_value=1, max_value=4),
    )
    def test_every_reachable_hex_has_a_path(self, vq: float, vr: float, ap: int) -> None:
        """Property: find_path reaches each hex at no more than its listed cost."""
        grid = Grid(11, 11)
        grid.add_obstacle(HexCoord(1, -1))
        grid.add_obstacle(HexCoord(-1, 1))
        ship = _ship_on(grid, velocity=Velocity(q=vq, r=vr))
        ship.action_points = ap

        for entry in grid.get_reachable_hexes(ship):
            path = grid.find_path(ORIGIN, entry.hex, ship)
            assert path is not None
            assert path[-1] == entry.hex
            cost = path_cost(path, ORIGIN, ship)
            assert cost <= entry.cost + 1e-9
            assert cost <= ap
