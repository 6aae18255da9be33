"""Unit tests for the combat grid."""

from __future__ import annotations

from stellar_arena.domain.enums import Team
from stellar_arena.domain.grid import Grid
from stellar_arena.utils.hex_math import HexCoord
from stellar_arena.utils.rng import RandomSource


class TestBounds:
    def test_half_extents(self) -> None:
        grid = Grid(15, 11)
        assert grid.max_q == 7
        assert grid.max_r == 5
        assert grid.is_valid_hex(HexCoord(7, -5))
        assert not grid.is_valid_hex(HexCoord(8, 0))
        assert not grid.is_valid_hex(HexCoord(0, -6))

    def test_all_hexes_covers_bounding_box(self, grid: Grid) -> None:
        hexes = grid.all_hexes()
        assert len(hexes) == 15 * 15
        assert all(grid.is_valid_hex(h) for h in hexes)


class TestShipIndex:
    def test_place_and_lookup(self, grid, make_ship) -> None:
        ship = make_ship(q=2, r=-1)
        grid.place_ship(ship)
        assert grid.get_ship_at(HexCoord(2, -1)) is ship
        assert grid.is_occupied(HexCoord(2, -1))
        assert grid.is_blocked(HexCoord(2, -1))

    def test_place_at_explicit_position_updates_ship(self, grid, make_ship) -> None:
        ship = make_ship()
        grid.place_ship(ship, HexCoord(-3, 3))
        assert ship.position == HexCoord(-3, 3)
        assert grid.get_ship_at(HexCoord(-3, 3)) is ship

    def test_replacing_drops_old_entry(self, grid, make_ship) -> None:
        ship = make_ship()
        grid.place_ship(ship)
        assert grid.place_ship(ship, HexCoord(2, 2))
        assert grid.get_ship_at(HexCoord(0, 0)) is None
        assert grid.get_all_ships() == [ship]

    def test_occupied_hex_is_rejected(self, grid, make_ship) -> None:
        first = make_ship()
        second = make_ship(q=1, r=0)
        grid.place_ship(first)

        assert not grid.place_ship(second, HexCoord(0, 0))
        assert grid.get_ship_at(HexCoord(0, 0)) is first
        assert second.position == HexCoord(1, 0)
        assert grid.place_ship(first)

    def test_move_keeps_index_in_sync(self, grid, make_ship) -> None:
        ship = make_ship()
        grid.place_ship(ship)
        grid.move_ship(ship, HexCoord(1, 1))
        assert grid.get_ship_at(HexCoord(0, 0)) is None
        assert grid.get_ship_at(HexCoord(1, 1)) is ship
        assert ship.position == HexCoord(1, 1)

    def test_remove_ship(self, grid, make_ship) -> None:
        ship = make_ship()
        grid.place_ship(ship)
        assert grid.remove_ship(ship.position) is ship
        assert grid.remove_ship(ship.position) is None
        assert grid.get_all_ships() == []

    def test_ships_by_team_skips_destroyed(self, grid, make_ship) -> None:
        alive = make_ship(q=0, r=0, team=Team.ENEMY)
        wrecked = make_ship(q=1, r=0, team=Team.ENEMY)
        friendly = make_ship(q=2, r=0)
        for ship in (alive, wrecked, friendly):
            grid.place_ship(ship)
        wrecked.is_destroyed = True

        assert grid.get_ships_by_team(Team.ENEMY) == [alive]
        assert grid.get_ships_by_team("player") == [friendly]


class TestObstacles:
    def test_obstacle_blocks_but_does_not_occupy(self, grid: Grid) -> None:
        grid.add_obstacle(HexCoord(1, 0))
        assert grid.is_blocked(HexCoord(1, 0))
        assert not grid.is_occupied(HexCoord(1, 0))

    def test_generate_skips_occupied_hexes(self, grid, make_ship, scripted_rng) -> None:
        grid.place_ship(make_ship())
        # First draw lands on the ship at the origin, second on (1, 0)
        rng = scripted_rng([7, 7, 8, 7])
        placed = grid.generate_obstacles(2, rng)
        assert placed == [HexCoord(1, 0)]
        assert grid.obstacles == {HexCoord(1, 0)}

    def test_generate_is_deterministic(self) -> None:
        a, b = Grid(15, 15), Grid(15, 15)
        a.generate_obstacles(10, RandomSource("1:0:obstacles"))
        b.generate_obstacles(10, RandomSource("1:0:obstacles"))
        assert a.obstacles == b.obstacles
        assert 0 < len(a.obstacles) <= 10
        assert all(a.is_valid_hex(h) for h in a.obstacles)

    def test_clear(self, grid, make_ship) -> None:
        grid.place_ship(make_ship())
        grid.add_obstacle(HexCoord(3, 3))
        grid.clear()
        assert grid.get_all_ships() == []
        assert grid.obstacles == set()
