"""Spatial index of ships and obstacles over a bounded hex region."""

from __future__ import annotations

from typing import TYPE_CHECKING

from stellar_arena.utils.hex_math import HexCoord

from . import pathfinding
from .enums import Team
from .models import ReachableHex
from .rules_config import DEFAULT_RULES, RulesConfig

if TYPE_CHECKING:
    from stellar_arena.utils.rng import RandomSource

    from .ship import Ship


class Grid:
    """Battle arena.

    Bounds are half-extents around the origin: a hex is valid when
    ``|q| <= width // 2`` and ``|r| <= height // 2``. At most one ship sits
    on a hex, and a hex is blocked iff it is occupied or an obstacle. The grid
    does not judge whether actions are legal; ships and the turn manager do.
    """

    def __init__(self, width: int, height: int, rules: RulesConfig = DEFAULT_RULES) -> None:
        self.width = width
        self.height = height
        self.rules = rules
        self._ships: dict[HexCoord, Ship] = {}
        self.obstacles: set[HexCoord] = set()

    def __repr__(self) -> str:
        return (
            f"Grid(width={self.width}, height={self.height}, "
            f"ships={len(self._ships)}, obstacles={len(self.obstacles)})"
        )

    @property
    def max_q(self) -> int:
        return self.width // 2

    @property
    def max_r(self) -> int:
        return self.height // 2

    # --- Ships --------------------------------------------------------------------

    def place_ship(self, ship: Ship, position: HexCoord | None = None) -> bool:
        """Index ``ship`` at ``position`` (default: its own position).

        Returns False, leaving everything untouched, when another ship holds
        the target hex. Re-placing an indexed ship drops its old entry.
        """
        target = position if position is not None else ship.position
        occupant = self._ships.get(target)
        if occupant is not None and occupant is not ship:
            return False
        if self._ships.get(ship.position) is ship:
            del self._ships[ship.position]
        ship.position = target
        self._ships[target] = ship
        return True

    def remove_ship(self, position: HexCoord) -> Ship | None:
        return self._ships.pop(position, None)

    def move_ship(self, ship: Ship, destination: HexCoord) -> None:
        if self._ships.get(ship.position) is ship:
            del self._ships[ship.position]
        ship.position = destination
        self._ships[destination] = ship

    def get_ship_at(self, position: HexCoord) -> Ship | None:
        return self._ships.get(position)

    def get_all_ships(self) -> list[Ship]:
        return list(self._ships.values())

    def get_ships_by_team(self, team: Team | str) -> list[Ship]:
        """Living ships of ``team`` in placement order."""
        return [ship for ship in self._ships.values() if ship.team == team and not ship.is_destroyed]

    # --- Queries ------------------------------------------------------------------

    def is_occupied(self, position: HexCoord) -> bool:
        return position in self._ships

    def is_blocked(self, position: HexCoord) -> bool:
        return position in self._ships or position in self.obstacles

    def is_valid_hex(self, position: HexCoord) -> bool:
        return abs(position.q) <= self.max_q and abs(position.r) <= self.max_r

    def all_hexes(self) -> list[HexCoord]:
        """Every valid hex, row by row."""
        return [
            HexCoord(q, r)
            for r in range(-self.max_r, self.max_r + 1)
            for q in range(-self.max_q, self.max_q + 1)
        ]

    # --- Pathfinding ----------------------------------------------------------------

    def find_path(
        self,
        start: HexCoord,
        goal: HexCoord,
        ship: Ship,
        max_cost: float | None = None,
    ) -> list[HexCoord] | None:
        """Cheapest path within ``max_cost`` (default: the ship's AP)."""
        budget = ship.action_points if max_cost is None else max_cost
        return pathfinding.find_path(self, start, goal, ship, budget, rules=self.rules)

    def get_reachable_hexes(self, ship: Ship) -> list[ReachableHex]:
        return pathfinding.get_reachable_hexes(self, ship, rules=self.rules)

    # --- Obstacles ------------------------------------------------------------------

    def add_obstacle(self, position: HexCoord) -> None:
        self.obstacles.add(position)

    def generate_obstacles(self, count: int, rng: RandomSource) -> list[HexCoord]:
        """Scatter obstacles with ``count`` random attempts.

        Each attempt draws a hex from the bounding box; it becomes an obstacle
        only if it is valid and not occupied by a ship.
        """
        placed = []
        for _ in range(count):
            q = rng.randrange(self.width) - self.max_q
            r = rng.randrange(self.height) - self.max_r
            position = HexCoord(q, r)
            if self.is_valid_hex(position) and not self.is_occupied(position):
                if position not in self.obstacles:
                    placed.append(position)
                self.add_obstacle(position)
        return placed

    def clear(self) -> None:
        self._ships.clear()
        self.obstacles.clear()
