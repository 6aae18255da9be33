"""Drift-aware pathfinding over the combat grid.

Movement cost is not raw hex count: a step in the ship's drift sector costs
0.5 AP, a step against it 1.5 AP, anything else 1 AP. ``find_path`` runs an
A*-style search ordered by cost plus half the straight-line distance (the
cheapest possible step cost, so the heuristic never overestimates and paths
stay cost-optimal). ``get_reachable_hexes`` is the same search without a goal,
bounded by the ship's action points.

Invalid, occupied and obstacle hexes are impassable. Frontier ties are broken
by insertion order, which keeps results deterministic.
"""

from __future__ import annotations

from dataclasses import dataclass
from heapq import heappop, heappush
from itertools import count
from typing import TYPE_CHECKING

from stellar_arena.utils.hex_math import (
    HexCoord,
    hex_direction_index,
    hex_distance,
    hex_neighbors,
    nearest_direction,
    opposite_direction,
)

from .models import ReachableHex, Velocity
from .rules_config import DEFAULT_RULES, RulesConfig

if TYPE_CHECKING:
    from .grid import Grid
    from .ship import Ship


@dataclass(slots=True)
class _SearchState:
    cost_so_far: dict[HexCoord, float]
    came_from: dict[HexCoord, HexCoord | None]


def drift_direction(velocity: Velocity) -> int | None:
    """Direction index of the drift sector, None when not drifting."""
    return nearest_direction(velocity.q, velocity.r)


def move_cost(
    from_hex: HexCoord, to_hex: HexCoord, ship: Ship, rules: RulesConfig = DEFAULT_RULES
) -> float:
    """AP cost of a single step between adjacent hexes."""

    movement = rules.movement
    drift = drift_direction(ship.velocity)
    if drift is None:
        return movement.base_step_cost

    step = hex_direction_index(from_hex, to_hex)
    if step == drift:
        return movement.with_drift_step_cost
    if step is not None and step == opposite_direction(drift):
        return movement.against_drift_step_cost
    return movement.base_step_cost


def path_cost(
    path: list[HexCoord], start: HexCoord, ship: Ship, rules: RulesConfig = DEFAULT_RULES
) -> float:
    """Total AP cost of walking ``path`` (start excluded) from ``start``."""

    total = 0.0
    previous = start
    for step in path:
        total += move_cost(previous, step, ship, rules)
        previous = step
    return total


def _heuristic(a: HexCoord, b: HexCoord, rules: RulesConfig) -> float:
    return hex_distance(a, b) * rules.movement.with_drift_step_cost


def _passable(grid: Grid, position: HexCoord) -> bool:
    return grid.is_valid_hex(position) and not grid.is_blocked(position)


def find_path(  # noqa: PLR0913
    grid: Grid,
    start: HexCoord,
    goal: HexCoord,
    ship: Ship,
    max_cost: float,
    rules: RulesConfig = DEFAULT_RULES,
) -> list[HexCoord] | None:
    """Find the cheapest path from ``start`` to ``goal`` within ``max_cost``.

    Args:
        grid: Arena to search
        start: Starting hex (normally the ship's position)
        goal: Destination hex
        ship: Ship whose drift shapes step costs
        max_cost: AP budget; steps that would exceed it are pruned

    Returns:
        Steps excluding ``start`` and ending at ``goal``; ``[]`` when
        ``start == goal``; None when the goal is unreachable within budget
    """

    if start == goal:
        return []

    tie = count()
    frontier: list[tuple[float, int, HexCoord]] = [(0.0, next(tie), start)]
    state = _SearchState(cost_so_far={start: 0.0}, came_from={start: None})
    closed: set[HexCoord] = set()

    while frontier:
        _, _, current = heappop(frontier)
        if current in closed:
            continue
        if current == goal:
            break
        closed.add(current)

        current_cost = state.cost_so_far[current]
        for neighbor in hex_neighbors(current):
            if not _passable(grid, neighbor):
                continue
            new_cost = current_cost + move_cost(current, neighbor, ship, rules)
            if new_cost > max_cost:
                continue
            if neighbor not in state.cost_so_far or new_cost < state.cost_so_far[neighbor]:
                state.cost_so_far[neighbor] = new_cost
                state.came_from[neighbor] = current
                priority = new_cost + _heuristic(neighbor, goal, rules)
                heappush(frontier, (priority, next(tie), neighbor))

    if goal not in state.came_from:
        return None

    path: list[HexCoord] = []
    node: HexCoord | None = goal
    while node is not None and node != start:
        path.append(node)
        node = state.came_from[node]
    path.reverse()
    return path


def get_reachable_hexes(
    grid: Grid, ship: Ship, rules: RulesConfig = DEFAULT_RULES
) -> list[ReachableHex]:
    """Every hex the ship can reach with its current AP, start excluded.

    Hexes are listed in the order they were first discovered, each with the
    cheapest cost found.
    """

    start = ship.position
    budget = ship.action_points
    tie = count()
    frontier: list[tuple[float, int, HexCoord]] = [(0.0, next(tie), start)]
    best: dict[HexCoord, float] = {start: 0.0}
    closed: set[HexCoord] = set()

    while frontier:
        current_cost, _, current = heappop(frontier)
        if current in closed:
            continue
        closed.add(current)

        for neighbor in hex_neighbors(current):
            if not _passable(grid, neighbor):
                continue
            new_cost = current_cost + move_cost(current, neighbor, ship, rules)
            if new_cost > budget:
                continue
            if neighbor not in best or new_cost < best[neighbor]:
                best[neighbor] = new_cost
                heappush(frontier, (new_cost, next(tie), neighbor))

    return [ReachableHex(hex=position, cost=cost) for position, cost in best.items() if position != start]
