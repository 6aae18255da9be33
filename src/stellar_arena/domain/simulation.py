"""Headless AI-versus-script battle simulator.

Used to balance the AI: the enemy fleet is driven by :class:`EnemyAI`, the
player fleet by a simple scripted policy (focus the most heavily armed enemy,
fire the hardest-hitting weapon in range, otherwise close one hex). Runs are
deterministic for a given scenario seed.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

from stellar_arena.schemas.simulation import ScenarioConfig, default_scenarios
from stellar_arena.utils.hex_math import HexCoord, hex_distance, hex_neighbors
from stellar_arena.utils.rng import RandomSource, generate_seed

from .enums import AbilityKey, AIProfile, BattleWinner, CombatEventKind, ShipClass, Team
from .grid import Grid
from .rules_config import DEFAULT_RULES, RulesConfig
from .ship import ShipOverrides, create_ship
from .turns import TurnManager

if TYPE_CHECKING:
    from collections.abc import Sequence

    from stellar_arena.interfaces.events import ICombatEventSink

    from .events import CombatEvent
    from .ship import Ship

logger = logging.getLogger(__name__)

SIMULATION_GRID_SIZE = 15


@dataclass(slots=True)
class Scenario:
    grid: Grid
    player_ships: list[Ship]
    enemy_ships: list[Ship]
    rng: RandomSource


@dataclass(slots=True)
class SimulationStats:
    """Totals for a single simulated battle.

    ``player_damage`` is damage taken by the player fleet and
    ``enemy_damage`` damage taken by the enemy fleet.
    """

    rounds: int = 0
    turns: int = 0
    player_damage: float = 0.0
    enemy_damage: float = 0.0
    player_losses: int = 0
    enemy_losses: int = 0
    winner: BattleWinner | None = None


@dataclass(slots=True)
class ScenarioReport:
    """Averages over every iteration of one scenario."""

    index: int
    config: ScenarioConfig
    wins: int = 0
    losses: int = 0
    avg_rounds: float = 0.0
    avg_turns: float = 0.0
    avg_player_damage: float = 0.0
    avg_enemy_damage: float = 0.0


class _StatsRecorder:
    """Event sink tallying damage and losses, optionally forwarding events."""

    def __init__(self, stats: SimulationStats, forward: ICombatEventSink | None = None) -> None:
        self.stats = stats
        self.forward = forward

    def record(self, event: CombatEvent) -> None:
        if event.kind is CombatEventKind.DAMAGE:
            dealt = event.shield_damage + event.hull_damage
            if event.team is Team.PLAYER:
                self.stats.enemy_damage += dealt
            else:
                self.stats.player_damage += dealt
        elif event.kind is CombatEventKind.DESTRUCTION:
            if event.team is Team.PLAYER:
                self.stats.player_losses += 1
            else:
                self.stats.enemy_losses += 1

        if self.forward is not None:
            self.forward.record(event)


def _spawn_position(q: int, index: int, rules: RulesConfig) -> HexCoord:
    battle = rules.battle
    return HexCoord(q, index * battle.spawn_row_spacing + battle.spawn_row_offset)


def create_scenario(
    config: ScenarioConfig | None = None, rules: RulesConfig = DEFAULT_RULES
) -> Scenario:
    """Build a 15x15 arena with both fleets lined up on opposite sides.

    Player ships are ``player1..N`` on column -5, enemies ``enemy1..N`` on
    column 5, both spaced two rows apart. There are no obstacles.
    """

    config = config or ScenarioConfig()
    grid = Grid(SIMULATION_GRID_SIZE, SIMULATION_GRID_SIZE, rules)

    player_ships = []
    for index, ship_class in enumerate(config.player_presets):
        ship = create_ship(
            ship_class,
            ShipOverrides(
                id=f"player{index + 1}",
                name=f"Player {index + 1}",
                team=Team.PLAYER,
                position=_spawn_position(rules.battle.player_spawn_q, index, rules),
            ),
            rules,
        )
        if ship is None or not grid.place_ship(ship):
            continue
        player_ships.append(ship)

    enemy_ships = []
    for index, ship_class in enumerate(config.enemy_presets):
        profile = config.ai_profiles[index] if index < len(config.ai_profiles) else AIProfile.STANDARD
        ship = create_ship(
            ship_class,
            ShipOverrides(
                id=f"enemy{index + 1}",
                name=f"Enemy {index + 1}",
                team=Team.ENEMY,
                position=_spawn_position(rules.battle.enemy_spawn_q, index, rules),
                ai_profile=profile,
            ),
            rules,
        )
        if ship is None or not grid.place_ship(ship):
            continue
        enemy_ships.append(ship)

    return Scenario(
        grid=grid,
        player_ships=player_ships,
        enemy_ships=enemy_ships,
        rng=RandomSource(generate_seed(config.seed, 0, "initiative")),
    )


# --- Scripted player policy ---------------------------------------------------------


def _firepower(ship: Ship) -> float:
    return sum(weapon.damage for weapon in ship.weapons)


def choose_player_target(ship: Ship, grid: Grid) -> Ship | None:
    """Most heavily armed enemy, nearest first among equals."""

    enemies = grid.get_ships_by_team(ship.team.opponent)
    if not enemies:
        return None
    return min(
        enemies,
        key=lambda enemy: (-_firepower(enemy), hex_distance(ship.position, enemy.position)),
    )


def choose_player_weapon(ship: Ship, target: Ship) -> int | None:
    """Index of the highest-damage weapon able to fire on ``target``."""

    best_index = None
    best_damage = -1.0
    for index, weapon in enumerate(ship.weapons):
        if not ship.can_fire_weapon(weapon, target):
            continue
        if weapon.damage > best_damage:
            best_damage = weapon.damage
            best_index = index
    return best_index


def maybe_use_player_ability(ship: Ship, target: Ship, turns: TurnManager) -> bool:
    """Fire off the first ability whose trigger condition holds."""

    hull_ratio = ship.hull / max(1.0, ship.max_hull)
    shield_ratio = ship.shield_ratio

    for index, ability in enumerate(ship.abilities):
        if not ship.can_use_ability(ability):
            continue

        key = ability.key
        if key is AbilityKey.SHIELD_SURGE:
            wanted = shield_ratio < 0.5 or hull_ratio < 0.6  # noqa: PLR2004
        elif key is AbilityKey.EVASIVE_MANEUVER:
            wanted = hull_ratio < 0.45  # noqa: PLR2004
        elif key is AbilityKey.WEAPON_OVERCHARGE:
            wanted = not target.is_destroyed
        elif key is AbilityKey.EMP_BURST:
            radius = turns.rules.abilities.emp_burst_radius
            wanted = any(
                hex_distance(ship.position, enemy.position) <= radius
                for enemy in turns.grid.get_ships_by_team(ship.team.opponent)
            )
        else:
            wanted = key is AbilityKey.BURST_ENGINES

        if wanted and turns.execute_ability(ship, index):
            return True
    return False


def _approach_step(ship: Ship, target: Ship, grid: Grid) -> list[HexCoord] | None:
    """First hex of the shortest route to a free neighbour of ``target``."""

    best_path = None
    for neighbor in hex_neighbors(target.position):
        if not grid.is_valid_hex(neighbor) or grid.is_blocked(neighbor):
            continue
        path = grid.find_path(ship.position, neighbor, ship, max_cost=math.inf)
        if path and (best_path is None or len(path) < len(best_path)):
            best_path = path
    return best_path[:1] if best_path else None


def play_scripted_turn(ship: Ship, turns: TurnManager) -> None:
    """One player turn: maybe an ability, one shot, or a single step closer."""

    if ship.action_points <= 0 or ship.energy <= 0:
        return

    target = choose_player_target(ship, turns.grid)
    if target is None:
        return

    maybe_use_player_ability(ship, target, turns)

    weapon_index = choose_player_weapon(ship, target)
    if weapon_index is not None and turns.execute_attack(ship, weapon_index, target) is not None:
        return

    step = _approach_step(ship, target, turns.grid)
    if step:
        turns.execute_move(ship, step)


# --- Runner -----------------------------------------------------------------------------


def run_simulation(
    scenario: Scenario,
    max_rounds: int = 50,
    events: ICombatEventSink | None = None,
    rules: RulesConfig = DEFAULT_RULES,
) -> SimulationStats:
    """Play a scenario to completion or until ``max_rounds`` is reached."""

    stats = SimulationStats()
    turns = TurnManager(
        scenario.grid,
        events=_StatsRecorder(stats, events),
        rng=scenario.rng,
        rules=rules,
    )
    turns.start_round()

    while stats.rounds < max_rounds and not turns.outcome.game_over:
        stats.rounds = turns.turn_number
        active = turns.get_current_ship()
        if active is None:
            break

        stats.turns += 1
        if turns.is_automated_turn():
            turns.process_enemy_turn()
        else:
            play_scripted_turn(active, turns)
            turns.next_turn()

    stats.winner = turns.outcome.winner
    logger.debug(
        "Simulation finished after %d rounds / %d turns, winner=%s",
        stats.rounds,
        stats.turns,
        stats.winner,
    )
    return stats


def simulate_batch(
    scenarios: Sequence[ScenarioConfig] | None = None,
    iterations: int = 5,
    max_rounds: int = 50,
    rules: RulesConfig = DEFAULT_RULES,
) -> list[ScenarioReport]:
    """Run every scenario ``iterations`` times with seeds 1..N and average."""

    scenarios = default_scenarios() if scenarios is None else scenarios
    reports = []
    for index, config in enumerate(scenarios):
        report = ScenarioReport(index=index, config=config)
        for iteration in range(iterations):
            seeded = config.model_copy(update={"seed": iteration + 1})
            stats = run_simulation(create_scenario(seeded, rules), max_rounds, rules=rules)
            if stats.winner is BattleWinner.PLAYER:
                report.wins += 1
            elif stats.winner is BattleWinner.ENEMY:
                report.losses += 1
            report.avg_rounds += stats.rounds
            report.avg_turns += stats.turns
            report.avg_player_damage += stats.player_damage
            report.avg_enemy_damage += stats.enemy_damage

        divisor = iterations or 1
        report.avg_rounds /= divisor
        report.avg_turns /= divisor
        report.avg_player_damage /= divisor
        report.avg_enemy_damage /= divisor
        reports.append(report)
        logger.info(
            "Scenario %d: %d wins, %d losses over %d runs",
            index + 1,
            report.wins,
            report.losses,
            iterations,
        )
    return reports


def _names(values: Sequence[ShipClass | AIProfile]) -> str:
    return ", ".join(value.value for value in values)


def format_report(reports: Sequence[ScenarioReport]) -> str:
    lines = ["=== AI Simulation Report ==="]
    for report in reports:
        config = report.config
        lines.extend(
            [
                f"Scenario {report.index + 1}",
                f"  Player Presets: {_names(config.player_presets)}",
                f"  Enemy Presets:  {_names(config.enemy_presets)}",
                f"  AI Profiles:    {_names(config.ai_profiles) or 'auto'}",
                f"  Wins: {report.wins}, Losses: {report.losses}",
                f"  Avg Rounds: {report.avg_rounds:.2f}, Avg Turns: {report.avg_turns:.2f}",
                f"  Avg Player Damage: {report.avg_player_damage:.1f}",
                f"  Avg Enemy Damage:  {report.avg_enemy_damage:.1f}",
                "",
            ]
        )
    return "\n".join(lines)
