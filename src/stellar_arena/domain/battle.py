"""Battle setup and the player-facing command facade.

:class:`Battle` is what a front end talks to: it validates that a command is
issued by the ship whose turn it is, then delegates to the
:class:`~stellar_arena.domain.turns.TurnManager` helpers so every command
produces the same combat events whether a player or the AI issued it.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from stellar_arena.utils.hex_math import HexCoord, hex_distance
from stellar_arena.utils.rng import RandomSource

from .combat import has_line_of_sight
from .enums import CombatEventKind, Team
from .grid import Grid
from .models import BattleOutcome, DamageResult
from .rules_config import DEFAULT_RULES, RulesConfig
from .turns import TurnManager

if TYPE_CHECKING:
    from collections.abc import Iterable

    from stellar_arena.interfaces.events import ICombatEventSink, IRenderer

    from .ship import Ship

logger = logging.getLogger(__name__)


class Battle:
    """A running engagement: grid, turn manager and player commands."""

    def __init__(self, grid: Grid, turns: TurnManager) -> None:
        self.grid = grid
        self.turns = turns

    @property
    def outcome(self) -> BattleOutcome:
        return self.turns.outcome

    @property
    def current_ship(self) -> Ship | None:
        return self.turns.get_current_ship()

    @property
    def round_number(self) -> int:
        return self.turns.turn_number

    def _can_command(self, ship: Ship) -> bool:
        if self.outcome.game_over:
            return False
        if ship.team is not Team.PLAYER:
            return False
        return self.current_ship is ship

    def move_ship(self, ship: Ship, destination: HexCoord) -> bool:
        """Pathfind to ``destination`` within the ship's AP and move there."""

        if not self._can_command(ship):
            return False
        path = self.grid.find_path(ship.position, destination, ship)
        if not path:
            return False
        return self.turns.execute_move(ship, path)

    def attack(self, ship: Ship, weapon_index: int, target: Ship) -> DamageResult | None:
        """Fire one weapon at ``target``; line of sight is required."""

        if not self._can_command(ship):
            return None
        if weapon_index < 0 or weapon_index >= len(ship.weapons):
            return None

        weapon = ship.weapons[weapon_index]
        distance = hex_distance(ship.position, target.position)
        if not weapon.in_range(distance):
            logger.debug(
                "%s: target %s at %d outside %s range %d-%d",
                ship.id,
                target.id,
                distance,
                weapon.name,
                weapon.min_range,
                weapon.max_range,
            )
            return None
        if not ship.can_fire_weapon(weapon, target):
            return None
        if not has_line_of_sight(ship, target, self.grid):
            logger.debug("%s: no line of sight to %s", ship.id, target.id)
            return None

        return self.turns.execute_attack(ship, weapon_index, target)

    def use_ability(
        self, ship: Ship, ability_index: int, renderer: IRenderer | None = None
    ) -> bool:
        if not self._can_command(ship):
            return False
        return self.turns.execute_ability(ship, ability_index, renderer)

    def set_energy_allocation(self, ship: Ship, weapons: int, shields: int, engines: int) -> bool:
        if not self._can_command(ship):
            return False
        if not ship.set_energy_allocation(weapons, shields, engines, rules=self.turns.rules):
            return False
        self.turns.emit(CombatEventKind.ENERGY_ALLOCATION, ship)
        return True

    def end_turn(self) -> BattleOutcome:
        return self.turns.end_current_turn()

    def step(self, renderer: IRenderer | None = None) -> BattleOutcome:
        """Advance one turn; automated ships act, a player's turn is ended."""
        return self.turns.advance_turn(renderer)


def setup_battle(  # noqa: PLR0913
    player_ships: Iterable[Ship],
    enemy_ships: Iterable[Ship],
    *,
    width: int = 15,
    height: int = 15,
    obstacle_count: int = 10,
    rng: RandomSource | None = None,
    events: ICombatEventSink | None = None,
    rules: RulesConfig = DEFAULT_RULES,
) -> Battle:
    """Place both fleets, scatter obstacles and start the first round.

    Ships keep the positions they were built with. Obstacles never land on an
    occupied hex.
    """

    rng = rng or RandomSource()
    grid = Grid(width, height, rules)
    for team, fleet in ((Team.PLAYER, player_ships), (Team.ENEMY, enemy_ships)):
        for ship in fleet:
            ship.team = team
            if not grid.place_ship(ship):
                logger.warning("Ship %s left out: %s is already occupied", ship.id, ship.position)

    placed = grid.generate_obstacles(obstacle_count, rng)
    logger.info(
        "Battle set up on %dx%d grid: %d ships, %d obstacles",
        width,
        height,
        len(grid.get_all_ships()),
        len(placed),
    )

    turns = TurnManager(grid, events=events, rng=rng, rules=rules)
    turns.start_round()
    return Battle(grid, turns)
