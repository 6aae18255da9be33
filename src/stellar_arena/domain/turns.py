"""Initiative-based round scheduler and automated turn execution.

The manager is a synchronous state machine: ``initiative`` -> ``action`` ->
``end`` and back, until one side has no ships left. There is no wall-clock
pacing here; a front end that wants animation delays calls
:meth:`TurnManager.advance_turn` on its own schedule, simulations and tests
call it in a loop.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from stellar_arena.utils.hex_math import HexCoord
from stellar_arena.utils.rng import RandomSource

from .abilities import AbilityContext
from .ai import EnemyAI
from .combat import calculate_damage, has_line_of_sight
from .enums import BattleWinner, CombatEventKind, Team, TurnPhase
from .events import CombatEvent
from .models import AITurnReport, BattleOutcome, DamageResult, QueueEntry
from .rules_config import DEFAULT_RULES, RulesConfig

if TYPE_CHECKING:
    from stellar_arena.interfaces.events import ICombatEventSink, IRenderer

    from .grid import Grid
    from .ship import Ship

logger = logging.getLogger(__name__)


class TurnManager:
    """Owns the initiative queue and drives whose turn it is.

    Args:
        grid: Battle arena holding every ship
        events: Optional sink receiving :class:`CombatEvent` notifications
        rng: Random source for initiative rolls
        automated_teams: Teams whose turns are decided by :class:`EnemyAI`
        rules: Rule constants
    """

    def __init__(  # noqa: PLR0913
        self,
        grid: Grid,
        events: ICombatEventSink | None = None,
        rng: RandomSource | None = None,
        automated_teams: frozenset[Team] = frozenset({Team.ENEMY}),
        rules: RulesConfig = DEFAULT_RULES,
    ) -> None:
        self.grid = grid
        self.events = events
        self.rng = rng or RandomSource()
        self.automated_teams = automated_teams
        self.rules = rules
        self.ai = EnemyAI(grid, rules)
        self.turn_number = 1
        self.initiative_queue: list[Ship] = []
        self.current_ship_index = 0
        self.phase = TurnPhase.INITIATIVE
        self.outcome = BattleOutcome()
        self._processing_ai = False

    # --- Events -----------------------------------------------------------------

    def emit(self, kind: CombatEventKind, ship: Ship | None = None, **details: object) -> None:
        if self.events is None:
            return
        self.events.record(
            CombatEvent(
                kind=kind,
                round_number=self.turn_number,
                ship=ship.name if ship is not None else None,
                team=ship.team if ship is not None else None,
                **details,
            )
        )

    # --- Round state machine ------------------------------------------------------

    def start_round(self) -> BattleOutcome:
        """Roll initiative, order the queue and hand the turn to the first ship.

        The queue is sorted by descending initiative; the sort is stable, so
        ties keep grid placement order. The head of the queue gets its
        ``TURN_START`` and is advanced at once, so the second ship is current
        when this returns.
        """

        if self.outcome.game_over:
            return self.outcome

        self.phase = TurnPhase.INITIATIVE
        self.initiative_queue = []
        self.current_ship_index = 0
        self.emit(CombatEventKind.ROUND_START)

        ships = [ship for ship in self.grid.get_all_ships() if not ship.is_destroyed]
        for ship in ships:
            ship.roll_initiative(self.rng, self.rules)
        self.initiative_queue = sorted(ships, key=lambda ship: -ship.initiative)
        logger.debug(
            "Round %d order: %s",
            self.turn_number,
            ", ".join(f"{ship.id}({ship.initiative})" for ship in self.initiative_queue),
        )

        if self.initiative_queue:
            head = self.initiative_queue[0]
            self.emit(CombatEventKind.TURN_START, head)
            head.start_turn(self.rules)
        return self.next_turn()

    def next_turn(self) -> BattleOutcome:
        """End the current ship's turn and start the next one (or end the round)."""

        current = self.get_current_ship()
        if current is not None and current.is_active:
            self._end_ship_turn(current)

        if self.outcome.game_over:
            return self.outcome

        self.current_ship_index += 1
        while (
            self.current_ship_index < len(self.initiative_queue)
            and self.initiative_queue[self.current_ship_index].is_destroyed
        ):
            self.current_ship_index += 1

        if self.current_ship_index >= len(self.initiative_queue):
            return self.end_round()

        ship = self.initiative_queue[self.current_ship_index]
        self.emit(CombatEventKind.TURN_START, ship)
        ship.start_turn(self.rules)
        self.phase = TurnPhase.ACTION
        return self.outcome

    def _end_ship_turn(self, ship: Ship) -> None:
        drift = ship.end_turn(self.grid, self.rules)
        if drift is not None and drift.moved:
            self.emit(
                CombatEventKind.DRIFT,
                ship,
                hex_count=drift.origin.distance_to(drift.destination),
            )

    def end_round(self) -> BattleOutcome:
        """Close the round; start the next one unless a side has been wiped out."""

        self.phase = TurnPhase.END
        self.turn_number += 1

        outcome = self.check_win_condition()
        if outcome.game_over:
            return outcome
        return self.start_round()

    def check_win_condition(self) -> BattleOutcome:
        """Report a winner once either team has no living ships on the grid."""

        if self.outcome.game_over:
            return self.outcome

        if not self.grid.get_ships_by_team(Team.PLAYER):
            self.outcome = BattleOutcome(game_over=True, winner=BattleWinner.ENEMY)
            self.emit(CombatEventKind.DEFEAT)
        elif not self.grid.get_ships_by_team(Team.ENEMY):
            self.outcome = BattleOutcome(game_over=True, winner=BattleWinner.PLAYER)
            self.emit(CombatEventKind.VICTORY)
        return self.outcome

    # --- Queries ------------------------------------------------------------------

    def get_current_ship(self) -> Ship | None:
        if 0 <= self.current_ship_index < len(self.initiative_queue):
            return self.initiative_queue[self.current_ship_index]
        return None

    def get_initiative_queue(self) -> list[QueueEntry]:
        return [
            QueueEntry(ship=ship, is_active=index == self.current_ship_index)
            for index, ship in enumerate(self.initiative_queue)
        ]

    def is_player_turn(self) -> bool:
        ship = self.get_current_ship()
        return ship is not None and ship.team is Team.PLAYER

    def is_automated_turn(self) -> bool:
        ship = self.get_current_ship()
        return ship is not None and ship.team in self.automated_teams

    def end_current_turn(self) -> BattleOutcome:
        """Player-initiated end of turn; ignored when it is not a player's turn."""

        if self.is_player_turn():
            return self.next_turn()
        return self.outcome

    def reset(self) -> None:
        self.turn_number = 1
        self.initiative_queue = []
        self.current_ship_index = 0
        self.phase = TurnPhase.INITIATIVE
        self.outcome = BattleOutcome()
        self.ai = EnemyAI(self.grid, self.rules)
        self._processing_ai = False

    def remove_ship_from_queue(self, ship_id: str) -> None:
        """Drop a ship mid-round, keeping the index on the same logical ship."""

        index = next(
            (i for i, ship in enumerate(self.initiative_queue) if ship.id == ship_id), None
        )
        if index is None:
            return

        del self.initiative_queue[index]
        if index < self.current_ship_index:
            self.current_ship_index = max(0, self.current_ship_index - 1)
        elif self.current_ship_index >= len(self.initiative_queue):
            self.current_ship_index = max(0, len(self.initiative_queue) - 1)

    # --- Commands -----------------------------------------------------------------

    def execute_move(self, ship: Ship, path: list[HexCoord]) -> bool:
        if not ship.move(path, self.grid, self.rules):
            return False
        self.emit(CombatEventKind.MOVEMENT, ship, hex_count=len(path))
        return True

    def execute_attack(
        self,
        attacker: Ship,
        weapon_index: int,
        target: Ship,
        require_line_of_sight: bool = False,
    ) -> DamageResult | None:
        """Fire, resolve damage and clean up a destroyed target."""

        if require_line_of_sight and not has_line_of_sight(attacker, target, self.grid):
            return None

        attack = attacker.fire_weapon(weapon_index, target, self.rules)
        if attack is None:
            return None

        self.emit(
            CombatEventKind.WEAPON_FIRE, attacker, target=target.name, weapon=attack.weapon.name
        )
        result = calculate_damage(attack, self.rules)
        if result.is_emp:
            self.emit(
                CombatEventKind.EMP, attacker, target=target.name, energy_damage=result.energy_damage
            )
        else:
            self.emit(
                CombatEventKind.DAMAGE,
                attacker,
                target=target.name,
                shield_damage=result.shield_damage,
                hull_damage=result.hull_damage,
            )

        if result.destroyed:
            self._handle_destruction(target)
        return result

    def execute_ability(
        self, ship: Ship, ability_index: int, renderer: IRenderer | None = None
    ) -> bool:
        if ability_index < 0 or ability_index >= len(ship.abilities):
            return False

        context = AbilityContext(
            ship=ship,
            grid=self.grid,
            renderer=renderer,
            events=self.events,
            round_number=self.turn_number,
        )
        if not ship.use_ability(ability_index, context, self.rules):
            return False
        self.emit(CombatEventKind.ABILITY, ship, ability=ship.abilities[ability_index].name)
        return True

    def _handle_destruction(self, ship: Ship) -> None:
        if self.grid.get_ship_at(ship.position) is ship:
            self.grid.remove_ship(ship.position)
        self.remove_ship_from_queue(ship.id)
        self.ai.forget_target(ship.id)
        self.emit(CombatEventKind.DESTRUCTION, ship)
        self.check_win_condition()

    # --- Automated turns ----------------------------------------------------------

    def advance_turn(self, renderer: IRenderer | None = None) -> BattleOutcome:
        """Resolve the current turn: automated ships act, others simply end."""

        if self.outcome.game_over:
            return self.outcome
        if self.is_automated_turn():
            self.process_enemy_turn(renderer)
            return self.outcome
        if self.get_current_ship() is None:
            return self.outcome
        return self.next_turn()

    def process_enemy_turn(self, renderer: IRenderer | None = None) -> AITurnReport:
        """Let the AI play the current ship's turn; the turn always ends."""

        ship = self.get_current_ship()
        if ship is None or ship.team not in self.automated_teams:
            logger.warning("process_enemy_turn called without an automated ship to act")
            return AITurnReport(ship_id=ship.id if ship else None, skipped=True)

        if self._processing_ai:
            logger.warning("AI turn for %s already in progress; skipping", ship.id)
            return AITurnReport(ship_id=ship.id, skipped=True)

        self._processing_ai = True
        report = AITurnReport(ship_id=ship.id)
        try:
            self._play_ai_turn(ship, report, renderer)
        except Exception as exc:
            logger.exception("AI turn for %s failed", ship.id)
            report.error = repr(exc)
        finally:
            self._processing_ai = False
            self.next_turn()
        return report

    def _play_ai_turn(  # noqa: PLR0912
        self, ship: Ship, report: AITurnReport, renderer: IRenderer | None
    ) -> None:
        ai = self.ai

        opponents = ai.opponents(ship)
        if not opponents:
            return
        target = ai.choose_best_target(ship, opponents)
        if target is None:
            return
        ai.last_focus_target_id = target.id

        ability_index = ai.choose_ability(ship, target)
        if ability_index is not None and self.execute_ability(ship, ability_index, renderer):
            report.ability_used = ship.abilities[ability_index].key.value
            logger.debug("%s activates %s", ship.id, report.ability_used)

        opponents = ai.opponents(ship)
        target = ai.choose_best_target(ship, opponents)
        if target is None:
            return
        ai.last_focus_target_id = target.id
        report.target_id = target.id

        destination = ai.choose_position(ship, target)
        if destination is not None:
            path = self.grid.find_path(ship.position, destination, ship)
            if path:
                move_path = path[: ship.action_points]
                if move_path and self.execute_move(ship, move_path):
                    report.moved_to = ship.position
                else:
                    logger.debug(
                        "%s could not move %d hexes with %d AP",
                        ship.id,
                        len(move_path),
                        ship.action_points,
                    )

        attempts = 0
        fallback_used = False
        while (
            ship.action_points > 0
            and ship.energy > 0
            and attempts < self.rules.ai.max_attacks_per_turn
        ):
            plan = ai.select_best_attack(ship)
            if plan is None:
                if fallback_used:
                    break
                fallback_used = True
                path = ai.plan_fallback_advance(ship)
                if path and self.execute_move(ship, path):
                    report.fallback_moves += 1
                    continue
                break

            attack_target = plan.target
            weapon_index = plan.weapon_choice.index
            weapon_name = ship.weapons[weapon_index].name
            result = self.execute_attack(
                ship,
                weapon_index,
                attack_target,
                require_line_of_sight=self.rules.ai.ai_requires_line_of_sight,
            )
            if result is None:
                break

            attempts += 1
            report.attacks.append((attack_target.id, weapon_name, result.dealt))
            if renderer is not None:
                renderer.add_effect("weapon_fire", attack_target.position)

            if result.destroyed:
                report.destroyed.append(attack_target.id)
                if renderer is not None:
                    renderer.add_effect("explosion", attack_target.position)
                if self.outcome.game_over or not ai.opponents(ship):
                    break

        logger.debug(
            "AI turn for %s complete: %d attacks, %d fallback moves",
            ship.id,
            report.attacks_made,
            report.fallback_moves,
        )
