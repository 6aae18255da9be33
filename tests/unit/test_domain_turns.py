"""Unit tests for the initiative scheduler and automated turns."""

from __future__ import annotations

import logging

import pytest

from stellar_arena.domain.enums import BattleWinner, CombatEventKind, Team, TurnPhase
from stellar_arena.domain.events import CombatLog
from stellar_arena.domain.models import Velocity
from stellar_arena.domain.turns import TurnManager
from stellar_arena.utils.hex_math import HexCoord


@pytest.fixture
def three_ships(grid, make_ship, scripted_rng):
    """Fast enemy (45), player (30) and slow enemy (20) on a quiet grid."""

    fast = make_ship("interceptor", q=6, r=-4, team=Team.ENEMY, sensors=45)
    player = make_ship("corvette", q=-6, r=0, sensors=30)
    slow = make_ship("destroyer", q=6, r=4, team=Team.ENEMY, sensors=20)
    # Placement order deliberately differs from initiative order
    for ship in (player, slow, fast):
        grid.place_ship(ship)
    log = CombatLog()
    turns = TurnManager(grid, events=log, rng=scripted_rng())
    return turns, log, fast, player, slow


class TestStartRound:
    def test_orders_queue_by_initiative(self, three_ships) -> None:
        turns, _, fast, player, slow = three_ships
        turns.start_round()
        assert turns.initiative_queue == [fast, player, slow]

    def test_second_slot_is_current_after_start(self, three_ships) -> None:
        turns, _, fast, player, slow = three_ships
        turns.start_round()

        assert turns.current_ship_index == 1
        assert turns.get_current_ship() is player
        assert turns.is_player_turn()
        assert player.is_active
        assert not fast.is_active
        assert turns.phase is TurnPhase.ACTION

        turns.next_turn()
        assert turns.get_current_ship() is slow
        assert not player.is_active

    def test_ties_keep_placement_order(self, grid, make_ship, scripted_rng) -> None:
        a = make_ship(q=-2, r=0, sensors=50)
        b = make_ship(q=2, r=0, team=Team.ENEMY, sensors=50)
        c = make_ship(q=0, r=3, sensors=50)
        for ship in (a, b, c):
            grid.place_ship(ship)
        turns = TurnManager(grid, rng=scripted_rng())
        turns.start_round()
        assert turns.initiative_queue == [a, b, c]

    def test_emits_round_and_turn_events(self, three_ships) -> None:
        turns, log, fast, player, _ = three_ships
        turns.start_round()
        assert [e.kind for e in log] == [
            CombatEventKind.ROUND_START,
            CombatEventKind.TURN_START,
            CombatEventKind.TURN_START,
        ]
        assert [e.ship for e in log.entries[1:]] == [fast.name, player.name]

    def test_destroyed_ships_are_left_out(self, three_ships) -> None:
        turns, _, fast, player, slow = three_ships
        slow.is_destroyed = True
        turns.start_round()
        assert turns.initiative_queue == [fast, player]


class TestRoundFlow:
    def test_running_past_the_end_starts_next_round(self, three_ships) -> None:
        turns, log, _, player, _ = three_ships
        turns.start_round()
        turns.next_turn()
        turns.next_turn()

        assert turns.turn_number == 2
        assert len(log.of_kind(CombatEventKind.ROUND_START)) == 2
        assert turns.get_current_ship() is player

    def test_destroyed_ship_is_skipped(self, three_ships) -> None:
        turns, _, _, player, slow = three_ships
        turns.start_round()
        slow.is_destroyed = True
        turns.next_turn()
        assert turns.turn_number == 2

    def test_drift_applied_at_turn_end(self, three_ships) -> None:
        turns, log, _, player, _ = three_ships
        turns.start_round()
        player.velocity = Velocity(q=1.0, r=0.0)
        turns.next_turn()

        [drift] = log.of_kind(CombatEventKind.DRIFT)
        assert drift.ship == player.name
        assert drift.hex_count == 1
        assert player.position.q == -5

    def test_initiative_queue_view(self, three_ships) -> None:
        turns, _, fast, player, slow = three_ships
        turns.start_round()
        view = [(entry.ship, entry.is_active) for entry in turns.get_initiative_queue()]
        assert view == [(fast, False), (player, True), (slow, False)]

    def test_end_current_turn_only_for_players(self, three_ships) -> None:
        turns, _, _, _, slow = three_ships
        turns.start_round()
        turns.end_current_turn()
        assert turns.get_current_ship() is slow
        turns.end_current_turn()
        assert turns.get_current_ship() is slow

    def test_reset(self, three_ships) -> None:
        turns, _, _, _, _ = three_ships
        turns.start_round()
        turns.next_turn()
        turns.reset()
        assert turns.turn_number == 1
        assert turns.initiative_queue == []
        assert turns.get_current_ship() is None
        assert turns.phase is TurnPhase.INITIATIVE


class TestWinCondition:
    def test_player_wins_when_enemies_gone(self, three_ships) -> None:
        turns, log, fast, _, slow = three_ships
        turns.start_round()
        turns.grid.remove_ship(fast.position)
        turns.grid.remove_ship(slow.position)

        outcome = turns.end_round()

        assert outcome.game_over
        assert outcome.winner is BattleWinner.PLAYER
        assert outcome.to_dict() == {"gameOver": True, "winner": "player"}
        assert log.of_kind(CombatEventKind.VICTORY)

    def test_enemy_wins_when_players_gone(self, three_ships) -> None:
        turns, log, _, player, _ = three_ships
        turns.grid.remove_ship(player.position)
        outcome = turns.check_win_condition()
        assert outcome.winner is BattleWinner.ENEMY
        assert log.of_kind(CombatEventKind.DEFEAT)

    def test_ongoing_battle(self, three_ships) -> None:
        turns, _, _, _, _ = three_ships
        assert turns.check_win_condition().to_dict() == {"gameOver": False}

    def test_no_new_round_after_game_over(self, three_ships) -> None:
        turns, log, fast, _, slow = three_ships
        turns.start_round()
        turns.grid.remove_ship(fast.position)
        turns.grid.remove_ship(slow.position)
        turns.end_round()
        assert turns.start_round().game_over
        assert len(log.of_kind(CombatEventKind.ROUND_START)) == 1


class TestRemoveShipFromQueue:
    def test_earlier_ship_shifts_index(self, three_ships) -> None:
        turns, _, fast, player, _ = three_ships
        turns.start_round()
        turns.remove_ship_from_queue(fast.id)
        assert turns.current_ship_index == 0
        assert turns.get_current_ship() is player

    def test_later_ship_keeps_index(self, three_ships) -> None:
        turns, _, _, player, slow = three_ships
        turns.start_round()
        turns.remove_ship_from_queue(slow.id)
        assert turns.get_current_ship() is player

    def test_removing_last_current_ship_clamps(self, three_ships) -> None:
        turns, _, fast, _, slow = three_ships
        turns.start_round()
        turns.next_turn()
        turns.remove_ship_from_queue(slow.id)
        assert turns.current_ship_index == 1

    def test_unknown_id_is_ignored(self, three_ships) -> None:
        turns, _, _, _, _ = three_ships
        turns.start_round()
        turns.remove_ship_from_queue("ghost")
        assert len(turns.initiative_queue) == 3


class TestCommands:
    def test_execute_attack_destroys_and_cleans_up(self, grid, make_ship, scripted_rng) -> None:
        attacker = make_ship("destroyer", q=0, r=0)
        target = make_ship("interceptor", q=2, r=0, team=Team.ENEMY, shield=0, hull=5)
        grid.place_ship(attacker)
        grid.place_ship(target)
        log = CombatLog()
        turns = TurnManager(grid, events=log, rng=scripted_rng())
        turns.initiative_queue = [attacker, target]
        attacker.start_turn()

        result = turns.execute_attack(attacker, 0, target)

        assert result.destroyed
        assert grid.get_ship_at(target.position) is None
        assert target not in turns.initiative_queue
        assert turns.outcome.winner is BattleWinner.PLAYER
        kinds = [event.kind for event in log]
        assert kinds == [
            CombatEventKind.WEAPON_FIRE,
            CombatEventKind.DAMAGE,
            CombatEventKind.DESTRUCTION,
            CombatEventKind.VICTORY,
        ]

    def test_execute_attack_requires_line_of_sight_when_asked(self, grid, make_ship) -> None:
        attacker = make_ship(q=0, r=0)
        target = make_ship(q=3, r=0, team=Team.ENEMY)
        grid.place_ship(attacker)
        grid.place_ship(target)
        grid.add_obstacle(HexCoord(1, 0))
        turns = TurnManager(grid)
        assert turns.execute_attack(attacker, 0, target, require_line_of_sight=True) is None
        assert turns.execute_attack(attacker, 0, target) is not None

    def test_execute_move_emits_event(self, grid, make_ship) -> None:
        ship = make_ship()
        grid.place_ship(ship)
        log = CombatLog()
        turns = TurnManager(grid, events=log)
        path = grid.find_path(ship.position, ship.position.neighbors()[0], ship)
        assert turns.execute_move(ship, path)
        [event] = log.of_kind(CombatEventKind.MOVEMENT)
        assert event.hex_count == 1

    def test_execute_ability_bad_index(self, grid, make_ship) -> None:
        ship = make_ship()
        turns = TurnManager(grid)
        assert not turns.execute_ability(ship, 7)


class TestEnemyTurn:
    def _enemy_first(self, turns, enemy, player) -> None:
        turns.initiative_queue = [enemy, player]
        turns.current_ship_index = 0
        enemy.start_turn()

    def test_ai_kills_exposed_target(self, grid, make_ship, scripted_rng) -> None:
        enemy = make_ship("destroyer", q=2, r=0, team=Team.ENEMY)
        player = make_ship("corvette", q=0, r=0, shield=0, hull=5)
        grid.place_ship(enemy)
        grid.place_ship(player)
        log = CombatLog()
        turns = TurnManager(grid, events=log, rng=scripted_rng())
        self._enemy_first(turns, enemy, player)

        report = turns.process_enemy_turn()

        assert report.error is None
        assert report.ability_used == "emp_burst"
        assert report.destroyed == [player.id]
        assert report.attacks[0][1] == "Heavy Cannon"
        assert turns.outcome.winner is BattleWinner.ENEMY
        assert log.of_kind(CombatEventKind.DEFEAT)
        assert not enemy.is_active

    def test_turn_ends_when_nothing_is_possible(self, grid, make_ship, scripted_rng) -> None:
        enemy = make_ship("destroyer", q=7, r=0, team=Team.ENEMY, energy=0, reactor_output=0)
        player = make_ship("corvette", q=-7, r=0)
        grid.place_ship(enemy)
        grid.place_ship(player)
        turns = TurnManager(grid, rng=scripted_rng())
        self._enemy_first(turns, enemy, player)

        report = turns.process_enemy_turn()

        assert report.error is None
        assert report.attacks_made == 0
        assert turns.get_current_ship() is player
        assert not enemy.is_active

    def test_errors_are_contained(self, grid, make_ship, scripted_rng, monkeypatch, caplog) -> None:
        enemy = make_ship("corvette", q=3, r=0, team=Team.ENEMY)
        player = make_ship("corvette", q=-3, r=0)
        grid.place_ship(enemy)
        grid.place_ship(player)
        turns = TurnManager(grid, rng=scripted_rng())
        self._enemy_first(turns, enemy, player)

        def explode(*_args):
            raise RuntimeError("targeting computer offline")

        monkeypatch.setattr(turns.ai, "choose_best_target", explode)
        with caplog.at_level(logging.ERROR):
            report = turns.process_enemy_turn()

        assert "targeting computer offline" in report.error
        assert turns.get_current_ship() is player
        assert "AI turn for" in caplog.text

    def test_reentry_is_refused(self, grid, make_ship, scripted_rng) -> None:
        enemy = make_ship("corvette", q=3, r=0, team=Team.ENEMY)
        player = make_ship("corvette", q=-3, r=0)
        grid.place_ship(enemy)
        grid.place_ship(player)
        turns = TurnManager(grid, rng=scripted_rng())
        self._enemy_first(turns, enemy, player)
        turns._processing_ai = True

        report = turns.process_enemy_turn()

        assert report.skipped
        assert turns.get_current_ship() is enemy

    def test_not_an_automated_ship(self, three_ships) -> None:
        turns, _, _, player, _ = three_ships
        turns.start_round()
        assert turns.process_enemy_turn().skipped
        assert turns.get_current_ship() is player

    def test_advance_turn_ends_player_turn(self, three_ships) -> None:
        turns, _, _, _, slow = three_ships
        turns.start_round()
        turns.advance_turn()
        assert turns.get_current_ship() is slow
        turns.advance_turn()
        assert turns.turn_number == 2
