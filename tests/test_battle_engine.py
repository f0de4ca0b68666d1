"""Tests for the battle state machine."""

from __future__ import annotations

import random

from poke_battle.battle import (
    BattleEngine,
    BattlePhase,
    BattleResult,
    DamageCalculator,
    TurnOutcome,
)
from poke_battle.models import Creature


class FixedCalculator(DamageCalculator):
    """Always rolls the neutral factor so damage is floor(atk / def * 20)."""

    def roll(self) -> float:
        return 1.0


def creature(name: str, hp: int = 100, attack: int = 50, defense: int = 50, moves=("tackle",)) -> Creature:
    return Creature(id=1, name=name, hp=hp, attack=attack, defense=defense, moves=moves)


def engine_with(player, opponent) -> BattleEngine:
    engine = BattleEngine(FixedCalculator())
    assert engine.initialize(player, opponent)
    return engine


def test_initialize_enters_battle_with_first_creatures_hp() -> None:
    engine = engine_with([creature("a", hp=80), creature("b")], [creature("x", hp=120)])
    state = engine.state

    assert state.phase is BattlePhase.BATTLING
    assert state.result is BattleResult.IN_PROGRESS
    assert (state.player_hp, state.opponent_hp) == (80, 120)
    assert (state.current_player_index, state.current_opponent_index) == (0, 0)
    assert state.turn == 0


def test_initialize_with_empty_roster_is_a_no_op() -> None:
    engine = BattleEngine()

    assert engine.initialize([], [creature("x")]) is False
    assert engine.state.phase is BattlePhase.SELECTING_TEAM


def test_turn_before_battle_does_nothing() -> None:
    engine = BattleEngine()

    assert engine.perform_turn("tackle") is None
    assert engine.state.phase is BattlePhase.SELECTING_TEAM


def test_exchange_of_blows() -> None:
    engine = engine_with([creature("a")], [creature("x", moves=("ember", "growl"))])

    outcome = engine.perform_turn("tackle")
    state = engine.state

    assert outcome == TurnOutcome(player_damage=20, opponent_damage=20, opponent_move="ember")
    assert (state.player_hp, state.opponent_hp) == (80, 80)
    assert state.turn == 1


def test_opponent_without_moves_uses_fallback_move() -> None:
    engine = engine_with([creature("a")], [creature("x", moves=())])

    assert engine.perform_turn("tackle").opponent_move == "Attack"


def test_two_one_hp_creatures_finish_within_two_turns() -> None:
    engine = BattleEngine(DamageCalculator(random.Random(3)))
    engine.initialize(
        [creature("a", hp=1), creature("b", hp=1)],
        [creature("x", hp=1), creature("y", hp=1)],
    )

    for _ in range(2):
        engine.perform_turn("tackle")

    assert engine.state.result is not BattleResult.IN_PROGRESS
    assert engine.state.phase is BattlePhase.FINISHED


def test_fainted_opponent_is_replaced_and_turn_ends() -> None:
    engine = engine_with([creature("a")], [creature("x", hp=15), creature("y", hp=70)])

    outcome = engine.perform_turn("tackle")
    state = engine.state

    assert outcome == TurnOutcome(player_damage=20, opponent_damage=0, opponent_move="")
    assert state.current_opponent_index == 1
    assert state.opponent_hp == 70
    assert state.player_hp == 100
    assert state.phase is BattlePhase.BATTLING

    # The replacement attacks on the following turn.
    assert engine.perform_turn("tackle").opponent_damage == 20
    assert engine.state.player_hp == 80


def test_last_opponent_fainting_means_player_wins() -> None:
    engine = engine_with([creature("a")], [creature("x", hp=10)])

    outcome = engine.perform_turn("tackle")
    state = engine.state

    assert outcome.opponent_damage == 0
    assert state.result is BattleResult.PLAYER_WON
    assert state.phase is BattlePhase.FINISHED
    assert state.opponent_hp == 0


def test_fainted_player_is_replaced_by_next_in_roster() -> None:
    engine = engine_with(
        [creature("a", hp=10), creature("b", hp=90)],
        [creature("x", hp=500)],
    )

    engine.perform_turn("tackle")
    state = engine.state

    assert state.current_player_index == 1
    assert state.player_hp == 90
    assert state.phase is BattlePhase.BATTLING


def test_last_player_fainting_means_opponent_wins() -> None:
    engine = engine_with([creature("a", hp=10, attack=5)], [creature("x", hp=500)])

    engine.perform_turn("tackle")
    state = engine.state

    assert state.result is BattleResult.OPPONENT_WON
    assert state.phase is BattlePhase.FINISHED
    assert state.player_hp == 0


def test_finished_battle_is_frozen() -> None:
    engine = engine_with([creature("a", hp=10)], [creature("x", hp=10)])
    engine.perform_turn("tackle")
    finished = engine.state

    assert engine.perform_turn("tackle") is None
    assert engine.switch_active(0) is None
    assert engine.state == finished


def test_out_of_bounds_index_forces_player_win() -> None:
    engine = engine_with([creature("a")], [creature("x")])
    engine._state.current_opponent_index = 3

    assert engine.perform_turn("tackle") is None
    assert engine.state.result is BattleResult.PLAYER_WON
    assert engine.state.phase is BattlePhase.FINISHED


def test_switch_out_of_range_is_a_no_op() -> None:
    engine = engine_with([creature("a"), creature("b")], [creature("x")])
    engine.perform_turn("tackle")
    before = engine.state

    assert engine.switch_active(2) is None
    assert engine.switch_active(-1) is None
    assert engine.switch_active(0) is None
    assert engine.state == before


def test_switch_costs_a_turn() -> None:
    engine = engine_with(
        [creature("a"), creature("b", hp=60, defense=100)],
        [creature("x", moves=("bite",))],
    )

    outcome = engine.switch_active(1)
    state = engine.state

    assert outcome == TurnOutcome(player_damage=0, opponent_damage=10, opponent_move="bite")
    assert state.current_player_index == 1
    assert state.player_hp == 50
    assert state.opponent_hp == 100
    assert state.turn == 1


def test_switched_in_creature_can_faint_immediately() -> None:
    engine = engine_with(
        [creature("a"), creature("b", hp=5), creature("c", hp=70)],
        [creature("x")],
    )

    engine.switch_active(1)
    state = engine.state

    assert state.current_player_index == 2
    assert state.player_hp == 70


def test_reset_is_idempotent() -> None:
    engine = engine_with([creature("a")], [creature("x")])
    engine.perform_turn("tackle")

    engine.reset()
    once = engine.state
    engine.reset()

    assert engine.state == once
    assert once.phase is BattlePhase.SELECTING_TEAM
    assert once.player_roster == [] and once.opponent_roster == []
    assert (once.player_hp, once.opponent_hp) == (100, 100)
    assert once.result is BattleResult.IN_PROGRESS


def test_state_copies_do_not_leak_into_the_engine() -> None:
    engine = engine_with([creature("a")], [creature("x")])
    copy = engine.state
    copy.player_roster.clear()
    copy.player_hp = 1

    assert len(engine.state.player_roster) == 1
    assert engine.state.player_hp == 100
