"""Turn-based battle state machine between two rosters."""

from __future__ import annotations

import enum
import logging
from dataclasses import dataclass, field, replace
from typing import Optional, Sequence

from ..models import Creature, Roster
from .damage import DamageCalculator

logger = logging.getLogger(__name__)

NEUTRAL_HP = 100
FALLBACK_MOVE = "Attack"


class BattlePhase(str, enum.Enum):
    SELECTING_TEAM = "selecting_team"
    BATTLING = "battling"
    FINISHED = "finished"


class BattleResult(str, enum.Enum):
    IN_PROGRESS = "in_progress"
    PLAYER_WON = "player_won"
    OPPONENT_WON = "opponent_won"


@dataclass(slots=True)
class BattleState:
    """Everything an observer needs to render a battle."""

    player_roster: Roster = field(default_factory=list)
    opponent_roster: Roster = field(default_factory=list)
    current_player_index: int = 0
    current_opponent_index: int = 0
    player_hp: int = NEUTRAL_HP
    opponent_hp: int = NEUTRAL_HP
    phase: BattlePhase = BattlePhase.SELECTING_TEAM
    result: BattleResult = BattleResult.IN_PROGRESS
    turn: int = 0

    @property
    def active_player(self) -> Optional[Creature]:
        if 0 <= self.current_player_index < len(self.player_roster):
            return self.player_roster[self.current_player_index]
        return None

    @property
    def active_opponent(self) -> Optional[Creature]:
        if 0 <= self.current_opponent_index < len(self.opponent_roster):
            return self.opponent_roster[self.current_opponent_index]
        return None


@dataclass(frozen=True, slots=True)
class TurnOutcome:
    player_damage: int
    opponent_damage: int
    opponent_move: str


class BattleEngine:
    """Owns a ``BattleState`` and applies turns, switches and resets to it.

    No operation performs I/O or raises for a bad precondition; calls that
    do not apply to the current state are no-ops. A switch costs the player
    the turn: the active opponent gets a free attack on the incoming creature.

    When an opponent faints and a replacement enters, the turn ends there;
    the replacement attacks on the next call.
    """

    def __init__(self, calculator: Optional[DamageCalculator] = None) -> None:
        self.calculator = calculator or DamageCalculator()
        self._state = BattleState()

    @property
    def state(self) -> BattleState:
        """Copy of the current state; mutating it has no effect on the engine."""

        return replace(
            self._state,
            player_roster=list(self._state.player_roster),
            opponent_roster=list(self._state.opponent_roster),
        )

    @property
    def is_battling(self) -> bool:
        return self._state.phase is BattlePhase.BATTLING

    def initialize(
        self, player_roster: Sequence[Creature], opponent_roster: Sequence[Creature]
    ) -> bool:
        if not player_roster or not opponent_roster:
            logger.warning("Cannot start a battle with an empty roster")
            return False
        self._state = BattleState(
            player_roster=list(player_roster),
            opponent_roster=list(opponent_roster),
            player_hp=player_roster[0].hp,
            opponent_hp=opponent_roster[0].hp,
            phase=BattlePhase.BATTLING,
            result=BattleResult.IN_PROGRESS,
        )
        logger.info(
            "Battle started: %s vs %s",
            [c.name for c in player_roster],
            [c.name for c in opponent_roster],
        )
        return True

    def perform_turn(self, move_name: str) -> Optional[TurnOutcome]:
        state = self._state
        if state.phase is not BattlePhase.BATTLING:
            return None

        player = state.active_player
        opponent = state.active_opponent
        if player is None or opponent is None:
            # Index ran off a roster; treat as the opponent side being exhausted.
            self._finish(BattleResult.PLAYER_WON)
            return None

        player_damage = self.calculator.attack(player, opponent)
        state.opponent_hp -= player_damage
        logger.debug("%s used %s for %d damage", player.name, move_name, player_damage)

        if state.opponent_hp <= 0:
            state.turn += 1
            state.current_opponent_index += 1
            replacement = state.active_opponent
            if replacement is None:
                state.opponent_hp = 0
                self._finish(BattleResult.PLAYER_WON)
            else:
                state.opponent_hp = replacement.hp
                logger.info("%s fainted; opponent sends out %s", opponent.name, replacement.name)
            return TurnOutcome(player_damage=player_damage, opponent_damage=0, opponent_move="")

        opponent_move, opponent_damage = self._counter_attack(opponent, player)
        state.turn += 1
        return TurnOutcome(
            player_damage=player_damage,
            opponent_damage=opponent_damage,
            opponent_move=opponent_move,
        )

    def switch_active(self, to_index: int) -> Optional[TurnOutcome]:
        state = self._state
        if state.phase is not BattlePhase.BATTLING:
            return None
        if not 0 <= to_index < len(state.player_roster) or to_index == state.current_player_index:
            return None

        state.current_player_index = to_index
        incoming = state.player_roster[to_index]
        state.player_hp = incoming.hp
        logger.info("Player switched to %s", incoming.name)

        opponent = state.active_opponent
        if opponent is None:
            state.turn += 1
            return TurnOutcome(player_damage=0, opponent_damage=0, opponent_move="")
        opponent_move, opponent_damage = self._counter_attack(opponent, incoming)
        state.turn += 1
        return TurnOutcome(player_damage=0, opponent_damage=opponent_damage, opponent_move=opponent_move)

    def reset(self) -> None:
        self._state = BattleState()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _counter_attack(self, opponent: Creature, defender: Creature) -> tuple[str, int]:
        state = self._state
        move = opponent.moves[0] if opponent.moves else FALLBACK_MOVE
        damage = self.calculator.attack(opponent, defender)
        state.player_hp -= damage
        logger.debug("%s used %s for %d damage", opponent.name, move, damage)

        if state.player_hp <= 0:
            state.current_player_index += 1
            replacement = state.active_player
            if replacement is None:
                state.player_hp = 0
                self._finish(BattleResult.OPPONENT_WON)
            else:
                state.player_hp = replacement.hp
                logger.info("%s fainted; player sends out %s", defender.name, replacement.name)
        return move, damage

    def _finish(self, result: BattleResult) -> None:
        self._state.result = result
        self._state.phase = BattlePhase.FINISHED
        logger.info("Battle finished: %s", result.value)
