"""Damage resolution and the battle state machine."""

from .damage import DamageCalculator, DamageRange
from .engine import BattleEngine, BattlePhase, BattleResult, BattleState, TurnOutcome

__all__ = [
    "BattleEngine",
    "BattlePhase",
    "BattleResult",
    "BattleState",
    "DamageCalculator",
    "DamageRange",
    "TurnOutcome",
]
