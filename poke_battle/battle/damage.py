"""Physical-only damage formula used by the battle engine."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass
from typing import Optional

from ..models import Creature

BASE_POWER = 20.0
MIN_RANDOM_FACTOR = 0.85
MAX_RANDOM_FACTOR = 1.15


@dataclass(frozen=True, slots=True)
class DamageRange:
    """Inclusive bounds of what one attack can deal."""

    min_damage: int
    max_damage: int

    def __contains__(self, damage: int) -> bool:
        return self.min_damage <= damage <= self.max_damage


class DamageCalculator:
    """Calculates damage as ``floor(attack / defense * 20 * r)``.

    ``r`` is drawn uniformly from [0.85, 1.15] for every attack. Defense is
    clamped to at least 1 and the result never drops below zero.
    """

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self.rng = rng or random.Random()

    def roll(self) -> float:
        return self.rng.uniform(MIN_RANDOM_FACTOR, MAX_RANDOM_FACTOR)

    def calculate_damage(
        self,
        attacker_atk: int,
        defender_def: int,
        random_factor: Optional[float] = None,
    ) -> int:
        if random_factor is None:
            random_factor = self.roll()
        defense = max(defender_def, 1)
        damage = math.floor(attacker_atk / defense * BASE_POWER * random_factor)
        return max(damage, 0)

    def attack(self, attacker: Creature, defender: Creature) -> int:
        return self.calculate_damage(attacker.attack, defender.defense)

    def damage_range(self, attacker: Creature, defender: Creature) -> DamageRange:
        return DamageRange(
            min_damage=self.calculate_damage(attacker.attack, defender.defense, MIN_RANDOM_FACTOR),
            max_damage=self.calculate_damage(attacker.attack, defender.defense, MAX_RANDOM_FACTOR),
        )
