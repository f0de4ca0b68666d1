"""Normalized creature records shared by the clients and the battle engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from fractions import Fraction
from typing import List, Optional, Tuple

ARTWORK_BASE_URL = (
    "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon/other/official-artwork"
)
SPRITE_BASE_URL = "https://raw.githubusercontent.com/PokeAPI/sprites/master/sprites/pokemon"
UNKNOWN = "unknown"


def artwork_url(creature_id: int) -> str:
    return f"{ARTWORK_BASE_URL}/{creature_id}.png"


def sprite_url(creature_id: int) -> str:
    return f"{SPRITE_BASE_URL}/{creature_id}.png"


def _first_or_unknown(values: Tuple[str, ...]) -> str:
    return values[0] if values else UNKNOWN


@dataclass(frozen=True, slots=True)
class CreatureSummary:
    """Catalog list entry: a dense id plus the species name."""

    id: int
    name: str

    @property
    def artwork_url(self) -> str:
        return artwork_url(self.id)

    @property
    def sprite_url(self) -> str:
        return sprite_url(self.id)


@dataclass(frozen=True, slots=True)
class Creature:
    """Full detail record for a single creature.

    Sequences are stored as tuples so a roster entry can never be mutated
    after it has been fetched.
    """

    id: int
    name: str
    hp: int
    attack: int = 0
    defense: int = 0
    special_attack: int = 0
    special_defense: int = 0
    speed: int = 0
    types: Tuple[str, ...] = field(default_factory=tuple)
    abilities: Tuple[str, ...] = field(default_factory=tuple)
    moves: Tuple[str, ...] = field(default_factory=tuple)
    description: str = ""
    height: int = 0
    weight: int = 0
    base_experience: Optional[int] = None
    capture_rate: int = 0
    growth_rate: str = ""
    habitat: str = ""

    def __post_init__(self) -> None:
        if self.hp <= 0:
            raise ValueError(f"Creature {self.name!r} must have positive hp, got {self.hp}")
        # Lists coming from callers are frozen into tuples.
        for name in ("types", "abilities", "moves"):
            value = getattr(self, name)
            if not isinstance(value, tuple):
                object.__setattr__(self, name, tuple(value))

    @property
    def artwork_url(self) -> str:
        return artwork_url(self.id)

    @property
    def sprite_url(self) -> str:
        return sprite_url(self.id)

    @property
    def total_stats(self) -> int:
        return (
            self.hp
            + self.attack
            + self.defense
            + self.special_attack
            + self.special_defense
            + self.speed
        )

    @property
    def average_stats(self) -> Fraction:
        """Exact mean of the six base stats."""

        return Fraction(self.total_stats, 6)

    @property
    def primary_type(self) -> str:
        return _first_or_unknown(self.types)

    @property
    def primary_ability(self) -> str:
        return _first_or_unknown(self.abilities)

    @property
    def primary_move(self) -> str:
        return _first_or_unknown(self.moves)

    def stat_block(self) -> dict:
        return {
            "hp": self.hp,
            "attack": self.attack,
            "defense": self.defense,
            "special-attack": self.special_attack,
            "special-defense": self.special_defense,
            "speed": self.speed,
        }


Roster = List[Creature]
