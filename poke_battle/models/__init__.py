"""Shared dataclasses describing catalog creatures."""

from .creature import (
    UNKNOWN,
    Creature,
    CreatureSummary,
    Roster,
    artwork_url,
    sprite_url,
)

__all__ = [
    "UNKNOWN",
    "Creature",
    "CreatureSummary",
    "Roster",
    "artwork_url",
    "sprite_url",
]
