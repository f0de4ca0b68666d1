"""JSON-ready views of creatures, turns and session snapshots."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional

from ..battle import DamageRange, TurnOutcome
from ..models import Creature, CreatureSummary
from .session import SessionSnapshot


def summary_payload(summary: CreatureSummary) -> Dict[str, Any]:
    return {
        "id": summary.id,
        "name": summary.name,
        "artwork_url": summary.artwork_url,
        "sprite_url": summary.sprite_url,
    }


def creature_payload(creature: Creature) -> Dict[str, Any]:
    return {
        "id": creature.id,
        "name": creature.name,
        "stats": creature.stat_block(),
        "total_stats": creature.total_stats,
        "average_stats": float(creature.average_stats),
        "types": list(creature.types),
        "abilities": list(creature.abilities),
        "moves": list(creature.moves),
        "primary_move": creature.primary_move,
        "description": creature.description,
        "height": creature.height,
        "weight": creature.weight,
        "base_experience": creature.base_experience,
        "capture_rate": creature.capture_rate,
        "growth_rate": creature.growth_rate,
        "habitat": creature.habitat,
        "artwork_url": creature.artwork_url,
        "sprite_url": creature.sprite_url,
    }


def summaries_payload(summaries: Iterable[CreatureSummary]) -> List[Dict[str, Any]]:
    return [summary_payload(summary) for summary in summaries]


def outcome_payload(outcome: Optional[TurnOutcome]) -> Optional[Dict[str, Any]]:
    if outcome is None:
        return None
    return {
        "player_damage": outcome.player_damage,
        "opponent_damage": outcome.opponent_damage,
        "opponent_move": outcome.opponent_move,
    }


def range_payload(bounds: Optional[DamageRange]) -> Optional[Dict[str, int]]:
    if bounds is None:
        return None
    return {"min_damage": bounds.min_damage, "max_damage": bounds.max_damage}


def snapshot_payload(snapshot: SessionSnapshot) -> Dict[str, Any]:
    return {
        "catalog_size": snapshot.catalog_size,
        "selected_team": [creature_payload(c) for c in snapshot.selected_team],
        "opponent_team": [creature_payload(c) for c in snapshot.opponent_team],
        "current_player_index": snapshot.current_player_index,
        "current_opponent_index": snapshot.current_opponent_index,
        "player_hp": snapshot.player_hp,
        "opponent_hp": snapshot.opponent_hp,
        "phase": snapshot.phase.value,
        "result": snapshot.result.value,
        "turn": snapshot.turn,
        "is_loading": snapshot.is_loading,
        "loading_creature_id": snapshot.loading_creature_id,
        "is_team_full": snapshot.is_team_full,
        "error_message": snapshot.error_message,
        "show_error": snapshot.show_error,
        "damage_preview": range_payload(snapshot.damage_preview),
    }
