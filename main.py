"""Command-line interface for running a headless creature battle."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import random
import sys
from dataclasses import replace
from typing import List, Optional

from poke_battle.battle import BattleEngine, BattleResult, DamageCalculator, TurnOutcome
from poke_battle.clients import ServiceKind
from poke_battle.config import ConfigError, Settings, load_settings
from poke_battle.logging_setup import setup_logging
from poke_battle.services import BattleSession
from poke_battle.services.payloads import snapshot_payload

logger = logging.getLogger(__name__)


def _parse_team(raw: str) -> List[int]:
    try:
        ids = [int(part) for part in raw.split(",") if part.strip()]
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Team must be comma-separated ids: {raw!r}") from exc
    if any(creature_id <= 0 for creature_id in ids):
        raise argparse.ArgumentTypeError("Creature ids must be positive")
    return ids


def _describe_turn(session: BattleSession, move: str, outcome: Optional[TurnOutcome]) -> str:
    snap = session.snapshot()
    if outcome is None:
        return f"Turn {snap.turn}: no action"
    line = f"Turn {snap.turn}: {move} dealt {outcome.player_damage}"
    if outcome.opponent_move:
        line += f"; opponent used {outcome.opponent_move} for {outcome.opponent_damage}"
    return f"{line} (HP {snap.player_hp} vs {snap.opponent_hp})"


async def play(
    session: BattleSession,
    team: List[int],
    *,
    max_turns: int = 500,
    echo=print,
) -> BattleResult:
    """Load the catalog, pick ``team`` (topping up at random), and fight it out."""

    catalog = await session.load_catalog()
    if session.show_error:
        echo(f"Error: {session.error_message}")
        return BattleResult.IN_PROGRESS

    wanted = list(team)
    while not session.is_team_full:
        if not wanted and not catalog:
            echo("Error: the catalog is empty")
            return BattleResult.IN_PROGRESS
        creature_id = wanted.pop(0) if wanted else session.rng.choice(catalog).id
        if not await session.select_creature(creature_id):
            echo(f"Error: {session.error_message or f'could not add #{creature_id}'}")
            return BattleResult.IN_PROGRESS

    snap = session.snapshot()
    echo("Your team: " + ", ".join(c.name for c in snap.selected_team))
    echo("Opponents: " + ", ".join(c.name for c in snap.opponent_team))

    for _ in range(max_turns):
        state = session.engine.state
        if not session.engine.is_battling:
            break
        move = state.active_player.primary_move if state.active_player else "Attack"
        echo(_describe_turn(session, move, session.perform_turn(move)))
    else:
        echo(f"No winner after {max_turns} turns")

    result = session.snapshot().result
    echo(f"Result: {result.value}")
    return result


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run a creature battle against a random team")
    parser.add_argument(
        "--team",
        type=_parse_team,
        default=[],
        help="Comma-separated catalog ids (missing slots are picked at random)",
    )
    parser.add_argument(
        "--service",
        choices=[kind.value for kind in ServiceKind],
        help="Catalog client variant (default: from POKE_BATTLE_SERVICE or primary)",
    )
    parser.add_argument("--seed", type=int, help="Seed for opponent picks and damage rolls")
    parser.add_argument("--max-turns", type=int, default=500)
    parser.add_argument(
        "--json",
        action="store_true",
        help="Emit the final session snapshot as JSON",
    )
    parser.add_argument("--log-level", help="Override POKE_BATTLE_LOG_LEVEL")
    args = parser.parse_args(argv)

    try:
        settings = load_settings()
    except ConfigError as exc:
        raise SystemExit(f"Invalid configuration: {exc}")
    if args.service:
        settings = replace(settings, service_kind=ServiceKind(args.service))
    setup_logging(args.log_level or settings.log_level)
    logger.debug("Arguments parsed: %s", args)

    return asyncio.run(_run(settings, args))


async def _run(settings: Settings, args: argparse.Namespace) -> int:
    engine = BattleEngine(DamageCalculator(random.Random(args.seed)))
    session = BattleSession.from_settings(settings, engine=engine, rng=random.Random(args.seed))
    echo = (lambda _line: None) if args.json else print
    try:
        result = await play(session, args.team, max_turns=args.max_turns, echo=echo)
        if args.json:
            json.dump(snapshot_payload(session.snapshot()), sys.stdout, indent=2)
            sys.stdout.write("\n")
    finally:
        await session.aclose()
    return 0 if result is not BattleResult.IN_PROGRESS else 1


if __name__ == "__main__":
    raise SystemExit(main())
