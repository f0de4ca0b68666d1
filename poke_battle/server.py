"""FastMCP server exposing the battle session commands as tools."""

from __future__ import annotations

from typing import Annotated, Any, Dict, List

from fastmcp import FastMCP

from .config import load_settings
from .logging_setup import setup_logging
from .services import BattleSession
from .services.payloads import outcome_payload, snapshot_payload, summaries_payload

_settings = load_settings()
app = FastMCP("poke-battle", version="0.1.0")
_session = BattleSession.from_settings(_settings)


def _with_state(**extra: Any) -> Dict[str, Any]:
    payload = dict(extra)
    payload["state"] = snapshot_payload(_session.snapshot())
    return payload


@app.tool()
async def load_catalog() -> List[Dict[str, Any]]:
    """Fetch (once) and return the selectable creature catalog."""

    return summaries_payload(await _session.load_catalog())


@app.tool()
def search_catalog(
    text: Annotated[str, "Name fragment or id digits; empty returns everything"] = "",
) -> List[Dict[str, Any]]:
    """Filter the loaded catalog by name or id."""

    return summaries_payload(_session.search(text))


@app.tool()
async def select_creature(
    creature_id: Annotated[int, "Catalog id of the creature to add"],
) -> Dict[str, Any]:
    """Add a creature to the team; the fifth pick starts the battle."""

    accepted = await _session.select_creature(creature_id)
    return _with_state(accepted=accepted)


@app.tool()
def remove_from_team(
    index: Annotated[int, "Position in the team to remove"],
) -> Dict[str, Any]:
    """Remove a team member and return to team selection."""

    return _with_state(removed=_session.remove_from_team(index))


@app.tool()
def perform_turn(
    move_name: Annotated[str, "Move used by the active creature"],
) -> Dict[str, Any]:
    """Attack with the active creature and take the opponent's counter."""

    return _with_state(outcome=outcome_payload(_session.perform_turn(move_name)))


@app.tool()
def switch_active(
    index: Annotated[int, "Team position to switch in"],
) -> Dict[str, Any]:
    """Switch the active creature; the opponent gets a free attack."""

    return _with_state(outcome=outcome_payload(_session.switch_active(index)))


@app.tool()
def reset_battle() -> Dict[str, Any]:
    """Clear both teams and go back to team selection."""

    _session.reset_battle()
    return _with_state()


@app.tool()
def dismiss_error() -> Dict[str, Any]:
    """Acknowledge the current error notification."""

    _session.clear_error()
    return _with_state()


@app.tool()
def battle_state() -> Dict[str, Any]:
    """Return the current session snapshot."""

    return snapshot_payload(_session.snapshot())


def run() -> None:
    """Entry point for `python -m poke_battle.server` or console script."""

    setup_logging(_settings.log_level)
    print("[poke-battle] Starting MCP server. Press Ctrl+C to stop.")
    app.run()


if __name__ == "__main__":
    run()
