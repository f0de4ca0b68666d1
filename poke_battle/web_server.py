"""FastAPI web server exposing the battle session via a REST API."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, Query
from pydantic import BaseModel, Field

from .config import load_settings
from .logging_setup import setup_logging
from .services import BattleSession
from .services.payloads import outcome_payload, snapshot_payload, summaries_payload


# Pydantic models for request/response
class SelectCreatureRequest(BaseModel):
    """Request model for adding a creature to the team."""

    creature_id: int = Field(..., gt=0)


class TurnRequest(BaseModel):
    """Request model for performing a turn."""

    move_name: str


class SwitchRequest(BaseModel):
    """Request model for switching the active creature."""

    index: int


class CatalogResponse(BaseModel):
    result: List[Dict[str, Any]]


class StateResponse(BaseModel):
    """Session snapshot plus the command-specific fields."""

    state: Dict[str, Any]
    accepted: Optional[bool] = None
    outcome: Optional[Dict[str, Any]] = None


def create_app(session: Optional[BattleSession] = None) -> FastAPI:
    """Build the API around ``session`` (or one built from the environment)."""

    if session is None:
        session = BattleSession.from_settings(load_settings())

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        yield
        await session.aclose()

    app = FastAPI(
        title="Poke-Battle Web API",
        description="REST API for turn-based creature battles",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.session = session

    def _state(**extra: Any) -> StateResponse:
        return StateResponse(state=snapshot_payload(session.snapshot()), **extra)

    @app.get("/api/state", response_model=StateResponse)
    async def get_state() -> StateResponse:
        """Return the current session snapshot."""
        return _state()

    @app.post("/api/catalog/load", response_model=CatalogResponse)
    async def load_catalog() -> CatalogResponse:
        """Fetch the catalog once; later calls return the cached list."""
        return CatalogResponse(result=summaries_payload(await session.load_catalog()))

    @app.get("/api/catalog", response_model=CatalogResponse)
    async def search_catalog(
        search: str = Query("", description="Name fragment or id digits"),
    ) -> CatalogResponse:
        """Filter the loaded catalog."""
        return CatalogResponse(result=summaries_payload(session.search(search)))

    @app.post("/api/team", response_model=StateResponse)
    async def select_creature(request: SelectCreatureRequest) -> StateResponse:
        """Add a creature; filling the team starts the battle."""
        accepted = await session.select_creature(request.creature_id)
        return _state(accepted=accepted)

    @app.delete("/api/team/{index}", response_model=StateResponse)
    async def remove_from_team(index: int) -> StateResponse:
        """Remove a team member and return to selection."""
        return _state(accepted=session.remove_from_team(index))

    @app.post("/api/turn", response_model=StateResponse)
    async def perform_turn(request: TurnRequest) -> StateResponse:
        """Attack with the active creature."""
        return _state(outcome=outcome_payload(session.perform_turn(request.move_name)))

    @app.post("/api/switch", response_model=StateResponse)
    async def switch_active(request: SwitchRequest) -> StateResponse:
        """Switch the active creature; costs the turn."""
        return _state(outcome=outcome_payload(session.switch_active(request.index)))

    @app.post("/api/reset", response_model=StateResponse)
    async def reset_battle() -> StateResponse:
        session.reset_battle()
        return _state()

    @app.post("/api/error/dismiss", response_model=StateResponse)
    async def dismiss_error() -> StateResponse:
        session.clear_error()
        return _state()

    return app


def run(host: str = "127.0.0.1", port: int = 8000) -> None:
    """Entry point for running the web server."""
    import uvicorn

    settings = load_settings()
    setup_logging(settings.log_level)
    print(f"[poke-battle-web] Starting web server at http://{host}:{port}")
    print("[poke-battle-web] Press Ctrl+C to stop.")
    uvicorn.run(create_app(BattleSession.from_settings(settings)), host=host, port=port)


if __name__ == "__main__":
    run()
