"""Battle session coordinating catalog fetches with the battle engine."""

from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Callable, List, Optional, Tuple

from ..battle import BattleEngine, BattlePhase, BattleResult, DamageRange, TurnOutcome
from ..clients import CatalogClient, create_catalog_client
from ..clients.base import Sleep
from ..config import Settings
from ..models import Creature, CreatureSummary
from .messages import describe_error

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionSnapshot:
    """Read-only view of everything a presentation layer may observe."""

    catalog_size: int
    selected_team: Tuple[Creature, ...]
    opponent_team: Tuple[Creature, ...]
    current_player_index: int
    current_opponent_index: int
    player_hp: int
    opponent_hp: int
    phase: BattlePhase
    result: BattleResult
    turn: int
    is_loading: bool
    loading_creature_id: Optional[int]
    is_team_full: bool
    error_message: Optional[str]
    show_error: bool
    damage_preview: Optional[DamageRange] = None


@dataclass(frozen=True, slots=True)
class SessionEvent:
    kind: str
    snapshot: SessionSnapshot


Listener = Callable[[SessionEvent], None]


class BattleSession:
    """Single-player battle session against a random opponent team.

    All mutations happen on the caller's task. Only one detail fetch may be
    in flight; a second ``select_creature`` while one is pending is rejected
    rather than queued, and the busy flag is released only when that call
    returns. Catalog failures are never re-raised from the command methods;
    they are published as a dismissible notification instead.
    """

    def __init__(
        self,
        catalog: CatalogClient,
        *,
        engine: Optional[BattleEngine] = None,
        team_size: int = 5,
        catalog_limit: int = 151,
        error_ttl: float = 10.0,
        rng: Optional[random.Random] = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        if not isinstance(catalog, CatalogClient):
            raise TypeError(f"{type(catalog).__name__} does not implement CatalogClient")
        self.catalog_client = catalog
        self.engine = engine or BattleEngine()
        self.team_size = team_size
        self.catalog_limit = catalog_limit
        self.error_ttl = error_ttl
        self.rng = rng or random.Random()
        self._sleep = sleep

        self.catalog: List[CreatureSummary] = []
        self.selected_team: List[Creature] = []
        self.is_loading = False
        self.loading_creature_id: Optional[int] = None
        self.error_message: Optional[str] = None
        self.show_error = False
        self._auto_clear_task: Optional[asyncio.Task] = None
        self._listeners: List[Listener] = []
        # Set for the whole of select_creature, opponent build included.
        self._busy = False
        # Bumped by reset_battle so a pending selection discards its result.
        self._generation = 0

    @classmethod
    def from_settings(
        cls, settings: Settings, *, catalog: Optional[CatalogClient] = None, **kwargs
    ) -> "BattleSession":
        client = catalog or create_catalog_client(settings.service_kind, base_url=settings.base_url)
        return cls(
            client,
            team_size=settings.team_size,
            catalog_limit=settings.catalog_limit,
            error_ttl=settings.error_ttl,
            **kwargs,
        )

    # ------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------
    @property
    def is_team_full(self) -> bool:
        return len(self.selected_team) >= self.team_size

    @property
    def phase(self) -> BattlePhase:
        return self.engine.state.phase

    @property
    def is_busy(self) -> bool:
        return self._busy

    def snapshot(self) -> SessionSnapshot:
        state = self.engine.state
        preview = None
        if state.phase is BattlePhase.BATTLING and state.active_player and state.active_opponent:
            preview = self.engine.calculator.damage_range(state.active_player, state.active_opponent)
        return SessionSnapshot(
            catalog_size=len(self.catalog),
            selected_team=tuple(self.selected_team),
            opponent_team=tuple(state.opponent_roster),
            current_player_index=state.current_player_index,
            current_opponent_index=state.current_opponent_index,
            player_hp=state.player_hp,
            opponent_hp=state.opponent_hp,
            phase=state.phase,
            result=state.result,
            turn=state.turn,
            is_loading=self.is_loading,
            loading_creature_id=self.loading_creature_id,
            is_team_full=self.is_team_full,
            error_message=self.error_message,
            show_error=self.show_error,
            damage_preview=preview,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for change events; returns an unsubscribe callable."""

        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    def search(self, text: str) -> List[CreatureSummary]:
        query = text.strip().lower()
        if not query:
            return list(self.catalog)
        return [
            summary
            for summary in self.catalog
            if query in summary.name.lower() or query in str(summary.id)
        ]

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    async def load_catalog(self) -> List[CreatureSummary]:
        if self.catalog:
            return list(self.catalog)
        self.is_loading = True
        try:
            self.catalog = await self.catalog_client.fetch_list(limit=self.catalog_limit, offset=0)
        except Exception as exc:
            self.is_loading = False
            self._publish_error(exc)
            return []
        finally:
            self.is_loading = False
        logger.info("Catalog loaded with %d entries", len(self.catalog))
        self._emit("catalog_loaded")
        return list(self.catalog)

    async def select_creature(self, creature_id: int) -> bool:
        """Fetch ``creature_id`` and add it to the team.

        Filling the team also builds the opponent team and starts the battle.
        Returns ``False`` when the request is rejected or fails.
        """

        if self.is_team_full or self.phase is not BattlePhase.SELECTING_TEAM:
            logger.debug("Rejecting selection of %d: team is full", creature_id)
            return False
        if self._busy:
            logger.debug(
                "Rejecting selection of %d: still loading %s", creature_id, self.loading_creature_id
            )
            return False

        self._busy = True
        self.loading_creature_id = creature_id
        generation = self._generation
        try:
            creature = await self.catalog_client.fetch_detail(creature_id)
            if generation != self._generation:
                logger.info("Discarding %s: session was reset while loading", creature.name)
                return False
            self.selected_team.append(creature)
            logger.info("Added %s to the team (%d/%d)", creature.name, len(self.selected_team), self.team_size)

            if self.is_team_full:
                self._emit("creature_selected")
                return await self._start_battle(generation)
            self.loading_creature_id = None
            self._emit("creature_selected")
            return True
        except Exception as exc:
            self.loading_creature_id = None
            self._publish_error(exc)
            return False
        finally:
            self.loading_creature_id = None
            self._busy = False

    def remove_from_team(self, index: int) -> bool:
        if self._busy:
            logger.debug("Ignoring removal of slot %d: a selection is in flight", index)
            return False
        if not 0 <= index < len(self.selected_team):
            return False
        removed = self.selected_team.pop(index)
        if self.phase is not BattlePhase.SELECTING_TEAM:
            logger.warning("Removed %s mid-battle; resetting battle state", removed.name)
        self.engine.reset()
        self._emit("creature_removed")
        return True

    def perform_turn(self, move_name: str) -> Optional[TurnOutcome]:
        was_battling = self.engine.is_battling
        outcome = self.engine.perform_turn(move_name)
        if was_battling:
            self._emit("turn_performed")
            if not self.engine.is_battling:
                self._emit("battle_finished")
        return outcome

    def switch_active(self, index: int) -> Optional[TurnOutcome]:
        outcome = self.engine.switch_active(index)
        if outcome is not None:
            self._emit("creature_switched")
            if not self.engine.is_battling:
                self._emit("battle_finished")
        return outcome

    def reset_battle(self) -> None:
        self._generation += 1
        self.selected_team = []
        self.engine.reset()
        self._emit("battle_reset")

    def clear_error(self) -> None:
        """Dismiss the current notification and cancel its auto-clear timer."""

        self._cancel_auto_clear()
        had_error = self.show_error
        self.error_message = None
        self.show_error = False
        if had_error:
            self._emit("error_cleared")

    async def aclose(self) -> None:
        self._cancel_auto_clear()
        await self.catalog_client.aclose()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _start_battle(self, generation: int) -> bool:
        max_id = max((summary.id for summary in self.catalog), default=self.catalog_limit)
        opponents: List[Creature] = []
        try:
            for _ in range(len(self.selected_team)):
                opponent_id = self.rng.randint(1, max_id)
                opponents.append(await self.catalog_client.fetch_detail(opponent_id))
        except Exception as exc:
            self.loading_creature_id = None
            if generation == self._generation:
                rolled_back = self.selected_team.pop()
                logger.warning(
                    "Opponent team failed after %d/%d; removed %s from the team",
                    len(opponents),
                    self.team_size,
                    rolled_back.name,
                )
            self._publish_error(exc)
            return False

        if generation != self._generation:
            logger.info("Discarding opponent team: session was reset while loading")
            return False
        self.loading_creature_id = None
        self.engine.initialize(self.selected_team, opponents)
        self._emit("battle_started")
        return True

    def _publish_error(self, error: BaseException) -> None:
        self._cancel_auto_clear()

        self.error_message = describe_error(error)
        self.show_error = True
        logger.warning("%s (%s: %s)", self.error_message, type(error).__name__, error)
        self._auto_clear_task = asyncio.get_running_loop().create_task(self._auto_clear())
        self._emit("error_published")

    async def _auto_clear(self) -> None:
        await self._sleep(self.error_ttl)
        self._auto_clear_task = None
        self.error_message = None
        self.show_error = False
        self._emit("error_cleared")

    def _cancel_auto_clear(self) -> None:
        if self._auto_clear_task is not None:
            self._auto_clear_task.cancel()
            self._auto_clear_task = None

    def _emit(self, kind: str) -> None:
        if not self._listeners:
            return
        event = SessionEvent(kind=kind, snapshot=self.snapshot())
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Session listener failed on %s", kind)
