"""Capability interface and payload normalization shared by catalog clients."""

from __future__ import annotations

import enum
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional, Protocol, runtime_checkable

import httpx

from ..models import Creature, CreatureSummary
from .errors import (
    CatalogError,
    ConnectionFailure,
    InvalidData,
    NetworkError,
    NoLocalEndpoint,
    PathNotFound,
    ProtocolConnectionError,
    Timeout,
)

DEFAULT_BASE_URL = "https://pokeapi.co/api/v2"
DEFAULT_USER_AGENT = "poke-battle/0.1 (+https://github.com/)"
DEFAULT_LIST_LIMIT = 151
MOVE_SLOTS = 4

STAT_FIELDS = {
    "hp": "hp",
    "attack": "attack",
    "defense": "defense",
    "special-attack": "special_attack",
    "special-defense": "special_defense",
    "speed": "speed",
}

Sleep = Callable[[float], Awaitable[Any]]


class ServiceKind(str, enum.Enum):
    """Which catalog client implementation to build."""

    PRIMARY = "primary"
    ALTERNATIVE = "alternative"


@runtime_checkable
class CatalogClient(Protocol):
    """What the session needs from a catalog client."""

    async def fetch_list(
        self, limit: int = DEFAULT_LIST_LIMIT, offset: int = 0
    ) -> List[CreatureSummary]:
        ...

    async def fetch_detail(self, creature_id: int) -> Creature:
        ...

    async def aclose(self) -> None:
        ...


class HTTPCatalogClient:
    """Owns the lazily created ``httpx.AsyncClient`` and URL handling."""

    BASE_URL = DEFAULT_BASE_URL

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        self.base_url = (base_url or self.BASE_URL).rstrip("/")
        self.timeout = timeout
        self.user_agent = user_agent
        self._transport = transport
        self._client = client
        self._owns_client = client is None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None and self._owns_client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    def _build_url(self, endpoint: str) -> str:
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        return f"{self.base_url}/{endpoint.lstrip('/')}"

    def list_url(self, limit: int, offset: int) -> str:
        if limit < 0 or offset < 0:
            raise ValueError("limit and offset must be non-negative")
        return self._build_url(f"pokemon?limit={limit}&offset={offset}")

    def detail_url(self, creature_id: int) -> str:
        if creature_id <= 0:
            raise ValueError(f"creature id must be positive, got {creature_id}")
        return self._build_url(f"pokemon/{creature_id}")


# ----------------------------------------------------------------------
# Response helpers
# ----------------------------------------------------------------------
def decode_json(response: httpx.Response) -> Dict[str, Any]:
    try:
        payload = response.json()
    except ValueError as exc:
        raise InvalidData(f"Undecodable body from {response.request.url}") from exc
    if not isinstance(payload, dict):
        raise InvalidData(f"Expected a JSON object from {response.request.url}")
    return payload


def is_retryable_status(status_code: int) -> bool:
    return status_code == 429 or 500 <= status_code <= 599


def classify_transport_error(exc: httpx.TransportError) -> CatalogError:
    """Map an httpx transport failure onto the catalog error taxonomy."""

    message = str(exc).lower()
    if isinstance(exc, httpx.TimeoutException):
        return Timeout(str(exc) or "Request timed out")
    if isinstance(exc, httpx.ConnectError):
        if "no path found" in message or "tried to change paths" in message:
            return PathNotFound(str(exc))
        if "no local endpoint" in message:
            return NoLocalEndpoint(str(exc))
        return ConnectionFailure(str(exc) or "Connection failed")
    if isinstance(exc, httpx.ProtocolError):
        return ProtocolConnectionError(str(exc) or "Connection lost")
    if "connection was lost" in message or "connection reset" in message:
        return ConnectionFailure(str(exc))
    return NetworkError(exc)


# ----------------------------------------------------------------------
# Payload normalization
# ----------------------------------------------------------------------
def parse_list_payload(payload: Mapping[str, Any], offset: int) -> List[CreatureSummary]:
    """Turn a paged list response into summaries with dense ids.

    Ids are ``offset + i + 1`` regardless of the urls embedded upstream.
    """

    results = payload.get("results")
    if not isinstance(results, list):
        raise InvalidData("List response has no results array")
    summaries: List[CreatureSummary] = []
    for index, entry in enumerate(results):
        if not isinstance(entry, Mapping) or not entry.get("name"):
            raise InvalidData(f"List entry {index} has no name")
        summaries.append(CreatureSummary(id=offset + index + 1, name=str(entry["name"])))
    return summaries


def named_entries(payload: Mapping[str, Any], key: str, inner: str) -> List[str]:
    """Collect ``payload[key][i][inner]["name"]`` skipping malformed slots."""

    names: List[str] = []
    for slot in payload.get(key) or []:
        resource = slot.get(inner) if isinstance(slot, Mapping) else None
        if isinstance(resource, Mapping) and resource.get("name"):
            names.append(str(resource["name"]))
    return names


def extract_stats(payload: Mapping[str, Any]) -> Dict[str, int]:
    """Return the stats that are present, keyed by ``Creature`` field name."""

    entries = payload.get("stats") or []
    if not isinstance(entries, list):
        raise InvalidData("stats is not a list")
    stats: Dict[str, int] = {}
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        stat = entry.get("stat")
        if not isinstance(stat, Mapping):
            continue
        field_name = STAT_FIELDS.get(str(stat.get("name")))
        if field_name is None:
            continue
        try:
            stats[field_name] = int(entry.get("base_stat"))
        except (TypeError, ValueError):
            continue
    return stats


def build_creature(
    payload: Mapping[str, Any],
    creature_id: int,
    *,
    stats: Mapping[str, int],
    **extra: Any,
) -> Creature:
    """Assemble a ``Creature`` from a detail payload and resolved stats."""

    name = payload.get("name")
    if not name:
        raise InvalidData(f"Detail payload for {creature_id} has no name")
    hp = stats.get("hp", 0)
    if hp <= 0:
        raise InvalidData(f"{name} has non-positive hp ({hp})")
    base_experience = payload.get("base_experience")
    try:
        return Creature(
            id=int(payload.get("id") or creature_id),
            name=str(name),
            hp=hp,
            attack=stats.get("attack", 0),
            defense=stats.get("defense", 0),
            special_attack=stats.get("special_attack", 0),
            special_defense=stats.get("special_defense", 0),
            speed=stats.get("speed", 0),
            types=named_entries(payload, "types", "type"),
            abilities=named_entries(payload, "abilities", "ability"),
            moves=named_entries(payload, "moves", "move")[:MOVE_SLOTS],
            height=int(payload.get("height") or 0),
            weight=int(payload.get("weight") or 0),
            base_experience=int(base_experience) if base_experience is not None else None,
            **extra,
        )
    except (TypeError, ValueError) as exc:
        raise InvalidData(f"Malformed detail payload for {creature_id}: {exc}") from exc
