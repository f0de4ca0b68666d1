"""Alternative catalog client that enriches details from the species endpoint.

It trades retries for a hard per-call deadline: each request races a timer and
whichever finishes first wins.
"""

from __future__ import annotations

import asyncio
import logging
import re
from typing import Any, Awaitable, Dict, List, Mapping, Optional

import httpx

from ..models import Creature, CreatureSummary
from .base import (
    DEFAULT_LIST_LIMIT,
    HTTPCatalogClient,
    ServiceKind,
    Sleep,
    build_creature,
    classify_transport_error,
    decode_json,
    extract_stats,
    is_retryable_status,
    parse_list_payload,
)
from .errors import InvalidData, InvalidResponse, MaxRetriesReached, Timeout

logger = logging.getLogger(__name__)

STAT_FALLBACKS = {
    "hp": 100,
    "attack": 50,
    "defense": 50,
    "special_attack": 50,
    "special_defense": 50,
    "speed": 50,
}
NO_DESCRIPTION = "No description available"


class EnrichedPokeAPIClient(HTTPCatalogClient):
    """Catalog client with species data and a fixed request deadline."""

    kind = ServiceKind.ALTERNATIVE

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 10.0,
        sleep: Sleep = asyncio.sleep,
        **kwargs: Any,
    ) -> None:
        super().__init__(
            base_url=base_url,
            client=client,
            transport=transport,
            timeout=timeout,
            **kwargs,
        )
        self.request_timeout = timeout
        self._sleep = sleep

    async def fetch_list(
        self, limit: int = DEFAULT_LIST_LIMIT, offset: int = 0
    ) -> List[CreatureSummary]:
        payload = await self._get_json(self.list_url(limit, offset))
        return parse_list_payload(payload, offset)

    async def fetch_detail(self, creature_id: int) -> Creature:
        payload = await self._get_json(self.detail_url(creature_id))
        species_url = _resource_field(payload, "species", "url") or self._build_url(
            f"pokemon-species/{creature_id}"
        )
        species = await self._get_json(str(species_url))

        stats = dict(STAT_FALLBACKS)
        stats.update(extract_stats(payload))
        creature = build_creature(payload, creature_id, stats=stats, **species_fields(species))
        logger.info("Fetched enriched creature %s (#%d)", creature.name, creature.id)
        return creature

    async def with_timeout(self, operation: Awaitable[Any]) -> Any:
        """Race ``operation`` against a timer; cancel and drain the loser."""

        request = asyncio.ensure_future(operation)
        timer = asyncio.ensure_future(self._sleep(self.request_timeout))
        try:
            done, _ = await asyncio.wait(
                {request, timer}, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in (request, timer):
                if not task.done():
                    task.cancel()
            await asyncio.gather(request, timer, return_exceptions=True)

        if request in done:
            return request.result()
        raise Timeout(f"Request exceeded {self.request_timeout}s")

    async def _get_json(self, url: str) -> Dict[str, Any]:
        logger.debug("GET %s (deadline %.1fs)", url, self.request_timeout)
        try:
            response = await self.with_timeout(self.http.get(url))
        except httpx.TransportError as exc:
            error = classify_transport_error(exc)
            logger.error("Request to %s failed: %s", url, error)
            raise error from exc
        except Timeout:
            logger.error("Request to %s timed out", url)
            raise

        status = response.status_code
        if 200 <= status <= 299:
            return decode_json(response)
        if is_retryable_status(status):
            raise MaxRetriesReached(f"HTTP {status} (no automatic retry)")
        raise InvalidResponse(status)


def species_fields(species: Mapping[str, Any]) -> Dict[str, Any]:
    """Normalize the species payload into extra ``Creature`` fields."""

    try:
        return {
            "description": english_flavor_text(species),
            "capture_rate": int(species.get("capture_rate") or 0),
            "growth_rate": str(_resource_field(species, "growth_rate", "name") or ""),
            "habitat": str(_resource_field(species, "habitat", "name") or "unknown"),
        }
    except (TypeError, ValueError) as exc:
        raise InvalidData(f"Malformed species payload: {exc}") from exc


def english_flavor_text(species: Mapping[str, Any]) -> str:
    entries = species.get("flavor_text_entries") or []
    if not isinstance(entries, list):
        raise InvalidData("flavor_text_entries is not a list")
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        if _resource_field(entry, "language", "name") == "en":
            return re.sub(r"\s+", " ", str(entry.get("flavor_text") or "")).strip()
    return NO_DESCRIPTION


def _resource_field(payload: Mapping[str, Any], key: str, field_name: str) -> Any:
    resource = payload.get(key)
    if not resource:
        return None
    if not isinstance(resource, Mapping):
        raise InvalidData(f"{key} is not an object")
    return resource.get(field_name)
