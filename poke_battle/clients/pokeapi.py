"""Primary PokeAPI catalog client with linear backoff on transient failures."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

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
from .errors import InvalidResponse, MaxRetriesReached

logger = logging.getLogger(__name__)


class PokeAPIClient(HTTPCatalogClient):
    """Catalog client that retries rate limits, 5xx and transport failures.

    The retry loop runs to success or exhaustion; it is not preemptible.
    """

    kind = ServiceKind.PRIMARY

    def __init__(
        self,
        *,
        base_url: Optional[str] = None,
        client: Optional[httpx.AsyncClient] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        timeout: float = 15.0,
        max_retries: int = 5,
        retry_delay: float = 2.0,
        cache_ttl: int = 600,
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
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.cache_ttl = cache_ttl
        self._sleep = sleep
        self._cache: Dict[str, tuple[float, Dict[str, Any]]] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    async def fetch_list(
        self, limit: int = DEFAULT_LIST_LIMIT, offset: int = 0
    ) -> List[CreatureSummary]:
        url = self.list_url(limit, offset)
        payload = await self._get_json(url)
        summaries = parse_list_payload(payload, offset)
        logger.info("Fetched %d catalog entries (limit=%d, offset=%d)", len(summaries), limit, offset)
        return summaries

    async def fetch_detail(self, creature_id: int) -> Creature:
        url = self.detail_url(creature_id)
        payload = await self._get_json(url)
        creature = build_creature(payload, creature_id, stats=extract_stats(payload))
        logger.info("Fetched creature %s (#%d)", creature.name, creature.id)
        return creature

    async def fetch_with_retry(self, url: str) -> Dict[str, Any]:
        """GET ``url`` and decode it, retrying transient failures.

        Attempt ``n`` (starting at 1 for the first retry) waits
        ``retry_delay * n`` before going out again.
        """

        attempt = 0
        while True:
            logger.debug("GET %s (attempt %d/%d)", url, attempt + 1, self.max_retries + 1)
            try:
                response = await self.http.get(url)
            except httpx.TransportError as exc:
                error = classify_transport_error(exc)
                if attempt < self.max_retries:
                    attempt += 1
                    await self._backoff(attempt, f"{type(error).__name__}: {exc}")
                    continue
                logger.error("Giving up on %s after %d retries: %s", url, attempt, error)
                raise error from exc

            status = response.status_code
            if 200 <= status <= 299:
                return decode_json(response)
            if is_retryable_status(status):
                if attempt < self.max_retries:
                    attempt += 1
                    await self._backoff(attempt, f"HTTP {status}")
                    continue
                logger.error("Giving up on %s after %d retries (HTTP %d)", url, attempt, status)
                raise MaxRetriesReached(f"HTTP {status} persisted after {attempt} retries")
            logger.error("Unexpected status %d from %s", status, url)
            raise InvalidResponse(status)

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    async def _get_json(self, url: str) -> Dict[str, Any]:
        now = time.time()
        cached = self._cache.get(url)
        if cached and now - cached[0] < self.cache_ttl:
            return cached[1]

        payload = await self.fetch_with_retry(url)
        self._cache[url] = (now, payload)
        return payload

    async def _backoff(self, attempt: int, reason: str) -> None:
        delay = self.retry_delay * attempt
        logger.warning(
            "%s, waiting %.1fs before retry %d/%d", reason, delay, attempt, self.max_retries
        )
        await self._sleep(delay)
