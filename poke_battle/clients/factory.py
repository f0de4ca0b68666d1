"""Construction of catalog clients by service kind."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Union

from .base import CatalogClient, ServiceKind
from .enriched import EnrichedPokeAPIClient
from .pokeapi import PokeAPIClient

logger = logging.getLogger(__name__)

_IMPLEMENTATIONS = {
    ServiceKind.PRIMARY: PokeAPIClient,
    ServiceKind.ALTERNATIVE: EnrichedPokeAPIClient,
}


def create_catalog_client(
    kind: Union[ServiceKind, str] = ServiceKind.PRIMARY,
    **kwargs: Any,
) -> CatalogClient:
    """Build a new client of the requested kind; nothing is cached here."""

    kind = ServiceKind(kind)
    return _IMPLEMENTATIONS[kind](**kwargs)


class CatalogClientFactory:
    """Caller-owned cache holding at most one client per kind.

    The cache lives exactly as long as the factory instance does.
    """

    def __init__(self, *, base_url: Optional[str] = None, **client_kwargs: Any) -> None:
        self._client_kwargs = dict(client_kwargs)
        if base_url:
            self._client_kwargs["base_url"] = base_url
        self._clients: Dict[ServiceKind, CatalogClient] = {}

    def get(self, kind: Union[ServiceKind, str] = ServiceKind.PRIMARY) -> CatalogClient:
        kind = ServiceKind(kind)
        client = self._clients.get(kind)
        if client is None:
            logger.debug("Creating %s catalog client", kind.value)
            client = create_catalog_client(kind, **self._client_kwargs)
            self._clients[kind] = client
        return client

    async def reset(self) -> None:
        """Close and forget every cached client."""

        clients = list(self._clients.values())
        self._clients.clear()
        for client in clients:
            await client.aclose()
