"""Remote catalog clients used by the battle session."""

from .base import CatalogClient, ServiceKind
from .enriched import EnrichedPokeAPIClient
from .errors import (
    CatalogError,
    ConnectionFailure,
    InvalidData,
    InvalidResponse,
    MaxRetriesReached,
    NetworkError,
    NoLocalEndpoint,
    PathNotFound,
    ProtocolConnectionError,
    Timeout,
)
from .factory import CatalogClientFactory, create_catalog_client
from .pokeapi import PokeAPIClient

__all__ = [
    "CatalogClient",
    "CatalogClientFactory",
    "CatalogError",
    "ConnectionFailure",
    "EnrichedPokeAPIClient",
    "InvalidData",
    "InvalidResponse",
    "MaxRetriesReached",
    "NetworkError",
    "NoLocalEndpoint",
    "PathNotFound",
    "PokeAPIClient",
    "ProtocolConnectionError",
    "ServiceKind",
    "Timeout",
    "create_catalog_client",
]
