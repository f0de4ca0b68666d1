"""Error taxonomy raised by the catalog clients."""

from __future__ import annotations

from typing import Optional


class CatalogError(RuntimeError):
    """Base class for every failure surfaced by a catalog client."""


class NetworkError(CatalogError):
    """Transport failure that does not fit a more specific category."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"Network error: {cause}")
        self.cause = cause


class InvalidResponse(CatalogError):
    """Upstream answered with a status outside 2xx that is not retried."""

    def __init__(self, status_code: Optional[int] = None) -> None:
        message = "Invalid response from catalog"
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        super().__init__(message)
        self.status_code = status_code


class MaxRetriesReached(CatalogError):
    """Rate limiting or server errors persisted past the retry budget."""


class InvalidData(CatalogError):
    """A 2xx body could not be decoded or normalized."""


class ConnectionFailure(CatalogError):
    """The connection could not be established or was lost."""


class PathNotFound(ConnectionFailure):
    """No network route to the catalog host."""


class NoLocalEndpoint(ConnectionFailure):
    """The local side of the connection could not be bound."""


class ProtocolConnectionError(ConnectionFailure):
    """The connection broke at the protocol level mid-exchange."""


class Timeout(CatalogError):
    """The request did not complete in time."""
