"""User-facing wording for catalog failures."""

from __future__ import annotations

from ..clients import (
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

CONNECTION_FAILED = "Connection failed. Please check your internet connection and try again."
PATH_NOT_FOUND = "Network path not found. Please check your internet connection and try again."
NO_LOCAL_ENDPOINT = (
    "Connection error: No local endpoint available. Please check your network settings and try again."
)
PROTOCOL_ERROR = "Connection error: the connection was interrupted. Please try again."
TIMED_OUT = "Request timed out. Please check your internet connection and try again."
INVALID_RESPONSE = "Invalid response from server. Please try again."
MAX_RETRIES = "Unable to connect after several attempts. Please try again later."
INVALID_DATA = "Unable to process Pokemon data. Please try again."

# Checked in order; subclasses before their parents.
_CATEGORY_MESSAGES = (
    (PathNotFound, PATH_NOT_FOUND),
    (NoLocalEndpoint, NO_LOCAL_ENDPOINT),
    (ProtocolConnectionError, PROTOCOL_ERROR),
    (ConnectionFailure, CONNECTION_FAILED),
    (Timeout, TIMED_OUT),
    (InvalidResponse, INVALID_RESPONSE),
    (MaxRetriesReached, MAX_RETRIES),
    (InvalidData, INVALID_DATA),
)

_MESSAGE_HINTS = (
    ("no local endpoint", NO_LOCAL_ENDPOINT),
    ("quic_conn", PROTOCOL_ERROR),
    ("no path found", PATH_NOT_FOUND),
    ("tried to change paths", PATH_NOT_FOUND),
    ("received failure notification", CONNECTION_FAILED),
    ("timeout", TIMED_OUT),
    ("timed out", TIMED_OUT),
)


def describe_error(error: BaseException) -> str:
    """Return the short message shown to the player for ``error``."""

    for category, message in _CATEGORY_MESSAGES:
        if isinstance(error, category):
            return message
    if isinstance(error, NetworkError):
        return f"Network error: {error.cause}. Please try again."
    if isinstance(error, CatalogError):
        return f"Catalog error: {error}"

    text = str(error).lower()
    for hint, message in _MESSAGE_HINTS:
        if hint in text:
            return message
    return f"An unexpected error occurred: {error}"
