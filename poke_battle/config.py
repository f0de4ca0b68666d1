"""Environment-driven settings for the battle service."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dotenv import load_dotenv

from .clients.base import DEFAULT_BASE_URL, ServiceKind


class ConfigError(ValueError):
    """Raised when an environment setting cannot be parsed."""


@dataclass(frozen=True, slots=True)
class Settings:
    base_url: str = DEFAULT_BASE_URL
    service_kind: ServiceKind = ServiceKind.PRIMARY
    catalog_limit: int = 151
    team_size: int = 5
    error_ttl: float = 10.0
    log_level: str = "INFO"


def _int(env: Mapping[str, str], key: str, default: int, *, minimum: int = 1) -> int:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from exc
    if value < minimum:
        raise ConfigError(f"{key} must be >= {minimum}, got {value}")
    return value


def _float(env: Mapping[str, str], key: str, default: float) -> float:
    raw = env.get(key)
    if raw is None or raw == "":
        return default
    try:
        value = float(raw)
    except ValueError as exc:
        raise ConfigError(f"{key} must be a number, got {raw!r}") from exc
    if value < 0:
        raise ConfigError(f"{key} must be non-negative, got {value}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build ``Settings`` from ``env`` (defaults to the process environment).

    When reading the process environment, ``.env`` is loaded first and
    ``.env.local`` overlays it.
    """

    if env is None:
        load_dotenv()
        load_dotenv(".env.local", override=True)
        env = os.environ

    kind_name = (env.get("POKE_BATTLE_SERVICE") or ServiceKind.PRIMARY.value).strip().lower()
    try:
        kind = ServiceKind(kind_name)
    except ValueError as exc:
        choices = ", ".join(k.value for k in ServiceKind)
        raise ConfigError(f"POKE_BATTLE_SERVICE must be one of {choices}, got {kind_name!r}") from exc

    return Settings(
        base_url=env.get("POKE_BATTLE_BASE_URL") or DEFAULT_BASE_URL,
        service_kind=kind,
        catalog_limit=_int(env, "POKE_BATTLE_CATALOG_LIMIT", 151),
        team_size=_int(env, "POKE_BATTLE_TEAM_SIZE", 5),
        error_ttl=_float(env, "POKE_BATTLE_ERROR_TTL", 10.0),
        log_level=(env.get("POKE_BATTLE_LOG_LEVEL") or "INFO").upper(),
    )
