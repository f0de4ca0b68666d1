"""Turn-based creature battles backed by the PokeAPI catalog."""

from .battle import BattleEngine, BattlePhase, BattleResult
from .clients import CatalogClientFactory, ServiceKind, create_catalog_client
from .services import BattleSession

__all__ = [
    "BattleEngine",
    "BattlePhase",
    "BattleResult",
    "BattleSession",
    "CatalogClientFactory",
    "ServiceKind",
    "create_catalog_client",
]
