"""Session orchestration on top of the catalog and battle engine."""

from .messages import describe_error
from .session import BattleSession, SessionEvent, SessionSnapshot

__all__ = ["BattleSession", "SessionEvent", "SessionSnapshot", "describe_error"]
