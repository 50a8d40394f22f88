"""Storage backends for RPGForge."""

from .base import (
    AuditStore,
    Ban,
    GameSession,
    GameStore,
    QuestProgress,
    RateLimitState,
    RateLimitStore,
    SpamWarning,
    UserRecord,
    UserStore,
)
from .json_file import JsonDocument, JsonStorage
from .locks import KeyedLocks
from .memory import InMemoryAuditStore, InMemoryGameStore, InMemoryRateLimitStore, InMemoryUserStore
from .sqlalchemy import AsyncSQLAlchemyStorage

__all__ = [
    "AuditStore",
    "Ban",
    "GameSession",
    "GameStore",
    "QuestProgress",
    "RateLimitState",
    "RateLimitStore",
    "SpamWarning",
    "UserRecord",
    "UserStore",
    "JsonDocument",
    "JsonStorage",
    "KeyedLocks",
    "InMemoryAuditStore",
    "InMemoryGameStore",
    "InMemoryRateLimitStore",
    "InMemoryUserStore",
    "AsyncSQLAlchemyStorage",
]
