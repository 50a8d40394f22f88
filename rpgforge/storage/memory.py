"""In-memory storage backend for RPGForge."""

from __future__ import annotations

import copy
from collections import deque
from datetime import datetime, timezone
from typing import Deque, Sequence

from .base import (
    AuditStore,
    GameSession,
    GameStore,
    RateLimitState,
    RateLimitStore,
    UserFactory,
    UserRecord,
    UserStore,
    utcnow,
)


def default_user_factory(user_id: str, name: str | None = None) -> UserRecord:
    return UserRecord(user_id=user_id, name=name)


class InMemoryUserStore(UserStore):
    """Keeps copies of records so callers never share mutable state."""

    def __init__(self, factory: UserFactory | None = None) -> None:
        self._records: dict[str, UserRecord] = {}
        self._factory = factory or default_user_factory

    async def get(self, user_id: str) -> UserRecord | None:
        record = self._records.get(user_id)
        return copy.deepcopy(record) if record else None

    async def get_or_create(self, user_id: str, name: str | None = None) -> UserRecord:
        record = self._records.get(user_id)
        if record is None:
            record = self._factory(user_id, name)
            self._records[user_id] = record
        elif name and record.name != name:
            record.name = name
        record.last_active_at = utcnow()
        return copy.deepcopy(record)

    async def save(self, record: UserRecord) -> None:
        self._records[record.user_id] = copy.deepcopy(record)

    async def delete(self, user_id: str) -> bool:
        return self._records.pop(user_id, None) is not None

    async def all(self) -> Sequence[UserRecord]:
        return [copy.deepcopy(record) for record in self._records.values()]


class InMemoryRateLimitStore(RateLimitStore):
    def __init__(self) -> None:
        self._states: dict[str, RateLimitState] = {}

    async def get(self, user_id: str) -> RateLimitState | None:
        state = self._states.get(user_id)
        return copy.deepcopy(state) if state else None

    async def save(self, state: RateLimitState) -> None:
        self._states[state.user_id] = copy.deepcopy(state)

    async def delete(self, user_id: str) -> None:
        self._states.pop(user_id, None)


class InMemoryGameStore(GameStore):
    def __init__(self) -> None:
        self._sessions: dict[str, GameSession] = {}

    async def get(self, game_id: str) -> GameSession | None:
        session = self._sessions.get(game_id)
        return copy.deepcopy(session) if session else None

    async def save(self, session: GameSession) -> None:
        self._sessions[session.game_id] = copy.deepcopy(session)

    async def exists(self, game_id: str) -> bool:
        return game_id in self._sessions


class InMemoryAuditStore(AuditStore):
    def __init__(self, *, maxlen: int = 1000) -> None:
        self._entries: Deque[tuple[datetime, str, dict]] = deque(maxlen=maxlen)

    async def add_entry(self, action: str, payload: dict) -> None:
        self._entries.append((datetime.now(timezone.utc), action, payload))

    def dump(self) -> list[tuple[datetime, str, dict]]:
        return list(self._entries)
