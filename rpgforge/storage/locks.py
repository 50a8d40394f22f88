"""Per-key async locks serializing read-modify-write cycles."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Iterable


class KeyedLocks:
    """Hand out one asyncio.Lock per entity key.

    Locks are evicted once no task holds or waits on them, so the table only
    grows with the number of entities in flight.
    """

    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = {}
        self._waiters: dict[str, int] = {}

    @asynccontextmanager
    async def hold(self, *keys: str) -> AsyncIterator[None]:
        # Sorted acquisition keeps multi-key holders from deadlocking each other.
        ordered = sorted(set(keys))
        acquired: list[str] = []
        try:
            for key in ordered:
                lock = self._checkout(key)
                try:
                    await lock.acquire()
                except BaseException:
                    self._release_ref(key)
                    raise
                acquired.append(key)
            yield
        finally:
            for key in reversed(acquired):
                self._locks[key].release()
                self._release_ref(key)

    def locked(self, key: str) -> bool:
        lock = self._locks.get(key)
        return bool(lock and lock.locked())

    def active_keys(self) -> Iterable[str]:
        return tuple(self._locks)

    def _checkout(self, key: str) -> asyncio.Lock:
        lock = self._locks.get(key)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[key] = lock
        self._waiters[key] = self._waiters.get(key, 0) + 1
        return lock

    def _release_ref(self, key: str) -> None:
        remaining = self._waiters.get(key, 1) - 1
        if remaining <= 0:
            self._waiters.pop(key, None)
            self._locks.pop(key, None)
        else:
            self._waiters[key] = remaining


def user_key(user_id: str) -> str:
    return f"user:{user_id}"


def game_key(game_id: str) -> str:
    return f"game:{game_id}"


def spam_key(user_id: str) -> str:
    return f"spam:{user_id}"
