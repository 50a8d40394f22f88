"""JSON document storage backend for RPGForge.

Each entity kind lives in its own document (``users.json``, ``spam.json``,
``tictactoe.json``). Every write replaces the whole document atomically and
all writes to one document pass through that document's lock.
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Any, Callable, Generic, Sequence, TypeVar

from ..domain.exceptions import StorageError
from .base import (
    GameSession,
    GameStore,
    RateLimitState,
    RateLimitStore,
    UserFactory,
    UserRecord,
    UserStore,
    utcnow,
)
from .codec import (
    game_from_dict,
    game_to_dict,
    rate_limit_from_dict,
    rate_limit_to_dict,
    user_from_dict,
    user_to_dict,
)
from .memory import default_user_factory

logger = logging.getLogger(__name__)

T = TypeVar("T")


class JsonDocument:
    """A JSON object persisted as a single file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self.lock = asyncio.Lock()

    async def load(self) -> dict[str, Any]:
        """Return the full snapshot, raising StorageError on unreadable data."""
        return await asyncio.to_thread(self._read)

    async def save(self, snapshot: dict[str, Any]) -> None:
        """Atomically replace the document with ``snapshot``."""
        await asyncio.to_thread(self._write, snapshot)

    async def load_or_empty(self) -> dict[str, Any]:
        try:
            return await self.load()
        except StorageError:
            logger.error("Document %s is unreadable; starting from an empty snapshot.", self.path, exc_info=True)
            await asyncio.to_thread(self._quarantine)
            return {}

    def _read(self) -> dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Cannot read {self.path}: {exc}") from exc
        if not raw.strip():
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise StorageError(f"Corrupt JSON in {self.path}: {exc}") from exc
        if not isinstance(data, dict):
            raise StorageError(f"Document {self.path} must contain a JSON object")
        return data

    def _write(self, snapshot: dict[str, Any]) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    json.dump(snapshot, handle, ensure_ascii=False, indent=2)
                    handle.flush()
                    os.fsync(handle.fileno())
                os.replace(tmp_name, self.path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc

    def _quarantine(self) -> None:
        if not self.path.exists():
            return
        target = self.path.with_name(f"{self.path.name}.corrupt-{utcnow():%Y%m%d%H%M%S}")
        try:
            shutil.copy2(self.path, target)
        except OSError:
            logger.warning("Could not keep a copy of corrupt document %s.", self.path)
        else:
            logger.warning("Kept a copy of corrupt document %s at %s.", self.path, target)


class _JsonRecordStore(Generic[T]):
    def __init__(
        self,
        document: JsonDocument,
        encode: Callable[[T], dict[str, Any]],
        decode: Callable[[dict[str, Any]], T],
    ) -> None:
        self._document = document
        self._encode = encode
        self._decode = decode

    async def _get(self, key: str) -> T | None:
        async with self._document.lock:
            snapshot = await self._document.load_or_empty()
        data = snapshot.get(key)
        return self._decode(data) if data else None

    async def _put(self, key: str, value: T) -> None:
        async with self._document.lock:
            snapshot = await self._document.load_or_empty()
            snapshot[key] = self._encode(value)
            await self._document.save(snapshot)

    async def _remove(self, key: str) -> bool:
        async with self._document.lock:
            snapshot = await self._document.load_or_empty()
            if key not in snapshot:
                return False
            del snapshot[key]
            await self._document.save(snapshot)
            return True

    async def _values(self) -> list[T]:
        async with self._document.lock:
            snapshot = await self._document.load_or_empty()
        return [self._decode(data) for data in snapshot.values()]


class JsonUserStore(_JsonRecordStore[UserRecord], UserStore):
    def __init__(self, document: JsonDocument, factory: UserFactory | None = None) -> None:
        super().__init__(document, user_to_dict, user_from_dict)
        self._factory = factory or default_user_factory

    async def get(self, user_id: str) -> UserRecord | None:
        return await self._get(user_id)

    async def get_or_create(self, user_id: str, name: str | None = None) -> UserRecord:
        async with self._document.lock:
            snapshot = await self._document.load_or_empty()
            data = snapshot.get(user_id)
            record = user_from_dict(data) if data else self._factory(user_id, name)
            if name and record.name != name:
                record.name = name
            record.last_active_at = utcnow()
            snapshot[user_id] = user_to_dict(record)
            await self._document.save(snapshot)
        return record

    async def save(self, record: UserRecord) -> None:
        await self._put(record.user_id, record)

    async def delete(self, user_id: str) -> bool:
        return await self._remove(user_id)

    async def all(self) -> Sequence[UserRecord]:
        return await self._values()


class JsonRateLimitStore(_JsonRecordStore[RateLimitState], RateLimitStore):
    def __init__(self, document: JsonDocument) -> None:
        super().__init__(document, rate_limit_to_dict, rate_limit_from_dict)

    async def get(self, user_id: str) -> RateLimitState | None:
        return await self._get(user_id)

    async def save(self, state: RateLimitState) -> None:
        await self._put(state.user_id, state)

    async def delete(self, user_id: str) -> None:
        await self._remove(user_id)


class JsonGameStore(_JsonRecordStore[GameSession], GameStore):
    def __init__(self, document: JsonDocument) -> None:
        super().__init__(document, game_to_dict, game_from_dict)

    async def get(self, game_id: str) -> GameSession | None:
        return await self._get(game_id)

    async def save(self, session: GameSession) -> None:
        await self._put(session.game_id, session)

    async def exists(self, game_id: str) -> bool:
        return await self._get(game_id) is not None


class JsonStorage:
    """Bundle of JSON document stores rooted at one data directory."""

    def __init__(self, data_dir: str | Path, *, user_factory: UserFactory | None = None) -> None:
        self.data_dir = Path(data_dir)
        self.users = JsonDocument(self.data_dir / "users.json")
        self.spam = JsonDocument(self.data_dir / "spam.json")
        self.games = JsonDocument(self.data_dir / "tictactoe.json")
        self._user_factory = user_factory

    def user_store(self) -> JsonUserStore:
        return JsonUserStore(self.users, self._user_factory)

    def rate_limit_store(self) -> JsonRateLimitStore:
        return JsonRateLimitStore(self.spam)

    def game_store(self) -> JsonGameStore:
        return JsonGameStore(self.games)
