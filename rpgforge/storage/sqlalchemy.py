"""SQLAlchemy storage backend for RPGForge."""

from __future__ import annotations

from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator, Sequence

from sqlalchemy import DateTime, Integer, JSON, String, delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ..domain.exceptions import StorageError
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
from .codec import (
    ensure_aware,
    game_from_dict,
    game_to_dict,
    quests_from_dict,
    quests_to_dict,
    rate_limit_from_dict,
    rate_limit_to_dict,
)
from .memory import default_user_factory


class Base(DeclarativeBase):
    pass


class UserTable(Base):
    __tablename__ = "rpgforge_users"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    level: Mapped[int] = mapped_column(Integer, default=1)
    experience: Mapped[int] = mapped_column(Integer, default=0)
    experience_to_next_level: Mapped[int] = mapped_column(Integer, default=100)
    health: Mapped[int] = mapped_column(Integer, default=100)
    max_health: Mapped[int] = mapped_column(Integer, default=100)
    attack: Mapped[int] = mapped_column(Integer, default=10)
    defense: Mapped[int] = mapped_column(Integer, default=5)
    gold: Mapped[int] = mapped_column(Integer, default=0)
    consumables: Mapped[dict] = mapped_column(JSON, default=dict)
    inventory: Mapped[dict] = mapped_column(JSON, default=dict)
    total_hunts: Mapped[int] = mapped_column(Integer, default=0)
    total_fishes: Mapped[int] = mapped_column(Integer, default=0)
    total_games_won: Mapped[int] = mapped_column(Integer, default=0)
    quests: Mapped[dict] = mapped_column(JSON, default=dict)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    last_active_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))


class RateLimitTable(Base):
    __tablename__ = "rpgforge_rate_limits"

    user_id: Mapped[str] = mapped_column(String(255), primary_key=True)
    payload: Mapped[dict] = mapped_column(JSON)


class GameTable(Base):
    __tablename__ = "rpgforge_games"

    game_id: Mapped[str] = mapped_column(String(32), primary_key=True)
    payload: Mapped[dict] = mapped_column(JSON)


class AuditTable(Base):
    __tablename__ = "rpgforge_audit_logs"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    action: Mapped[str] = mapped_column(String(128))
    payload: Mapped[dict] = mapped_column(JSON)


_USER_FIELDS = (
    "name",
    "level",
    "experience",
    "experience_to_next_level",
    "health",
    "max_health",
    "attack",
    "defense",
    "gold",
    "total_hunts",
    "total_fishes",
    "total_games_won",
)


def _row_to_record(row: UserTable) -> UserRecord:
    return UserRecord(
        user_id=row.user_id,
        name=row.name,
        level=row.level,
        experience=row.experience,
        experience_to_next_level=row.experience_to_next_level,
        health=row.health,
        max_health=row.max_health,
        attack=row.attack,
        defense=row.defense,
        gold=row.gold,
        consumables=dict(row.consumables or {}),
        inventory=dict(row.inventory or {}),
        total_hunts=row.total_hunts,
        total_fishes=row.total_fishes,
        total_games_won=row.total_games_won,
        quests=quests_from_dict(row.quests or {}),
        created_at=ensure_aware(row.created_at),
        last_active_at=ensure_aware(row.last_active_at),
    )


def _apply_record(row: UserTable, record: UserRecord) -> None:
    for name in _USER_FIELDS:
        setattr(row, name, getattr(record, name))
    row.consumables = dict(record.consumables)
    row.inventory = dict(record.inventory)
    row.quests = quests_to_dict(record.quests)
    row.created_at = record.created_at
    row.last_active_at = record.last_active_at


class AsyncSQLAlchemyStorage:
    """Bundle of async stores backed by SQLAlchemy."""

    def __init__(self, dsn: str, *, echo: bool = False, user_factory: UserFactory | None = None) -> None:
        self._engine = create_async_engine(dsn, echo=echo, future=True)
        self._session_factory = async_sessionmaker(self._engine, expire_on_commit=False)
        self._user_factory = user_factory

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self._session_factory() as session:
            yield session

    async def init_models(self) -> None:
        async with self._engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self._engine.dispose()

    def user_store(self) -> "AsyncSQLAlchemyUserStore":
        return AsyncSQLAlchemyUserStore(self._session_factory, self._user_factory)

    def rate_limit_store(self) -> "AsyncSQLAlchemyRateLimitStore":
        return AsyncSQLAlchemyRateLimitStore(self._session_factory)

    def game_store(self) -> "AsyncSQLAlchemyGameStore":
        return AsyncSQLAlchemyGameStore(self._session_factory)

    def audit_store(self) -> "AsyncSQLAlchemyAuditStore":
        return AsyncSQLAlchemyAuditStore(self._session_factory)


class _SessionStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._session_factory() as session:
                yield session
        except SQLAlchemyError as exc:
            raise StorageError(f"Database operation failed: {exc}") from exc


class AsyncSQLAlchemyUserStore(_SessionStore, UserStore):
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        factory: UserFactory | None = None,
    ) -> None:
        super().__init__(session_factory)
        self._factory = factory or default_user_factory

    async def get(self, user_id: str) -> UserRecord | None:
        async with self._session() as session:
            row = await session.get(UserTable, user_id)
            return _row_to_record(row) if row else None

    async def get_or_create(self, user_id: str, name: str | None = None) -> UserRecord:
        async with self._session() as session:
            row = await session.get(UserTable, user_id)
            if not row:
                row = UserTable(user_id=user_id)
                _apply_record(row, self._factory(user_id, name))
                session.add(row)
            if name and row.name != name:
                row.name = name
            row.last_active_at = utcnow()
            await session.commit()
            return _row_to_record(row)

    async def save(self, record: UserRecord) -> None:
        async with self._session() as session:
            row = await session.get(UserTable, record.user_id)
            if not row:
                row = UserTable(user_id=record.user_id)
                session.add(row)
            _apply_record(row, record)
            await session.commit()

    async def delete(self, user_id: str) -> bool:
        async with self._session() as session:
            result = await session.execute(delete(UserTable).where(UserTable.user_id == user_id))
            await session.commit()
            return bool(result.rowcount)

    async def all(self) -> Sequence[UserRecord]:
        async with self._session() as session:
            rows = (await session.execute(select(UserTable))).scalars().all()
            return [_row_to_record(row) for row in rows]


class AsyncSQLAlchemyRateLimitStore(_SessionStore, RateLimitStore):
    async def get(self, user_id: str) -> RateLimitState | None:
        async with self._session() as session:
            row = await session.get(RateLimitTable, user_id)
            return rate_limit_from_dict(row.payload) if row else None

    async def save(self, state: RateLimitState) -> None:
        async with self._session() as session:
            row = await session.get(RateLimitTable, state.user_id)
            payload = rate_limit_to_dict(state)
            if row:
                row.payload = payload
            else:
                session.add(RateLimitTable(user_id=state.user_id, payload=payload))
            await session.commit()

    async def delete(self, user_id: str) -> None:
        async with self._session() as session:
            await session.execute(delete(RateLimitTable).where(RateLimitTable.user_id == user_id))
            await session.commit()


class AsyncSQLAlchemyGameStore(_SessionStore, GameStore):
    async def get(self, game_id: str) -> GameSession | None:
        async with self._session() as session:
            row = await session.get(GameTable, game_id)
            return game_from_dict(row.payload) if row else None

    async def save(self, game: GameSession) -> None:
        async with self._session() as session:
            row = await session.get(GameTable, game.game_id)
            payload = game_to_dict(game)
            if row:
                row.payload = payload
            else:
                session.add(GameTable(game_id=game.game_id, payload=payload))
            await session.commit()

    async def exists(self, game_id: str) -> bool:
        async with self._session() as session:
            return await session.get(GameTable, game_id) is not None


class AsyncSQLAlchemyAuditStore(_SessionStore, AuditStore):
    async def add_entry(self, action: str, payload: dict) -> None:
        async with self._session() as session:
            session.add(
                AuditTable(
                    created_at=datetime.now(timezone.utc),
                    action=action,
                    payload=dict(payload),
                )
            )
            await session.commit()
