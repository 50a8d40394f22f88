"""Top level application object for RPGForge bots."""

from __future__ import annotations

import logging
from datetime import datetime
from random import Random
from typing import Any, Callable

from .admin.service import AdminService
from .commands.context import ReplySender
from .commands.dispatcher import CommandTable, Dispatcher
from .commands.rpg import register_builtin_commands, register_game_commands
from .commands.tictactoe import TICTACTOE
from .config import RpgForgeConfig
from .domain.events import EventBus
from .domain.items import ItemCatalog
from .domain.player import PlayerService
from .domain.progression import new_user
from .domain.quests import QuestCatalog
from .domain.ratelimit import RateLimiter
from .domain.tictactoe import TicTacToeService
from .loaders import (
    load_catalog_from_json,
    load_default_catalog,
    load_default_quests,
    load_quests_from_json,
)
from .registry import MiniGameRegistry
from .storage.base import AuditStore, GameStore, RateLimitStore, UserRecord, UserStore, utcnow
from .storage.json_file import JsonStorage
from .storage.locks import KeyedLocks
from .storage.memory import (
    InMemoryAuditStore,
    InMemoryGameStore,
    InMemoryRateLimitStore,
    InMemoryUserStore,
)
from .storage.sqlalchemy import AsyncSQLAlchemyStorage

logger = logging.getLogger(__name__)

MINI_GAME = "mini-game"


class BotApp:
    """Central dependency container used by bots, the API and extensions."""

    def __init__(
        self,
        config: RpgForgeConfig,
        *,
        catalog: ItemCatalog | None = None,
        quests: QuestCatalog | None = None,
        user_store: UserStore | None = None,
        rate_limit_store: RateLimitStore | None = None,
        game_store: GameStore | None = None,
        audit_store: AuditStore | None = None,
        event_bus: EventBus | None = None,
        rng: Random | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.config = config
        self.event_bus = event_bus or EventBus()
        self.locks = KeyedLocks()
        self.mini_games = MiniGameRegistry()
        self.mini_games.register(TICTACTOE)
        self.catalog = catalog if catalog is not None else self._load_catalog()
        self.quests = quests if quests is not None else self._load_quests()

        self._rng = rng or (Random(config.rng_seed) if config.rng_seed is not None else Random())
        self._clock = clock or utcnow
        self.started_at = self._clock()

        self._sqlalchemy_storage: AsyncSQLAlchemyStorage | None = None
        (
            self.user_store,
            self.rate_limit_store,
            self.game_store,
            self.audit_store,
        ) = self._wire_storage(user_store, rate_limit_store, game_store, audit_store)

        self.player_service = PlayerService(
            self.user_store,
            catalog=self.catalog,
            progression=config.progression,
            rewards=config.rewards,
            locks=self.locks,
            event_bus=self.event_bus,
            rng=self._rng,
            quest_catalog=self.quests,
            clock=self._clock,
        )
        self.rate_limiter = RateLimiter(
            self.rate_limit_store,
            config.rate_limit,
            locks=self.locks,
            clock=self._clock,
        )
        self.tictactoe_service = TicTacToeService(
            self.game_store,
            self.user_store,
            locks=self.locks,
            event_bus=self.event_bus,
            clock=self._clock,
        )
        self.admin_service = AdminService(
            self.player_service,
            self.rate_limiter,
            self.audit_store,
            self.event_bus,
            audit_enabled=config.admin.enable_audit_logs,
        )

    def new_user(self, user_id: str, name: str | None = None) -> UserRecord:
        return new_user(user_id, name, self.config.progression)

    def build_command_table(self) -> CommandTable:
        """Built-in commands first, then game commands, then mini-games."""
        table = CommandTable()
        register_builtin_commands(table)
        register_game_commands(table)
        for game in self.mini_games.all():
            table.register_many(game.command_names(), game.handler, source=f"{MINI_GAME}:{game.game_id}")
        return table

    def dispatcher(self, sender: ReplySender) -> Dispatcher:
        return Dispatcher(self, self.build_command_table(), sender)

    def _load_catalog(self) -> ItemCatalog:
        catalog = ItemCatalog()
        if self.config.storage.backend == "memory" and not self.config.catalog_path:
            load_default_catalog(catalog)
        else:
            load_catalog_from_json(catalog, self.config.resolve_catalog_path())
        return catalog

    def _load_quests(self) -> QuestCatalog:
        quests = QuestCatalog()
        if self.config.storage.backend == "memory" and not self.config.quests_path:
            load_default_quests(quests)
        else:
            load_quests_from_json(quests, self.config.resolve_quests_path())
        return quests

    def _wire_storage(
        self,
        user_store: UserStore | None,
        rate_limit_store: RateLimitStore | None,
        game_store: GameStore | None,
        audit_store: AuditStore | None,
    ) -> tuple[UserStore, RateLimitStore, GameStore, AuditStore]:
        if user_store and rate_limit_store and game_store and audit_store:
            return user_store, rate_limit_store, game_store, audit_store

        backend = self.config.storage.backend
        if backend == "memory":
            return (
                user_store or InMemoryUserStore(self.new_user),
                rate_limit_store or InMemoryRateLimitStore(),
                game_store or InMemoryGameStore(),
                audit_store or InMemoryAuditStore(),
            )
        if backend == "json":
            storage = JsonStorage(self.config.storage.data_dir, user_factory=self.new_user)
            return (
                user_store or storage.user_store(),
                rate_limit_store or storage.rate_limit_store(),
                game_store or storage.game_store(),
                audit_store or InMemoryAuditStore(),
            )
        if backend == "sqlalchemy":
            dsn = self.config.storage.resolve_dsn()
            if not dsn:
                raise ValueError("SQLAlchemy backend requires a DSN")
            sql_storage = AsyncSQLAlchemyStorage(
                dsn, echo=self.config.storage.echo_sql, user_factory=self.new_user
            )
            self._sqlalchemy_storage = sql_storage
            return (
                user_store or sql_storage.user_store(),
                rate_limit_store or sql_storage.rate_limit_store(),
                game_store or sql_storage.game_store(),
                audit_store or sql_storage.audit_store(),
            )
        raise ValueError(f"Unsupported storage backend {backend}")

    def snapshot(self) -> dict[str, Any]:
        """Export current configuration for debugging."""
        return {
            "storage": self.config.storage.backend,
            "items": [item.item_id for item in self.catalog.iter_items()],
            "shop": [entry.item_id for entry in self.catalog.iter_shop()],
            "quests": [quest.quest_id for quest in self.quests.iter_quests()],
            "commands": self.build_command_table().names(),
            "mini_games": [game.game_id for game in self.mini_games.all()],
        }

    async def init_backend(self) -> None:
        """Initialize storage backend resources (e.g., database tables)."""
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.init_models()

    async def close(self) -> None:
        if self._sqlalchemy_storage:
            await self._sqlalchemy_storage.dispose()
