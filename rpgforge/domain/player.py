"""Player-centric services.

Every mutating call follows the same cycle under the user's lock: load (or
create) the record, apply a pure rule from the sibling modules, save once. A
rule that raises leaves the stored record untouched because nothing is saved.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from random import Random
from typing import Callable, Mapping, TypeVar

from ..config import ProgressionConfig, RewardConfig
from ..storage.base import QuestProgress, UserRecord, UserStore, utcnow
from ..storage.locks import KeyedLocks, user_key
from . import activities, inventory, quests
from .economy import add_currency, spend_currency
from .events import LEVEL_UP, EventBus, LevelUpEvent
from .exceptions import UnknownItem, ValidationError
from .items import ItemCatalog
from .progression import LevelUpResult, grant_experience
from .quests import QuestCatalog, QuestKind

logger = logging.getLogger(__name__)

T = TypeVar("T")

LEADERBOARD_TYPES = ("level", "gold", "hunt", "fish")
MAX_LEADERBOARD_LIMIT = 100


@dataclass(slots=True)
class PlayerProfile:
    user_id: str
    name: str | None
    level: int
    experience: int
    experience_to_next_level: int
    health: int
    max_health: int
    attack: int
    defense: int
    gold: int
    consumables: Mapping[str, int]
    inventory: Mapping[str, int]
    total_hunts: int
    total_fishes: int
    total_games_won: int


@dataclass(slots=True)
class LeaderboardEntry:
    rank: int
    user_id: str
    name: str | None
    level: int
    gold: int
    hunts: int
    fishes: int


@dataclass(slots=True)
class GlobalStats:
    total_users: int
    average_level: int
    total_gold: int
    total_hunts: int
    total_fishes: int


@dataclass(slots=True)
class Mutation:
    """Result of a mutating call: the saved profile plus the rule's own result."""

    profile: PlayerProfile
    result: object = None
    level_up: LevelUpResult | None = field(default=None)


class PlayerService:
    """Expose read/write operations for player state."""

    def __init__(
        self,
        store: UserStore,
        *,
        catalog: ItemCatalog,
        progression: ProgressionConfig | None = None,
        rewards: RewardConfig | None = None,
        locks: KeyedLocks | None = None,
        event_bus: EventBus | None = None,
        rng: Random | None = None,
        quest_catalog: QuestCatalog | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = store
        self._catalog = catalog
        self._quests = quest_catalog if quest_catalog is not None else QuestCatalog()
        self._clock = clock or utcnow
        self._progression = progression or ProgressionConfig()
        self._rewards = rewards or RewardConfig()
        self._locks = locks or KeyedLocks()
        self._event_bus = event_bus or EventBus()
        self._rng = rng or Random()

    @property
    def catalog(self) -> ItemCatalog:
        return self._catalog

    @property
    def progression(self) -> ProgressionConfig:
        return self._progression

    @property
    def quest_catalog(self) -> QuestCatalog:
        return self._quests

    async def fetch(self, user_id: str, name: str | None = None) -> PlayerProfile:
        async with self._locks.hold(user_key(user_id)):
            record = await self._store.get_or_create(user_id, name)
            return self._to_profile(record)

    async def grant_experience(self, user_id: str, amount: int) -> Mutation:
        if amount <= 0:
            raise ValidationError("Amount must be positive")
        progression = self._progression
        return await self._mutate(
            user_id, None, self._tracked(lambda record: grant_experience(record, amount, progression))
        )

    async def add_gold(self, user_id: str, amount: int) -> Mutation:
        if amount <= 0:
            raise ValidationError("Amount must be positive")
        return await self._mutate(user_id, None, lambda record: add_currency(record, amount))

    async def spend_gold(self, user_id: str, amount: int) -> Mutation:
        if amount <= 0:
            raise ValidationError("Amount must be positive")
        return await self._mutate(user_id, None, lambda record: spend_currency(record, amount))

    async def add_item(self, user_id: str, item_id: str, quantity: int = 1) -> Mutation:
        item = self._catalog.find_item(item_id)
        if item is None:
            raise UnknownItem(item_id)
        consumables = self._progression.consumable_items
        return await self._mutate(
            user_id, None, lambda record: inventory.add_item(record, item, quantity, consumables)
        )

    async def remove_item(self, user_id: str, item_id: str, quantity: int = 1) -> Mutation:
        consumables = self._progression.consumable_items
        return await self._mutate(
            user_id, None, lambda record: inventory.remove_item(record, item_id, quantity, consumables)
        )

    async def item_count(self, user_id: str, item_id: str) -> int:
        profile = await self.fetch(user_id)
        if item_id in self._progression.consumable_items:
            return profile.consumables.get(item_id, 0)
        return profile.inventory.get(item_id, 0)

    async def buy(
        self, user_id: str, item_id: str, quantity: int = 1, *, name: str | None = None
    ) -> Mutation:
        consumables = self._progression.consumable_items
        return await self._mutate(
            user_id,
            name,
            lambda record: inventory.buy_item(record, self._catalog, item_id, quantity, consumables),
        )

    async def sell(
        self, user_id: str, item_id: str, quantity: int = 1, *, name: str | None = None
    ) -> Mutation:
        consumables = self._progression.consumable_items
        return await self._mutate(
            user_id,
            name,
            lambda record: inventory.sell_item(record, self._catalog, item_id, quantity, consumables),
        )

    async def use_potion(self, user_id: str, *, name: str | None = None) -> Mutation:
        potion = self._progression.potion_item
        return await self._mutate(
            user_id, name, lambda record: inventory.use_potion(record, self._catalog, potion)
        )

    async def hunt(self, user_id: str, *, name: str | None = None) -> Mutation:
        reward = self._rewards.for_activity("hunt")
        return await self._mutate(
            user_id,
            name,
            self._tracked(
                lambda record: activities.hunt(record, reward, self._catalog, self._progression, self._rng),
                QuestKind.HUNT,
            ),
        )

    async def fish(self, user_id: str, *, name: str | None = None) -> Mutation:
        reward = self._rewards.for_activity("fish")
        return await self._mutate(
            user_id,
            name,
            self._tracked(
                lambda record: activities.fish(record, reward, self._catalog, self._progression, self._rng),
                QuestKind.FISH,
            ),
        )

    async def open_quests(self, user_id: str) -> list[QuestProgress]:
        async with self._locks.hold(user_key(user_id)):
            record = await self._store.get_or_create(user_id)
            return list(quests.open_quests(record))

    async def start_quest(self, user_id: str, quest_id: str, *, name: str | None = None) -> Mutation:
        quest = self._quests.get(quest_id)
        return await self._mutate(
            user_id, name, lambda record: quests.start_quest(record, quest, self._clock())
        )

    async def update_quest_progress(self, user_id: str, quest_id: str, amount: int = 1) -> Mutation:
        return await self._mutate(
            user_id, None, lambda record: quests.advance_quest(record, quest_id, amount, self._clock())
        )

    async def complete_quest(self, user_id: str, quest_id: str, *, name: str | None = None) -> Mutation:
        """Pay the reward of a finished quest in one locked write."""
        return await self._mutate(
            user_id,
            name,
            lambda record: quests.claim_quest(
                record, quest_id, self._catalog, self._progression, self._clock()
            ),
        )

    async def leaderboard(self, board: str = "level", limit: int = 10) -> list[LeaderboardEntry]:
        board = board.lower()
        if board not in LEADERBOARD_TYPES:
            raise ValidationError(
                f"Unknown leaderboard {board}; expected one of {', '.join(LEADERBOARD_TYPES)}"
            )
        limit = max(1, min(limit, MAX_LEADERBOARD_LIMIT))
        records = list(await self._store.all())
        if board == "level":
            records.sort(key=lambda r: (r.level, r.experience), reverse=True)
        elif board == "gold":
            records.sort(key=lambda r: r.gold, reverse=True)
        elif board == "hunt":
            records.sort(key=lambda r: r.total_hunts, reverse=True)
        else:
            records.sort(key=lambda r: r.total_fishes, reverse=True)
        return [
            LeaderboardEntry(
                rank=index,
                user_id=record.user_id,
                name=record.name,
                level=record.level,
                gold=record.gold,
                hunts=record.total_hunts,
                fishes=record.total_fishes,
            )
            for index, record in enumerate(records[:limit], start=1)
        ]

    async def global_stats(self) -> GlobalStats:
        records = await self._store.all()
        total = len(records)
        return GlobalStats(
            total_users=total,
            average_level=round(sum(r.level for r in records) / total) if total else 0,
            total_gold=sum(r.gold for r in records),
            total_hunts=sum(r.total_hunts for r in records),
            total_fishes=sum(r.total_fishes for r in records),
        )

    async def reset(self, user_id: str) -> bool:
        """Delete the record; the next reference recreates it with starter stats."""
        async with self._locks.hold(user_key(user_id)):
            deleted = await self._store.delete(user_id)
        if deleted:
            logger.info("Reset player %s", user_id)
        return deleted

    async def _mutate(
        self,
        user_id: str,
        name: str | None,
        rule: Callable[[UserRecord], T],
    ) -> Mutation:
        async with self._locks.hold(user_key(user_id)):
            record = await self._store.get_or_create(user_id, name)
            result = rule(record)
            await self._store.save(record)
            profile = self._to_profile(record)

        level_up = _level_up_of(result)
        if level_up and level_up.leveled:
            await self._event_bus.publish(
                LEVEL_UP,
                LevelUpEvent(user_id=user_id, level=level_up.level, levels_gained=level_up.levels_gained),
            )
        return Mutation(profile=profile, result=result, level_up=level_up)

    def _tracked(
        self, rule: Callable[[UserRecord], T], kind: QuestKind | None = None
    ) -> Callable[[UserRecord], T]:
        def apply(record: UserRecord) -> T:
            result = rule(record)
            now = self._clock()
            if kind is not None:
                quests.track(record, kind, now)
            quests.track(record, QuestKind.LEVEL, now)
            return result

        return apply

    def _to_profile(self, record: UserRecord) -> PlayerProfile:
        return PlayerProfile(
            user_id=record.user_id,
            name=record.name,
            level=record.level,
            experience=record.experience,
            experience_to_next_level=record.experience_to_next_level,
            health=record.health,
            max_health=record.max_health,
            attack=record.attack,
            defense=record.defense,
            gold=record.gold,
            consumables=dict(record.consumables),
            inventory=dict(record.inventory),
            total_hunts=record.total_hunts,
            total_fishes=record.total_fishes,
            total_games_won=record.total_games_won,
        )


def _level_up_of(result: object) -> LevelUpResult | None:
    if isinstance(result, LevelUpResult):
        return result
    return getattr(result, "level_up", None)
