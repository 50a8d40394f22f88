"""Quest definitions and the rules that move a player's quests along.

A quest is started from the catalog, which copies its target and reward onto
the player. Progress is counted per quest kind (hunts, fishing trips, levels)
until the target is met; the reward is paid once when the quest is claimed and
the quest is then dropped from the player.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Iterable, Mapping, Sequence

from ..config import ProgressionConfig
from ..storage.base import QuestProgress, UserRecord
from . import inventory
from .economy import add_currency
from .exceptions import QuestStateError, UnknownItem, UnknownQuest, ValidationError
from .items import ItemCatalog
from .progression import LevelUpResult, grant_experience


class QuestKind(str, Enum):
    HUNT = "hunt"
    FISH = "fish"
    LEVEL = "level"
    KILL = "kill"
    COLLECT = "collect"
    EXPLORE = "explore"
    DELIVER = "deliver"


@dataclass(slots=True, frozen=True)
class QuestReward:
    experience: int = 0
    gold: int = 0
    items: Mapping[str, int] = field(default_factory=dict)


@dataclass(slots=True)
class QuestDefinition:
    quest_id: str
    name: str
    kind: QuestKind
    target: int
    description: str = ""
    group: str = "main"
    reward: QuestReward = field(default_factory=QuestReward)


@dataclass(slots=True)
class QuestClaim:
    quest_id: str
    experience: int
    gold: int
    items: Mapping[str, int]
    level_up: LevelUpResult


class QuestCatalog:
    """Registry of quest definitions."""

    def __init__(self) -> None:
        self._quests: dict[str, QuestDefinition] = {}

    def register(self, quest: QuestDefinition) -> None:
        if quest.quest_id in self._quests:
            raise ValueError(f"Quest {quest.quest_id} already registered")
        self._quests[quest.quest_id] = quest

    def register_many(self, quests: Iterable[QuestDefinition]) -> None:
        for quest in quests:
            self.register(quest)

    def get(self, quest_id: str) -> QuestDefinition:
        quest = self._quests.get(quest_id)
        if quest is None:
            raise UnknownQuest(quest_id)
        return quest

    def find(self, quest_id: str) -> QuestDefinition | None:
        return self._quests.get(quest_id)

    def iter_quests(self) -> Iterable[QuestDefinition]:
        return self._quests.values()

    def __contains__(self, quest_id: object) -> bool:
        return quest_id in self._quests

    def __len__(self) -> int:
        return len(self._quests)


def start_quest(user: UserRecord, quest: QuestDefinition, now: datetime) -> QuestProgress:
    if quest.quest_id in user.quests:
        state = "waiting to be claimed" if user.quests[quest.quest_id].completed else "already active"
        raise QuestStateError(f"Quest {quest.quest_id} is {state}")
    progress = QuestProgress(
        quest_id=quest.quest_id,
        kind=quest.kind.value,
        target=quest.target,
        reward_experience=quest.reward.experience,
        reward_gold=quest.reward.gold,
        reward_items=dict(quest.reward.items),
        started_at=now,
    )
    user.quests[quest.quest_id] = progress
    if quest.kind == QuestKind.LEVEL:
        _advance(progress, user.level - progress.progress, now)
    return progress


def advance_quest(user: UserRecord, quest_id: str, amount: int, now: datetime) -> QuestProgress:
    if amount <= 0:
        raise ValidationError("Amount must be positive")
    progress = user.quests.get(quest_id)
    if progress is None:
        raise QuestStateError(f"Quest {quest_id} has not been started")
    _advance(progress, amount, now)
    return progress


def track(user: UserRecord, kind: QuestKind, now: datetime, amount: int = 1) -> list[QuestProgress]:
    """Advance every open quest of ``kind``; return the ones this completed."""
    finished: list[QuestProgress] = []
    for progress in user.quests.values():
        if progress.completed or progress.kind != kind.value:
            continue
        step = user.level - progress.progress if kind == QuestKind.LEVEL else amount
        _advance(progress, step, now)
        if progress.completed:
            finished.append(progress)
    return finished


def claim_quest(
    user: UserRecord,
    quest_id: str,
    catalog: ItemCatalog,
    progression: ProgressionConfig,
    now: datetime,
) -> QuestClaim:
    """Pay out a completed quest; items go first since only they can fail."""
    progress = user.quests.get(quest_id)
    if progress is None:
        raise QuestStateError(f"Quest {quest_id} has not been started")
    if not progress.completed:
        raise QuestStateError(
            f"Quest {quest_id} is not complete yet ({progress.progress}/{progress.target})"
        )
    for item_id, quantity in progress.reward_items.items():
        item = catalog.find_item(item_id)
        if item is None:
            raise UnknownItem(item_id)
        inventory.add_item(user, item, quantity, progression.consumable_items)
    if progress.reward_gold > 0:
        add_currency(user, progress.reward_gold)
    level_up = grant_experience(user, progress.reward_experience, progression)
    del user.quests[quest_id]
    track(user, QuestKind.LEVEL, now)
    return QuestClaim(
        quest_id=quest_id,
        experience=progress.reward_experience,
        gold=progress.reward_gold,
        items=dict(progress.reward_items),
        level_up=level_up,
    )


def open_quests(user: UserRecord) -> Sequence[QuestProgress]:
    return sorted(user.quests.values(), key=lambda q: q.started_at)


def _advance(progress: QuestProgress, amount: int, now: datetime) -> None:
    if progress.completed or amount <= 0:
        return
    progress.progress = min(progress.target, progress.progress + amount)
    if progress.progress >= progress.target:
        progress.completed_at = now
