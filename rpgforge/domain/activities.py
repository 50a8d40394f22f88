"""Hunting and fishing: randomized rewards applied to a user record."""

from __future__ import annotations

from dataclasses import dataclass
from random import Random

from ..config import ActivityReward, ProgressionConfig
from ..storage.base import UserRecord
from .economy import add_currency
from .exceptions import InsufficientItems, InventoryFull
from .inventory import add_item, remove_item
from .items import ItemCatalog, ItemDefinition
from .progression import LevelUpResult, grant_experience


@dataclass(slots=True)
class ActivityOutcome:
    activity: str
    experience: int
    gold: int
    level_up: LevelUpResult
    drop: ItemDefinition | None = None
    bait_left: int | None = None


def hunt(
    user: UserRecord,
    reward: ActivityReward,
    catalog: ItemCatalog,
    progression: ProgressionConfig,
    rng: Random,
) -> ActivityOutcome:
    outcome = _collect("hunt", user, reward, catalog, progression, rng)
    user.total_hunts += 1
    return outcome


def fish(
    user: UserRecord,
    reward: ActivityReward,
    catalog: ItemCatalog,
    progression: ProgressionConfig,
    rng: Random,
) -> ActivityOutcome:
    """Fishing burns one bait before anything is rolled."""
    bait = progression.bait_item
    if user.consumables.get(bait, 0) <= 0:
        raise InsufficientItems(bait, required=1, available=0)
    remove_item(user, bait, 1, progression.consumable_items)
    outcome = _collect("fish", user, reward, catalog, progression, rng)
    outcome.bait_left = user.consumables.get(bait, 0)
    user.total_fishes += 1
    return outcome


def _collect(
    activity: str,
    user: UserRecord,
    reward: ActivityReward,
    catalog: ItemCatalog,
    progression: ProgressionConfig,
    rng: Random,
) -> ActivityOutcome:
    experience = rng.randint(reward.min_experience, reward.max_experience)
    gold = rng.randint(reward.min_gold, reward.max_gold)
    add_currency(user, gold)
    level_up = grant_experience(user, experience, progression)

    drop: ItemDefinition | None = None
    candidates = [item_id for item_id in reward.drops if item_id in catalog]
    if candidates and rng.random() < reward.drop_chance:
        item = catalog.get_item(rng.choice(candidates))
        try:
            add_item(user, item, 1, progression.consumable_items)
        except InventoryFull:
            # A full stack just forfeits the drop.
            drop = None
        else:
            drop = item
    return ActivityOutcome(
        activity=activity,
        experience=experience,
        gold=gold,
        level_up=level_up,
        drop=drop,
    )
