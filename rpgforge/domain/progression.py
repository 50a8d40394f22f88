"""Experience, levels and per-level stat growth."""

from __future__ import annotations

import math
from dataclasses import dataclass

from ..config import ProgressionConfig
from ..storage.base import UserRecord


@dataclass(slots=True)
class LevelUpResult:
    leveled: bool
    levels_gained: int
    level: int
    experience_gained: int


def xp_to_level(level: int, config: ProgressionConfig | None = None) -> int:
    """Experience required to advance from ``level`` to the next one."""
    config = config or ProgressionConfig()
    return max(1, math.floor(config.xp_factor * math.pow(max(1, level), config.xp_exponent)))


def new_user(user_id: str, name: str | None, config: ProgressionConfig) -> UserRecord:
    """Build a record carrying the configured starter stats."""
    starter = config.starter
    return UserRecord(
        user_id=user_id,
        name=name,
        level=starter.level,
        experience=0,
        experience_to_next_level=xp_to_level(starter.level, config),
        health=starter.max_health,
        max_health=starter.max_health,
        attack=starter.attack,
        defense=starter.defense,
        gold=starter.gold,
        consumables=dict(starter.consumables),
    )


def grant_experience(user: UserRecord, amount: int, config: ProgressionConfig) -> LevelUpResult:
    """Add experience and apply every level-up it pays for."""
    amount = max(0, int(amount))
    user.experience += amount
    levels = 0
    while user.experience >= user.experience_to_next_level:
        user.experience -= user.experience_to_next_level
        user.level += 1
        user.experience_to_next_level = xp_to_level(user.level, config)
        user.max_health += config.health_per_level
        user.attack += config.attack_per_level
        user.defense += config.defense_per_level
        user.health = min(user.max_health, user.health + config.health_per_level)
        levels += 1
    return LevelUpResult(
        leveled=levels > 0,
        levels_gained=levels,
        level=user.level,
        experience_gained=amount,
    )
