"""Storage abstractions used by the RPGForge services."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Optional, Protocol, Sequence


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(slots=True)
class QuestProgress:
    """A started quest with the reward it was started with."""

    quest_id: str
    kind: str
    target: int
    progress: int = 0
    reward_experience: int = 0
    reward_gold: int = 0
    reward_items: dict[str, int] = field(default_factory=dict)
    started_at: datetime = field(default_factory=utcnow)
    completed_at: datetime | None = None

    @property
    def completed(self) -> bool:
        return self.completed_at is not None


@dataclass(slots=True)
class UserRecord:
    user_id: str
    name: str | None = None
    level: int = 1
    experience: int = 0
    experience_to_next_level: int = 100
    health: int = 100
    max_health: int = 100
    attack: int = 10
    defense: int = 5
    gold: int = 0
    consumables: dict[str, int] = field(default_factory=dict)
    inventory: dict[str, int] = field(default_factory=dict)
    total_hunts: int = 0
    total_fishes: int = 0
    total_games_won: int = 0
    quests: dict[str, QuestProgress] = field(default_factory=dict)
    created_at: datetime = field(default_factory=utcnow)
    last_active_at: datetime = field(default_factory=utcnow)


@dataclass(slots=True)
class SpamWarning:
    reason: str
    issued_at: datetime


@dataclass(slots=True)
class Ban:
    reason: str
    banned_at: datetime
    expires_at: datetime
    warning_count: int = 0


@dataclass(slots=True)
class RateLimitState:
    user_id: str
    last_command_at: datetime | None = None
    command_timestamps: dict[str, datetime] = field(default_factory=dict)
    warnings: list[SpamWarning] = field(default_factory=list)
    ban: Ban | None = None


@dataclass(slots=True)
class GameSession:
    game_id: str
    player_x: str
    player_o: str
    wager: int = 0
    board: list[str | None] = field(default_factory=lambda: [None] * 9)
    turn: str = "X"
    status: str = "waiting"
    winner: str | None = None
    created_at: datetime = field(default_factory=utcnow)
    started_at: datetime | None = None
    ended_at: datetime | None = None


UserFactory = Callable[[str, Optional[str]], UserRecord]


class UserStore(Protocol):
    async def get(self, user_id: str) -> UserRecord | None:
        ...

    async def get_or_create(self, user_id: str, name: str | None = None) -> UserRecord:
        ...

    async def save(self, record: UserRecord) -> None:
        ...

    async def delete(self, user_id: str) -> bool:
        ...

    async def all(self) -> Sequence[UserRecord]:
        ...


class RateLimitStore(Protocol):
    async def get(self, user_id: str) -> RateLimitState | None:
        ...

    async def save(self, state: RateLimitState) -> None:
        ...

    async def delete(self, user_id: str) -> None:
        ...


class GameStore(Protocol):
    async def get(self, game_id: str) -> GameSession | None:
        ...

    async def save(self, session: GameSession) -> None:
        ...

    async def exists(self, game_id: str) -> bool:
        ...


class AuditStore(Protocol):
    async def add_entry(self, action: str, payload: dict) -> None:
        ...
