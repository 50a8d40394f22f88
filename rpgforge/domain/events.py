"""Domain event dispatch."""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, DefaultDict, Iterable

logger = logging.getLogger(__name__)

LEVEL_UP = "player.level_up"
GAME_ENDED = "tictactoe.game.ended"


@dataclass(slots=True)
class LevelUpEvent:
    user_id: str
    level: int
    levels_gained: int


@dataclass(slots=True)
class GameEndedEvent:
    game_id: str
    winner: str
    winner_id: str | None
    loser_id: str | None
    wager: int
    settled: bool


@dataclass(slots=True)
class AdminEvent:
    action: str
    actor_id: str
    target_id: str
    details: dict[str, Any] = field(default_factory=dict)


EventListener = Callable[[Any], Awaitable[None]]


class EventBus:
    """Simple async pub-sub used by services and extensions."""

    def __init__(self) -> None:
        self._listeners: DefaultDict[str, list[EventListener]] = defaultdict(list)

    def subscribe(self, event_name: str, listener: EventListener) -> None:
        self._listeners[event_name].append(listener)

    async def publish(self, event_name: str, payload: Any) -> None:
        for listener in list(self._listeners.get(event_name, ())):
            try:
                await listener(payload)
            except Exception:
                # Listener failures never undo a committed mutation.
                logger.exception("Listener for %s failed", event_name)

    def clear(self) -> None:
        self._listeners.clear()

    def listeners(self, event_name: str) -> Iterable[EventListener]:
        return tuple(self._listeners.get(event_name, ()))
