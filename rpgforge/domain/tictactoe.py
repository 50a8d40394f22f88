"""Wagered tic-tac-toe between two players.

A session moves ``waiting -> playing -> ended``. Wagers are checked when the
game is created and joined but never reserved; at the end the loser pays only
if they still hold the wager at that moment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Callable

from ..storage.base import GameSession, GameStore, UserRecord, UserStore, utcnow
from ..storage.locks import KeyedLocks, game_key, user_key
from .economy import can_afford, transfer_if_possible
from .events import GAME_ENDED, EventBus, GameEndedEvent
from .exceptions import (
    GameNotFound,
    InsufficientFunds,
    InvalidGameState,
    NotParticipant,
    NotYourTurn,
    ValidationError,
)

logger = logging.getLogger(__name__)

WAITING = "waiting"
PLAYING = "playing"
ENDED = "ended"
DRAW = "draw"

LINES = (
    (0, 1, 2),
    (3, 4, 5),
    (6, 7, 8),
    (0, 3, 6),
    (1, 4, 7),
    (2, 5, 8),
    (0, 4, 8),
    (2, 4, 6),
)

_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"
_NEW_GAME_KEY = "game:__new__"


def check_winner(board: list[str | None]) -> str | None:
    """Return ``"X"``, ``"O"``, ``"draw"`` or ``None`` while the game is open."""
    for a, b, c in LINES:
        if board[a] and board[a] == board[b] == board[c]:
            return board[a]
    if all(cell is not None for cell in board):
        return DRAW
    return None


def make_game_id(moment: datetime, offset: int = 0) -> str:
    """Last six base-36 digits of the epoch milliseconds."""
    value = int(moment.timestamp() * 1000) + offset
    digits = ""
    while value:
        value, rem = divmod(value, 36)
        digits = _BASE36[rem] + digits
    return (digits or "0")[-6:]


def mark_of(session: GameSession, user_id: str) -> str | None:
    if user_id == session.player_x:
        return "X"
    if user_id == session.player_o:
        return "O"
    return None


@dataclass(slots=True)
class Settlement:
    winner_id: str | None
    loser_id: str | None
    wager: int
    transferred: bool


@dataclass(slots=True)
class MoveOutcome:
    session: GameSession
    position: int
    mark: str
    result: str | None
    settlement: Settlement | None = None

    @property
    def finished(self) -> bool:
        return self.result is not None


@dataclass(slots=True)
class ForfeitOutcome:
    session: GameSession
    forfeited_by: str
    settlement: Settlement


class TicTacToeEngine:
    """Pure state transitions; callers load and persist around them."""

    def create(
        self,
        game_id: str,
        first: UserRecord,
        second: UserRecord,
        wager: int,
        now: datetime,
    ) -> GameSession:
        if first.user_id == second.user_id:
            raise ValidationError("You cannot play against yourself")
        if wager < 0:
            raise ValidationError("Wager cannot be negative")
        self._check_funds(first, second, wager)
        return GameSession(
            game_id=game_id,
            player_x=first.user_id,
            player_o=second.user_id,
            wager=wager,
            created_at=now,
        )

    def join(
        self,
        session: GameSession,
        actor_id: str,
        player_x: UserRecord,
        player_o: UserRecord,
        now: datetime,
    ) -> GameSession:
        if session.status != WAITING:
            raise InvalidGameState(f"Game {session.game_id} is already {session.status}")
        if mark_of(session, actor_id) is None:
            raise NotParticipant(f"Game {session.game_id} did not invite you")
        self._check_funds(player_x, player_o, session.wager)
        session.status = PLAYING
        session.turn = "X"
        session.started_at = now
        return session

    def move(self, session: GameSession, actor_id: str, position: int) -> MoveOutcome:
        if session.status != PLAYING:
            raise InvalidGameState(f"Game {session.game_id} is not in progress")
        mark = mark_of(session, actor_id)
        if mark is None:
            raise NotParticipant(f"You are not a player in game {session.game_id}")
        if session.turn != mark:
            raise NotYourTurn(f"It is {session.turn}'s turn")
        if not 1 <= position <= 9:
            raise ValidationError("Position must be between 1 and 9")
        if session.board[position - 1] is not None:
            raise ValidationError(f"Position {position} is already taken")

        session.board[position - 1] = mark
        result = check_winner(session.board)
        if result is None:
            session.turn = "O" if mark == "X" else "X"
        return MoveOutcome(session=session, position=position, mark=mark, result=result)

    def forfeit(self, session: GameSession, actor_id: str) -> str:
        """Return the winning mark."""
        if session.status == ENDED:
            raise InvalidGameState(f"Game {session.game_id} has already ended")
        mark = mark_of(session, actor_id)
        if mark is None:
            raise NotParticipant(f"You are not a player in game {session.game_id}")
        return "O" if mark == "X" else "X"

    def finish(
        self,
        session: GameSession,
        result: str,
        player_x: UserRecord,
        player_o: UserRecord,
        now: datetime,
    ) -> Settlement:
        session.status = ENDED
        session.winner = result
        session.ended_at = now
        if result == DRAW:
            return Settlement(winner_id=None, loser_id=None, wager=session.wager, transferred=False)
        winner, loser = (player_x, player_o) if result == "X" else (player_o, player_x)
        winner.total_games_won += 1
        transferred = transfer_if_possible(loser, winner, session.wager)
        return Settlement(
            winner_id=winner.user_id,
            loser_id=loser.user_id,
            wager=session.wager,
            transferred=transferred,
        )

    def _check_funds(self, player_x: UserRecord, player_o: UserRecord, wager: int) -> None:
        for player in (player_x, player_o):
            if not can_afford(player, wager):
                raise InsufficientFunds(required=wager, available=player.gold)


class TicTacToeService:
    """Run engine transitions under the game and player locks."""

    def __init__(
        self,
        games: GameStore,
        users: UserStore,
        *,
        locks: KeyedLocks | None = None,
        event_bus: EventBus | None = None,
        clock: Callable[[], datetime] | None = None,
        engine: TicTacToeEngine | None = None,
    ) -> None:
        self._games = games
        self._users = users
        self._locks = locks or KeyedLocks()
        self._event_bus = event_bus or EventBus()
        self._clock = clock or utcnow
        self._engine = engine or TicTacToeEngine()

    async def create(
        self,
        first_id: str,
        second_id: str,
        wager: int = 0,
        *,
        first_name: str | None = None,
    ) -> GameSession:
        if first_id == second_id:
            raise ValidationError("You cannot play against yourself")
        async with self._locks.hold(_NEW_GAME_KEY, user_key(first_id), user_key(second_id)):
            now = self._clock()
            first = await self._users.get_or_create(first_id, first_name)
            second = await self._users.get_or_create(second_id)
            game_id = await self._unique_id(now)
            session = self._engine.create(game_id, first, second, wager, now)
            await self._games.save(session)
        logger.info("Game %s created by %s against %s (wager %s)", game_id, first_id, second_id, wager)
        return session

    async def join(self, game_id: str, actor_id: str) -> GameSession:
        players = await self._peek(game_id)
        async with self._locks.hold(game_key(game_id), *map(user_key, players)):
            session = await self._load(game_id)
            player_x = await self._users.get_or_create(session.player_x)
            player_o = await self._users.get_or_create(session.player_o)
            self._engine.join(session, actor_id, player_x, player_o, self._clock())
            await self._games.save(session)
            return session

    async def move(self, game_id: str, actor_id: str, position: int) -> MoveOutcome:
        players = await self._peek(game_id)
        async with self._locks.hold(game_key(game_id), *map(user_key, players)):
            session = await self._load(game_id)
            outcome = self._engine.move(session, actor_id, position)
            if outcome.finished:
                outcome.settlement = await self._finish(session, outcome.result)
            else:
                await self._games.save(session)
        if outcome.settlement:
            await self._announce(session, outcome.settlement)
        return outcome

    async def forfeit(self, game_id: str, actor_id: str) -> ForfeitOutcome:
        players = await self._peek(game_id)
        async with self._locks.hold(game_key(game_id), *map(user_key, players)):
            session = await self._load(game_id)
            winner_mark = self._engine.forfeit(session, actor_id)
            settlement = await self._finish(session, winner_mark)
        await self._announce(session, settlement)
        return ForfeitOutcome(session=session, forfeited_by=actor_id, settlement=settlement)

    async def board(self, game_id: str) -> GameSession:
        async with self._locks.hold(game_key(game_id)):
            return await self._load(game_id)

    async def _finish(self, session: GameSession, result: str) -> Settlement:
        player_x = await self._users.get_or_create(session.player_x)
        player_o = await self._users.get_or_create(session.player_o)
        settlement = self._engine.finish(session, result, player_x, player_o, self._clock())
        if result != DRAW:
            await self._users.save(player_x)
            await self._users.save(player_o)
        await self._games.save(session)
        return settlement

    async def _announce(self, session: GameSession, settlement: Settlement) -> None:
        if settlement.wager and not settlement.transferred and settlement.winner_id:
            logger.info(
                "Game %s wager of %s skipped: %s cannot cover it",
                session.game_id,
                settlement.wager,
                settlement.loser_id,
            )
        await self._event_bus.publish(
            GAME_ENDED,
            GameEndedEvent(
                game_id=session.game_id,
                winner=session.winner or DRAW,
                winner_id=settlement.winner_id,
                loser_id=settlement.loser_id,
                wager=settlement.wager,
                settled=settlement.transferred,
            ),
        )

    async def _peek(self, game_id: str) -> tuple[str, str]:
        # Participants never change after creation, so they can be read unlocked.
        session = await self._load(game_id)
        return session.player_x, session.player_o

    async def _load(self, game_id: str) -> GameSession:
        session = await self._games.get(game_id)
        if session is None:
            raise GameNotFound(game_id)
        return session

    async def _unique_id(self, now: datetime) -> str:
        offset = 0
        game_id = make_game_id(now)
        while await self._games.exists(game_id):
            offset += 1
            game_id = make_game_id(now, offset)
        return game_id
