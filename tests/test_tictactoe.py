from datetime import datetime, timezone

import pytest

from rpgforge.domain.events import GAME_ENDED
from rpgforge.domain.exceptions import (
    GameNotFound,
    InsufficientFunds,
    InvalidGameState,
    NotParticipant,
    NotYourTurn,
    ValidationError,
)
from rpgforge.domain.tictactoe import DRAW, ENDED, PLAYING, check_winner, make_game_id


async def play(service, game_id, moves):
    outcome = None
    for actor, position in moves:
        outcome = await service.move(game_id, actor, position)
    return outcome


def test_check_winner_lines_and_draw():
    assert check_winner([None] * 9) is None
    assert check_winner(["X", "X", "X", None, "O", "O", None, None, None]) == "X"
    assert check_winner(["O", "X", None, "X", "O", None, None, None, "O"]) == "O"
    assert check_winner(["X", "O", "X", "X", "O", "O", "O", "X", "X"]) == DRAW


def test_make_game_id_is_short_base36():
    moment = datetime(2024, 5, 1, tzinfo=timezone.utc)
    game_id = make_game_id(moment)
    assert len(game_id) == 6
    assert game_id.isalnum() and game_id == game_id.lower()
    assert make_game_id(moment, 1) != game_id


@pytest.mark.asyncio()
async def test_cannot_challenge_yourself(app):
    with pytest.raises(ValidationError):
        await app.tictactoe_service.create("a", "a")


@pytest.mark.asyncio()
async def test_wager_checked_at_creation(app):
    with pytest.raises(InsufficientFunds):
        await app.tictactoe_service.create("a", "b", 500)


@pytest.mark.asyncio()
async def test_negative_wager_rejected(app):
    with pytest.raises(ValidationError):
        await app.tictactoe_service.create("a", "b", -5)


@pytest.mark.asyncio()
async def test_winner_collects_wager(app):
    events = []

    async def listener(payload):
        events.append(payload)

    app.event_bus.subscribe(GAME_ENDED, listener)
    service = app.tictactoe_service
    session = await service.create("a", "b", 50)
    await service.join(session.game_id, "b")
    outcome = await play(service, session.game_id, [("a", 1), ("b", 4), ("a", 2), ("b", 5), ("a", 3)])

    assert outcome.finished
    assert outcome.result == "X"
    assert outcome.settlement.winner_id == "a"
    assert outcome.settlement.transferred
    winner = await app.player_service.fetch("a")
    loser = await app.player_service.fetch("b")
    assert winner.gold == 150
    assert winner.total_games_won == 1
    assert loser.gold == 50
    stored = await service.board(session.game_id)
    assert stored.status == ENDED
    assert stored.winner == "X"
    assert events and events[0].winner_id == "a" and events[0].settled


@pytest.mark.asyncio()
async def test_wager_is_not_escrowed(app):
    service = app.tictactoe_service
    session = await service.create("a", "b", 50)
    await service.join(session.game_id, "b")
    await app.player_service.spend_gold("b", 100)
    outcome = await play(service, session.game_id, [("a", 1), ("b", 4), ("a", 2), ("b", 5), ("a", 3)])

    assert not outcome.settlement.transferred
    assert (await app.player_service.fetch("a")).gold == 100
    assert (await app.player_service.fetch("b")).gold == 0
    assert (await app.player_service.fetch("a")).total_games_won == 1


@pytest.mark.asyncio()
async def test_draw_moves_no_gold(app):
    service = app.tictactoe_service
    session = await service.create("a", "b", 20)
    await service.join(session.game_id, "b")
    outcome = await play(
        service,
        session.game_id,
        [("a", 1), ("b", 2), ("a", 3), ("b", 5), ("a", 4), ("b", 6), ("a", 8), ("b", 7), ("a", 9)],
    )
    assert outcome.result == DRAW
    assert outcome.settlement.winner_id is None
    assert (await app.player_service.fetch("a")).gold == 100
    assert (await app.player_service.fetch("b")).gold == 100


@pytest.mark.asyncio()
async def test_turn_and_participant_rules(app):
    service = app.tictactoe_service
    session = await service.create("a", "b")
    with pytest.raises(InvalidGameState):
        await service.move(session.game_id, "a", 1)
    with pytest.raises(NotParticipant):
        await service.join(session.game_id, "c")

    joined = await service.join(session.game_id, "b")
    assert joined.status == PLAYING
    with pytest.raises(InvalidGameState):
        await service.join(session.game_id, "b")
    with pytest.raises(NotYourTurn):
        await service.move(session.game_id, "b", 1)
    with pytest.raises(NotParticipant):
        await service.move(session.game_id, "c", 1)
    with pytest.raises(ValidationError):
        await service.move(session.game_id, "a", 10)

    await service.move(session.game_id, "a", 5)
    with pytest.raises(ValidationError):
        await service.move(session.game_id, "b", 5)


@pytest.mark.asyncio()
async def test_forfeit_hands_game_to_opponent(app):
    service = app.tictactoe_service
    session = await service.create("a", "b", 30)
    await service.join(session.game_id, "b")
    outcome = await service.forfeit(session.game_id, "b")
    assert outcome.settlement.winner_id == "a"
    assert outcome.settlement.transferred
    assert (await app.player_service.fetch("a")).gold == 130
    with pytest.raises(InvalidGameState):
        await service.forfeit(session.game_id, "a")


@pytest.mark.asyncio()
async def test_unknown_game(app):
    with pytest.raises(GameNotFound):
        await app.tictactoe_service.board("zzzzzz")


@pytest.mark.asyncio()
async def test_same_millisecond_games_get_distinct_ids(app):
    first = await app.tictactoe_service.create("a", "b")
    second = await app.tictactoe_service.create("c", "d")
    assert first.game_id != second.game_id
