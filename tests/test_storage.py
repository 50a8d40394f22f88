import asyncio
import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

from rpgforge.storage.base import Ban, GameSession, QuestProgress, RateLimitState, SpamWarning, UserRecord
from rpgforge.storage.json_file import JsonStorage
from rpgforge.storage.locks import KeyedLocks
from rpgforge.storage.memory import InMemoryUserStore
from rpgforge.storage.sqlalchemy import AsyncSQLAlchemyStorage

MOMENT = datetime(2024, 1, 1, tzinfo=timezone.utc)


@pytest.mark.asyncio()
async def test_json_user_store_persists_to_disk(tmp_path: Path):
    storage = JsonStorage(tmp_path)
    users = storage.user_store()
    record = await users.get_or_create("42", "bob")
    record.gold = 321
    record.consumables["potion"] = 2
    await users.save(record)

    reopened = JsonStorage(tmp_path).user_store()
    loaded = await reopened.get("42")
    assert loaded is not None
    assert loaded.name == "bob"
    assert loaded.gold == 321
    assert loaded.consumables == {"potion": 2}
    assert [r.user_id for r in await reopened.all()] == ["42"]
    assert await reopened.delete("42")
    assert not await reopened.delete("42")


@pytest.mark.asyncio()
async def test_json_corrupt_document_starts_empty(tmp_path: Path):
    (tmp_path / "users.json").write_text("{not json", encoding="utf-8")
    users = JsonStorage(tmp_path).user_store()
    assert await users.get("1") is None
    quarantined = list(tmp_path.glob("users.json.corrupt-*"))
    assert len(quarantined) == 1

    await users.get_or_create("1")
    data = json.loads((tmp_path / "users.json").read_text(encoding="utf-8"))
    assert list(data) == ["1"]


@pytest.mark.asyncio()
async def test_json_rate_limit_and_games_roundtrip(tmp_path: Path):
    storage = JsonStorage(tmp_path)
    spam = storage.rate_limit_store()
    state = RateLimitState(
        user_id="7",
        last_command_at=MOMENT,
        command_timestamps={"hunt": MOMENT},
        warnings=[SpamWarning(reason="spam", issued_at=MOMENT)],
        ban=Ban(reason="spam", banned_at=MOMENT, expires_at=MOMENT + timedelta(hours=1)),
    )
    await spam.save(state)
    loaded = await spam.get("7")
    assert loaded is not None
    assert loaded.command_timestamps["hunt"] == MOMENT
    assert loaded.ban is not None and loaded.ban.expires_at == MOMENT + timedelta(hours=1)
    await spam.delete("7")
    assert await spam.get("7") is None

    games = storage.game_store()
    session = GameSession(game_id="abc123", player_x="1", player_o="2", wager=5)
    session.board[4] = "X"
    await games.save(session)
    assert await games.exists("abc123")
    stored = await games.get("abc123")
    assert stored is not None and stored.board[4] == "X" and stored.wager == 5


@pytest.mark.asyncio()
async def test_memory_store_hands_out_copies():
    users = InMemoryUserStore()
    record = await users.get_or_create("1")
    record.gold = 999
    fresh = await users.get("1")
    assert fresh is not None and fresh.gold == 0


@pytest.mark.asyncio()
async def test_sqlalchemy_stores(tmp_path: Path):
    storage = AsyncSQLAlchemyStorage(f"sqlite+aiosqlite:///{tmp_path / 'rpg.db'}")
    await storage.init_models()
    try:
        users = storage.user_store()
        record = await users.get_or_create("1", "carol")
        record.gold = 55
        record.inventory["beef"] = 3
        await users.save(record)
        loaded = await users.get("1")
        assert loaded is not None
        assert loaded.gold == 55
        assert loaded.inventory == {"beef": 3}

        spam = storage.rate_limit_store()
        await spam.save(RateLimitState(user_id="1", last_command_at=MOMENT))
        state = await spam.get("1")
        assert state is not None and state.last_command_at == MOMENT

        games = storage.game_store()
        await games.save(GameSession(game_id="g1", player_x="1", player_o="2"))
        assert await games.exists("g1")
        assert not await games.exists("g2")

        await storage.audit_store().add_entry("warn", {"user_id": "1"})
        assert await users.delete("1")
    finally:
        await storage.dispose()


@pytest.mark.asyncio()
async def test_keyed_locks_serialize_same_key():
    locks = KeyedLocks()
    order: list[str] = []

    async def worker(name: str) -> None:
        async with locks.hold("user:1"):
            order.append(f"{name}-in")
            await asyncio.sleep(0)
            order.append(f"{name}-out")

    await asyncio.gather(worker("a"), worker("b"))
    assert order == ["a-in", "a-out", "b-in", "b-out"]
    assert tuple(locks.active_keys()) == ()


@pytest.mark.asyncio()
async def test_keyed_locks_multi_key_order_independent():
    locks = KeyedLocks()

    async def hold(*keys: str) -> None:
        async with locks.hold(*keys):
            await asyncio.sleep(0)

    await asyncio.wait_for(
        asyncio.gather(hold("user:a", "user:b"), hold("user:b", "user:a")), timeout=1
    )


def _full_record() -> UserRecord:
    return UserRecord(
        user_id="99",
        name="dora",
        level=4,
        experience=37,
        experience_to_next_level=800,
        health=90,
        max_health=130,
        attack=16,
        defense=9,
        gold=1234,
        consumables={"potion": 3, "bait": 0},
        inventory={"beef": 2, "iron_sword": 1},
        total_hunts=12,
        total_fishes=7,
        total_games_won=2,
        quests={
            "daily_fish": QuestProgress(
                quest_id="daily_fish",
                kind="fish",
                target=3,
                progress=3,
                reward_experience=80,
                reward_gold=150,
                reward_items={"bait": 2},
                started_at=MOMENT,
                completed_at=MOMENT + timedelta(minutes=5),
            ),
            "daily_hunt": QuestProgress(
                quest_id="daily_hunt", kind="hunt", target=5, progress=1, started_at=MOMENT
            ),
        },
        created_at=MOMENT,
        last_active_at=MOMENT + timedelta(days=1, seconds=5),
    )


@pytest.mark.asyncio()
async def test_json_user_record_roundtrip_is_exact(tmp_path: Path):
    record = _full_record()
    await JsonStorage(tmp_path).user_store().save(record)
    loaded = await JsonStorage(tmp_path).user_store().get("99")
    assert loaded == record


@pytest.mark.asyncio()
async def test_sqlalchemy_user_record_roundtrip_is_exact(tmp_path: Path):
    storage = AsyncSQLAlchemyStorage(f"sqlite+aiosqlite:///{tmp_path / 'rpg.db'}")
    await storage.init_models()
    try:
        record = _full_record()
        await storage.user_store().save(record)
        loaded = await storage.user_store().get("99")
        assert loaded == record
    finally:
        await storage.dispose()
