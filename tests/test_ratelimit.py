import pytest

from rpgforge.config import RateLimitConfig
from rpgforge.domain.exceptions import Banned, RateLimited
from rpgforge.domain.ratelimit import RateLimiter
from rpgforge.storage.memory import InMemoryRateLimitStore


@pytest.fixture()
def store() -> InMemoryRateLimitStore:
    return InMemoryRateLimitStore()


@pytest.fixture()
def limiter(store, clock) -> RateLimiter:
    config = RateLimitConfig(
        global_cooldown=1.0,
        default_command_cooldown=0.5,
        command_cooldowns={"hunt": 30.0},
        max_warnings=3,
        ban_duration=60.0,
        warn_reset_window=100.0,
    )
    return RateLimiter(store, config, clock=clock)


@pytest.mark.asyncio()
async def test_fresh_user_may_run_anything(limiter):
    assert await limiter.can_execute("u1", "hunt")
    assert await limiter.remaining("u1", "hunt") == 0.0


@pytest.mark.asyncio()
async def test_global_cooldown_then_command_cooldown(limiter, clock):
    await limiter.record_command("u1", "hunt")
    with pytest.raises(RateLimited) as exc_info:
        await limiter.check("u1", "profile")
    assert exc_info.value.seconds_remaining == pytest.approx(1.0)

    clock.advance(1.5)
    assert await limiter.can_execute("u1", "profile")
    assert await limiter.remaining("u1", "hunt") == pytest.approx(28.5)

    clock.advance(29)
    assert await limiter.can_execute("u1", "hunt")


@pytest.mark.asyncio()
async def test_cooldowns_are_per_user(limiter):
    await limiter.record_command("u1", "hunt")
    assert await limiter.can_execute("u2", "hunt")


@pytest.mark.asyncio()
async def test_warnings_escalate_to_ban(limiter, clock):
    first = await limiter.add_warning("u1", "spam")
    second = await limiter.add_warning("u1", "spam")
    assert (first.warnings, second.warnings) == (1, 2)
    assert not second.banned

    third = await limiter.add_warning("u1", "flood")
    assert third.banned
    assert third.ban_duration == 60.0
    with pytest.raises(Banned) as exc_info:
        await limiter.check("u1", "profile")
    assert exc_info.value.reason == "Too many warnings: flood"

    info = await limiter.ban_info("u1")
    assert info is not None
    assert info.seconds_remaining == pytest.approx(60.0)


@pytest.mark.asyncio()
async def test_expired_ban_is_cleared_on_read(limiter, store, clock):
    for _ in range(3):
        await limiter.add_warning("u1")
    clock.advance(61)
    assert not await limiter.is_banned("u1")
    state = await store.get("u1")
    assert state is not None and state.ban is None


@pytest.mark.asyncio()
async def test_old_warnings_fall_out_of_window(limiter, clock):
    await limiter.add_warning("u1")
    clock.advance(101)
    await limiter.add_warning("u1")
    outcome = await limiter.add_warning("u1")
    assert outcome.warnings == 2
    assert not outcome.banned


@pytest.mark.asyncio()
async def test_unban_and_clear_warnings(limiter):
    assert not await limiter.unban("u1")
    for _ in range(3):
        await limiter.add_warning("u1")
    assert await limiter.unban("u1")
    assert not await limiter.is_banned("u1")
    stats = await limiter.stats("u1")
    assert stats.warnings == 3
    await limiter.clear_warnings("u1")
    stats = await limiter.stats("u1")
    assert stats.warnings == 0
    assert stats.max_warnings == 3


@pytest.mark.asyncio()
async def test_reset_forgets_everything(limiter, store):
    await limiter.record_command("u1", "hunt")
    await limiter.add_warning("u1")
    await limiter.reset("u1")
    assert await store.get("u1") is None
    stats = await limiter.stats("u1")
    assert stats.last_command_at is None
    assert stats.warnings == 0


@pytest.mark.asyncio()
async def test_global_cooldown_boundaries(limiter, clock):
    await limiter.record_command("u1", "profile")
    clock.advance(0.5)
    assert not await limiter.can_execute("u1", "stats")
    clock.advance(0.5)
    assert await limiter.can_execute("u1", "stats")


@pytest.mark.asyncio()
async def test_admit_reserves_slot_before_handler_runs(limiter, store, clock):
    admission = await limiter.admit("u1", "hunt")
    with pytest.raises(RateLimited):
        await limiter.admit("u1", "hunt")
    state = await store.get("u1")
    assert state is not None
    assert state.last_command_at == clock.now
    assert state.command_timestamps["hunt"] == clock.now
    assert admission.previous_global is None


@pytest.mark.asyncio()
async def test_revoke_restores_previous_stamps(limiter, store, clock):
    await limiter.record_command("u1", "hunt")
    first = clock.now
    clock.advance(40)
    admission = await limiter.admit("u1", "hunt")
    await limiter.revoke(admission)
    state = await store.get("u1")
    assert state.last_command_at == first
    assert state.command_timestamps["hunt"] == first
    assert await limiter.can_execute("u1", "hunt")


@pytest.mark.asyncio()
async def test_revoke_keeps_newer_stamps(limiter, store, clock):
    admission = await limiter.admit("u1", "profile")
    clock.advance(2)
    await limiter.record_command("u1", "stats")
    await limiter.revoke(admission)
    state = await store.get("u1")
    assert state.last_command_at == clock.now
    assert "profile" not in state.command_timestamps


@pytest.mark.asyncio()
async def test_banned_user_is_not_admitted(limiter):
    for _ in range(3):
        await limiter.add_warning("u1")
    with pytest.raises(Banned):
        await limiter.admit("u1", "profile")


@pytest.mark.asyncio()
async def test_warning_after_expired_ban_starts_over(limiter, clock):
    for _ in range(3):
        await limiter.add_warning("u1")
    assert await limiter.is_banned("u1")
    clock.advance(101)
    outcome = await limiter.add_warning("u1")
    assert outcome.warnings == 1
    assert not outcome.banned
    assert not await limiter.is_banned("u1")


@pytest.mark.asyncio()
async def test_rebanned_within_window_gets_fresh_duration(limiter, clock):
    for _ in range(3):
        await limiter.add_warning("u1")
    clock.advance(61)
    outcome = await limiter.add_warning("u1")
    assert outcome.banned
    info = await limiter.ban_info("u1")
    assert info.seconds_remaining == pytest.approx(60.0)
