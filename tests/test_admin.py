from types import SimpleNamespace

import pytest

from rpgforge.admin.service import AdminService
from rpgforge.app import BotApp
from rpgforge.config import AdminConfig, RpgForgeConfig, StorageConfig
from rpgforge.storage.memory import (
    InMemoryAuditStore,
    InMemoryGameStore,
    InMemoryRateLimitStore,
    InMemoryUserStore,
)
from rpgforge.telegram.filters import AdminFilter


@pytest.fixture()
def admin_app():
    config = RpgForgeConfig(
        bot_token="test",
        storage=StorageConfig(backend="memory"),
        admin=AdminConfig(admin_ids={"99"}),
    )
    audit_store = InMemoryAuditStore()
    app = BotApp(
        config,
        user_store=InMemoryUserStore(),
        rate_limit_store=InMemoryRateLimitStore(),
        game_store=InMemoryGameStore(),
        audit_store=audit_store,
    )
    return app


@pytest.mark.asyncio()
async def test_grant_item_and_gold_are_audited(admin_app):
    service = admin_app.admin_service
    await service.grant_item("99", "1", "potion", 2)
    await service.grant_gold("99", "1", 40)
    profile = await admin_app.player_service.fetch("1")
    assert profile.consumables["potion"] == 2
    assert profile.gold == 40

    actions = [action for _, action, _ in admin_app.audit_store.dump()]
    assert actions == ["grant_item", "grant_gold"]
    _, _, payload = admin_app.audit_store.dump()[0]
    assert payload["actor_id"] == "99"
    assert payload["user_id"] == "1"


@pytest.mark.asyncio()
async def test_warn_until_ban_then_unban(admin_app):
    events = []

    async def listener(payload):
        events.append(payload)

    admin_app.event_bus.subscribe("admin.warn", listener)
    service = admin_app.admin_service
    for _ in range(3):
        outcome = await service.warn_user("99", "5", "flood")
    assert outcome.banned
    assert await admin_app.rate_limiter.is_banned("5")
    assert len(events) == 3 and events[-1].details["banned"]

    assert await service.unban_user("99", "5")
    assert not await admin_app.rate_limiter.is_banned("5")
    assert not await service.unban_user("99", "5")


@pytest.mark.asyncio()
async def test_reset_spam_and_user(admin_app):
    service = admin_app.admin_service
    await service.warn_user("99", "5")
    await service.reset_spam("99", "5")
    assert (await admin_app.rate_limiter.stats("5")).warnings == 0

    await admin_app.player_service.add_gold("5", 10)
    assert await service.reset_user("99", "5")


@pytest.mark.asyncio()
async def test_audit_can_be_disabled(admin_app):
    service = AdminService(
        admin_app.player_service,
        admin_app.rate_limiter,
        admin_app.audit_store,
        admin_app.event_bus,
        audit_enabled=False,
    )
    await service.clear_warnings("99", "1")
    assert admin_app.audit_store.dump() == []


@pytest.mark.asyncio()
async def test_admin_filter_matches_configured_ids():
    config = RpgForgeConfig(admin=AdminConfig(admin_ids={"99"}))
    admin_filter = AdminFilter(config)
    assert await admin_filter(SimpleNamespace(from_user=SimpleNamespace(id=99)))
    assert not await admin_filter(SimpleNamespace(from_user=SimpleNamespace(id=1)))
    assert not await admin_filter(SimpleNamespace(from_user=None))
