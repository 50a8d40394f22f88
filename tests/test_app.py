import pytest

from rpgforge.app import BotApp
from rpgforge.config import RpgForgeConfig, StorageConfig
from rpgforge.domain.items import ItemCategory
from rpgforge.storage.json_file import JsonUserStore
from rpgforge.testing import ItemFactory, app_fixture


def test_memory_app_snapshot(memory_app):
    snapshot = memory_app.snapshot()
    assert snapshot["storage"] == "memory"
    assert "potion" in snapshot["items"]
    assert snapshot["commands"][:2] == ["help", "menu"]
    assert snapshot["mini_games"] == ["tictactoe"]
    assert snapshot["quests"][:2] == ["daily_hunt", "daily_fish"]


def test_json_backend_seeds_catalog(tmp_path):
    config = RpgForgeConfig(storage=StorageConfig(backend="json", data_dir=str(tmp_path)))
    app = BotApp(config)
    assert isinstance(app.user_store, JsonUserStore)
    assert (tmp_path / "items.json").exists()
    assert "bait" in app.catalog


@pytest.mark.asyncio()
async def test_sqlalchemy_backend_defaults_to_sqlite_file(tmp_path):
    config = RpgForgeConfig(storage=StorageConfig(backend="sqlalchemy", data_dir=str(tmp_path)))
    app = BotApp(config)
    await app.init_backend()
    try:
        profile = await app.player_service.fetch("1")
        assert profile.gold == 100
        assert (tmp_path / "rpgforge.db").exists()
    finally:
        await app.close()


def test_unknown_backend_rejected(tmp_path):
    with pytest.raises(ValueError):
        BotApp(RpgForgeConfig(storage=StorageConfig(backend="redis", data_dir=str(tmp_path))))


def test_from_env_reads_prefixed_variables(monkeypatch):
    monkeypatch.setenv("RPGFORGE_BOT_TOKEN", "abc")
    monkeypatch.setenv("RPGFORGE_STORAGE_BACKEND", "memory")
    monkeypatch.setenv("RPGFORGE_ADMIN_IDS", "1, 2")
    monkeypatch.setenv("RPGFORGE_COMMAND_COOLDOWNS", '{"Hunt": 9}')
    monkeypatch.setenv("RPGFORGE_API_KEYS", '{"k": "dashboard"}')
    config = RpgForgeConfig.from_env()
    assert config.bot_token == "abc"
    assert config.admin.admin_ids == {"1", "2"}
    assert config.rate_limit.cooldown_for("hunt") == 9.0
    assert config.rate_limit.cooldown_for("fish") == 5.0
    assert config.api.keys["k"].name == "dashboard"


def test_from_env_rejects_bad_json(monkeypatch):
    monkeypatch.setenv("RPGFORGE_COMMAND_COOLDOWNS", "{oops")
    with pytest.raises(ValueError):
        RpgForgeConfig.from_env()


@pytest.mark.asyncio()
async def test_app_fixture_with_custom_items():
    app = app_fixture()
    factory = ItemFactory()
    item = factory.build(ItemCategory.MATERIAL, stack_limit=5)
    app.catalog.register_item(item)
    await app.player_service.add_item("1", item.item_id, 5)
    assert await app.player_service.item_count("1", item.item_id) == 5
