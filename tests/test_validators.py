from rpgforge import BotApp, RpgForgeConfig
from rpgforge.config import ActivityReward, RewardConfig, StorageConfig
from rpgforge.domain.items import ItemCatalog, ItemCategory, ItemDefinition
from rpgforge.validators import validate_app


def test_validate_app_success():
    app = BotApp(RpgForgeConfig(bot_token="test", storage=StorageConfig(backend="memory")))
    assert validate_app(app) == []


def test_validate_app_detects_missing_consumables_and_drops():
    catalog = ItemCatalog()
    catalog.register_item(
        ItemDefinition(item_id="potion", name="Potion", category=ItemCategory.MATERIAL, price=10)
    )
    config = RpgForgeConfig(
        bot_token="test",
        storage=StorageConfig(backend="memory"),
        rewards=RewardConfig(
            activities={"hunt": ActivityReward(10, 5, 0, 1, drops=("boar",), drop_chance=2.0)}
        ),
    )
    issues = validate_app(BotApp(config, catalog=catalog))
    assert "Consumable 'potion' is registered as 'material'." in issues
    assert "Consumable 'bait' is not defined in the catalog." in issues
    assert "Potion 'potion' does not heal." in issues
    assert "Activity 'hunt' has an invalid experience range." in issues
    assert "Activity 'hunt' drops unknown item 'boar'." in issues
    assert any("drop chance" in issue for issue in issues)
