from random import Random

import pytest

from rpgforge.config import ActivityReward, ProgressionConfig
from rpgforge.domain.activities import fish, hunt
from rpgforge.domain.exceptions import InsufficientItems
from rpgforge.domain.items import ItemCatalog
from rpgforge.domain.progression import new_user
from rpgforge.loaders import load_default_catalog


@pytest.fixture()
def catalog() -> ItemCatalog:
    catalog = ItemCatalog()
    load_default_catalog(catalog)
    return catalog


def test_hunt_grants_fixed_rewards_and_drop(catalog):
    config = ProgressionConfig()
    user = new_user("1", None, config)
    reward = ActivityReward(5, 5, 10, 10, drops=("beef",), drop_chance=1.0)
    outcome = hunt(user, reward, catalog, config, Random(3))
    assert outcome.experience == 5
    assert outcome.gold == 10
    assert outcome.drop is not None and outcome.drop.item_id == "beef"
    assert user.gold == 110
    assert user.experience == 5
    assert user.inventory["beef"] == 1
    assert user.total_hunts == 1


def test_hunt_without_drop_chance(catalog):
    config = ProgressionConfig()
    user = new_user("1", None, config)
    reward = ActivityReward(1, 3, 1, 3, drops=("beef",), drop_chance=0.0)
    outcome = hunt(user, reward, catalog, config, Random(3))
    assert outcome.drop is None
    assert user.inventory == {}


def test_full_stack_forfeits_drop(catalog):
    config = ProgressionConfig()
    user = new_user("1", None, config)
    user.inventory["beef"] = 99
    reward = ActivityReward(1, 1, 1, 1, drops=("beef",), drop_chance=1.0)
    outcome = hunt(user, reward, catalog, config, Random(3))
    assert outcome.drop is None
    assert user.inventory["beef"] == 99
    assert user.total_hunts == 1


def test_fish_requires_bait(catalog):
    config = ProgressionConfig()
    user = new_user("1", None, config)
    reward = ActivityReward(5, 15, 10, 60)
    with pytest.raises(InsufficientItems) as exc_info:
        fish(user, reward, catalog, config, Random(3))
    assert exc_info.value.item_id == "bait"
    assert user.total_fishes == 0
    assert user.gold == 100


def test_fish_consumes_one_bait(catalog):
    config = ProgressionConfig()
    user = new_user("1", None, config)
    user.consumables["bait"] = 2
    reward = ActivityReward(5, 15, 10, 60)
    outcome = fish(user, reward, catalog, config, Random(3))
    assert outcome.bait_left == 1
    assert user.consumables["bait"] == 1
    assert user.total_fishes == 1
    assert 10 <= outcome.gold <= 60
