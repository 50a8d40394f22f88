from datetime import datetime, timedelta, timezone
from random import Random

import pytest

from rpgforge.app import BotApp
from rpgforge.config import RpgForgeConfig, StorageConfig
from rpgforge.testing.fixtures import memory_app  # noqa: F401


class FakeClock:
    def __init__(self) -> None:
        self.now = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def app(clock: FakeClock) -> BotApp:
    config = RpgForgeConfig(bot_token="test", storage=StorageConfig(backend="memory"))
    return BotApp(config, rng=Random(1), clock=clock)
