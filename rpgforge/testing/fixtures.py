"""Pytest fixtures for RPGForge."""

from __future__ import annotations

from random import Random

import pytest

from ..app import BotApp
from ..config import RpgForgeConfig, StorageConfig


@pytest.fixture()
def memory_app() -> BotApp:
    config = RpgForgeConfig(bot_token="test", storage=StorageConfig(backend="memory"), rng_seed=7)
    return BotApp(config)


def app_fixture(bot_token: str = "test", **kwargs) -> BotApp:
    """Helper for ad-hoc tests where pytest is not available."""
    kwargs.setdefault("storage", StorageConfig(backend="memory"))
    rng = kwargs.pop("rng", None)
    clock = kwargs.pop("clock", None)
    config = RpgForgeConfig(bot_token=bot_token, **kwargs)
    return BotApp(config, rng=rng or Random(config.rng_seed), clock=clock)
