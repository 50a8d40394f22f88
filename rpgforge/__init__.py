"""RPGForge chat RPG framework public API."""

from .app import BotApp
from .config import RpgForgeConfig
from .registry import MiniGame, MiniGameRegistry

__all__ = [
    "BotApp",
    "RpgForgeConfig",
    "MiniGame",
    "MiniGameRegistry",
]
