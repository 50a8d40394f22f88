"""Domain models and services."""

from .events import EventBus
from .exceptions import (
    Banned,
    GameNotFound,
    InsufficientFunds,
    InsufficientItems,
    InvalidGameState,
    InventoryFull,
    NoPotionAvailable,
    NotParticipant,
    NotYourTurn,
    QuestStateError,
    RateLimited,
    RpgForgeError,
    StorageError,
    UnknownItem,
    UnknownQuest,
    ValidationError,
)
from .items import ItemCatalog, ItemCategory, ItemDefinition, Rarity, ShopEntry
from .player import PlayerProfile, PlayerService
from .progression import LevelUpResult, grant_experience, xp_to_level
from .quests import QuestCatalog, QuestDefinition, QuestKind, QuestReward
from .ratelimit import RateLimiter
from .tictactoe import TicTacToeEngine, TicTacToeService

__all__ = [
    "EventBus",
    "Banned",
    "GameNotFound",
    "InsufficientFunds",
    "InsufficientItems",
    "InvalidGameState",
    "InventoryFull",
    "NoPotionAvailable",
    "NotParticipant",
    "NotYourTurn",
    "QuestStateError",
    "RateLimited",
    "RpgForgeError",
    "StorageError",
    "UnknownItem",
    "UnknownQuest",
    "ValidationError",
    "ItemCatalog",
    "ItemCategory",
    "ItemDefinition",
    "Rarity",
    "ShopEntry",
    "PlayerProfile",
    "PlayerService",
    "LevelUpResult",
    "grant_experience",
    "xp_to_level",
    "QuestCatalog",
    "QuestDefinition",
    "QuestKind",
    "QuestReward",
    "RateLimiter",
    "TicTacToeEngine",
    "TicTacToeService",
]
