"""Exceptions raised by RPGForge domain services."""


class RpgForgeError(RuntimeError):
    """Base class for domain exceptions."""


class ValidationError(RpgForgeError):
    """Raised when command or API arguments are malformed."""


class UnknownItem(RpgForgeError):
    """Raised when an item id is not present in the catalog."""

    def __init__(self, item_id: str) -> None:
        super().__init__(f"Item {item_id} not found")
        self.item_id = item_id


class InsufficientFunds(RpgForgeError):
    """Raised when a player cannot cover a gold amount."""

    def __init__(self, required: int, available: int) -> None:
        super().__init__(f"Insufficient gold: have {available}, need {required}")
        self.required = required
        self.available = available


class InsufficientItems(RpgForgeError):
    """Raised when removing more copies of an item than the player holds."""

    def __init__(self, item_id: str, required: int, available: int) -> None:
        super().__init__(f"Insufficient {item_id}: have {available}, need {required}")
        self.item_id = item_id
        self.required = required
        self.available = available


class InventoryFull(RpgForgeError):
    """Raised when an item would exceed its stack limit."""

    def __init__(self, item_id: str, limit: int) -> None:
        super().__init__(f"Cannot hold more than {limit} of {item_id}")
        self.item_id = item_id
        self.limit = limit


class NoPotionAvailable(RpgForgeError):
    """Raised when a player uses a potion without having one."""


class RateLimited(RpgForgeError):
    """Raised when a command is issued before its cooldown expires."""

    def __init__(self, seconds_remaining: float) -> None:
        super().__init__(f"Cooldown active for {seconds_remaining:.1f} seconds")
        self.seconds_remaining = seconds_remaining


class Banned(RpgForgeError):
    """Raised when a banned player attempts an action."""

    def __init__(self, reason: str, seconds_remaining: float) -> None:
        super().__init__(f"Banned: {reason}")
        self.reason = reason
        self.seconds_remaining = seconds_remaining


class StorageError(RpgForgeError):
    """Raised when backing data cannot be read or written."""


class GameNotFound(RpgForgeError):
    """Raised when a mini-game session id is unknown."""

    def __init__(self, game_id: str) -> None:
        super().__init__(f"Game {game_id} not found")
        self.game_id = game_id


class NotParticipant(RpgForgeError):
    """Raised when a player acts on a game they are not part of."""


class NotYourTurn(RpgForgeError):
    """Raised when a player moves out of turn."""


class InvalidGameState(RpgForgeError):
    """Raised when an action is not allowed in the game's current status."""


class UnknownQuest(RpgForgeError):
    """Raised when a quest id is not present in the quest catalog."""

    def __init__(self, quest_id: str) -> None:
        super().__init__(f"Quest {quest_id} not found")
        self.quest_id = quest_id


class QuestStateError(RpgForgeError):
    """Raised when a quest action does not fit the player's quest progress."""
