"""Plain-text views of player state, the shop and tic-tac-toe boards."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Sequence

from ..domain.activities import ActivityOutcome
from ..domain.exceptions import (
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
    UnknownItem,
    UnknownQuest,
    ValidationError,
)
from ..domain.inventory import PotionResult, PurchaseResult, SaleResult
from ..domain.items import ItemCatalog
from ..domain.player import LeaderboardEntry, PlayerProfile
from ..domain.quests import QuestCatalog, QuestClaim
from ..storage.base import GameSession, QuestProgress

if TYPE_CHECKING:
    from ..registry import MiniGame

GENERIC_FAILURE = "⚠️ Something went wrong. Please try again later."

_CELLS = {None: "⬜", "X": "❌", "O": "⭕"}


def render_help(prefixes: Sequence[str], bot_name: str, games: Iterable[MiniGame] = ()) -> str:
    shown = ", ".join(repr(p) for p in prefixes if p) or "none"
    lines = [
        f"📜 {bot_name} commands:",
        "• profile — your character",
        "• stats — combat stats",
        "• hunt — hunt for gold and experience",
        "• fish / fishing — fish (needs bait)",
        "• shop — items for sale",
        "• buy <item> [qty] — buy from the shop",
        "• sell <item> [qty] — sell from your inventory",
        "• inventory / inv — your items",
        "• use potion — drink a potion",
        "• leaderboard / top [level|gold|hunt|fish]",
        "• quest [start|claim <id>] — quests and your progress",
    ]
    for game in games:
        names = " / ".join(game.command_names())
        lines.append(f"• {names} — {game.description or game.name}")
    lines.append("")
    lines.append(f"Prefixes: {shown}")
    return "\n".join(lines)


def format_profile(profile: PlayerProfile) -> str:
    lines = [
        f"👤 Profile {profile.name or profile.user_id}",
        f"Level: {profile.level}",
        f"Exp: {profile.experience}/{profile.experience_to_next_level}",
        f"HP: {profile.health}/{profile.max_health}",
        f"Gold: {profile.gold}",
    ]
    for item_id, amount in sorted(profile.consumables.items()):
        lines.append(f"{item_id.title()}: {amount}")
    lines.append(f"Games won: {profile.total_games_won}")
    return "\n".join(lines)


def format_stats(profile: PlayerProfile) -> str:
    return "\n".join(
        [
            "⚔️ Stats:",
            f"Attack: {profile.attack}",
            f"Defense: {profile.defense}",
            f"Max HP: {profile.max_health}",
            f"Hunts: {profile.total_hunts}",
            f"Fishing trips: {profile.total_fishes}",
        ]
    )


def format_inventory(profile: PlayerProfile, catalog: ItemCatalog) -> str:
    lines = ["🎒 Inventory:"]
    if not profile.inventory:
        lines.append("(empty)")
    for item_id, amount in sorted(profile.inventory.items()):
        item = catalog.find_item(item_id)
        name = item.name if item else item_id
        lines.append(f"• {name}: {amount}")
    for item_id, amount in sorted(profile.consumables.items()):
        lines.append(f"{item_id.title()}: {amount}")
    return "\n".join(lines)


def format_shop(catalog: ItemCatalog) -> str:
    entries = list(catalog.iter_shop())
    if not entries:
        return "🏪 The shop is empty."
    lines = ["🏪 Shop:"]
    for entry in entries:
        item = catalog.get_item(entry.item_id)
        line = f"• {item.item_id} ({item.name}): {item.price} gold"
        if entry.quantity > 1:
            line += f" ({entry.quantity} for {item.price * entry.quantity})"
        lines.append(line)
    return "\n".join(lines)


def format_purchase(result: PurchaseResult) -> str:
    return f"✅ Bought {result.quantity}x {result.item.name}. Gold left: {result.gold_left}"


def format_sale(result: SaleResult) -> str:
    return (
        f"💰 Sold {result.quantity}x {result.item.name} for {result.total_price} gold. "
        f"Gold: {result.gold_left}"
    )


def format_potion(result: PotionResult) -> str:
    return f"🧪 You drink a potion. HP is now {result.health}/{result.max_health}"


def format_activity(outcome: ActivityOutcome) -> str:
    title = "🏹 Hunt results:" if outcome.activity == "hunt" else "🎣 Fishing results:"
    lines = [title, f"+{outcome.experience} EXP", f"+{outcome.gold} Gold"]
    if outcome.drop:
        lines.append(f"+1 {outcome.drop.name}")
    if outcome.bait_left is not None:
        lines.append(f"Bait left: {outcome.bait_left}")
    if outcome.level_up.leveled:
        lines.append(f"➡️ Level up! You are now level {outcome.level_up.level}")
    return "\n".join(lines)


def format_leaderboard(board: str, entries: Sequence[LeaderboardEntry]) -> str:
    lines = [f"🏆 Leaderboard ({board})"]
    if not entries:
        lines.append("No players yet.")
    for entry in entries:
        name = entry.name or entry.user_id
        if board == "gold":
            value = f"{entry.gold} gold"
        elif board == "hunt":
            value = f"{entry.hunts} hunts"
        elif board == "fish":
            value = f"{entry.fishes} fishing trips"
        else:
            value = f"level {entry.level}"
        lines.append(f"{entry.rank}. {name} — {value}")
    return "\n".join(lines)


def format_quests(catalog: QuestCatalog, progress: Sequence[QuestProgress]) -> str:
    started = {quest.quest_id: quest for quest in progress}
    lines = ["📜 Quests:"]
    if not len(catalog):
        lines.append("No quests available.")
    for quest in catalog.iter_quests():
        mine = started.get(quest.quest_id)
        if mine is None:
            status = "not started"
        elif mine.completed:
            status = "✅ done, claim it"
        else:
            status = f"{mine.progress}/{mine.target}"
        lines.append(f"• {quest.quest_id} ({quest.name}): {quest.description or quest.kind.value} [{status}]")
    return "\n".join(lines)


def format_quest_started(progress: QuestProgress) -> str:
    if progress.completed:
        return f"✅ Quest {progress.quest_id} started and already complete. Claim it!"
    return f"📜 Quest {progress.quest_id} started: {progress.progress}/{progress.target}"


def format_quest_claim(claim: QuestClaim) -> str:
    lines = [f"🎁 Quest {claim.quest_id} complete!", f"+{claim.experience} EXP", f"+{claim.gold} Gold"]
    for item_id, quantity in claim.items.items():
        lines.append(f"+{quantity} {item_id}")
    if claim.level_up.leveled:
        lines.append(f"➡️ Level up! You are now level {claim.level_up.level}")
    return "\n".join(lines)


def render_board(board: Sequence[str | None]) -> str:
    cells = [_CELLS.get(cell, "⬜") for cell in board]
    return "\n".join(
        [
            f"{cells[0]} {cells[1]} {cells[2]}    1 2 3",
            f"{cells[3]} {cells[4]} {cells[5]}    4 5 6",
            f"{cells[6]} {cells[7]} {cells[8]}    7 8 9",
        ]
    )


def format_game(session: GameSession) -> str:
    header = f"Game {session.game_id} (status: {session.status})"
    if session.status == "ended":
        outcome = "Draw" if session.winner == "draw" else f"Winner: {session.winner}"
        return f"{header}\n{outcome}\n\n{render_board(session.board)}"
    return f"{header}\nTurn: {session.turn}\n\n{render_board(session.board)}"


def format_ban(reason: str, seconds_remaining: float) -> str:
    minutes = max(1, round(seconds_remaining / 60))
    return f"🚫 You are banned: {reason}. Try again in about {minutes} min."


def format_cooldown(seconds_remaining: float) -> str:
    return f"⏳ Slow down! Try again in {seconds_remaining:.1f}s."


def describe_error(exc: RpgForgeError) -> str:
    """User-facing text for a domain decline."""
    if isinstance(exc, InsufficientFunds):
        return f"❌ Not enough gold. Need {exc.required}, you have {exc.available}."
    if isinstance(exc, InsufficientItems):
        if exc.item_id == "bait":
            return "🪱 You need bait. Buy some in the shop."
        return f"❌ Not enough {exc.item_id}. Need {exc.required}, you have {exc.available}."
    if isinstance(exc, InventoryFull):
        return f"❌ You cannot carry more than {exc.limit} of {exc.item_id}."
    if isinstance(exc, NoPotionAvailable):
        return "❌ You have no potion."
    if isinstance(exc, UnknownItem):
        return f"❌ Item {exc.item_id} not found."
    if isinstance(exc, GameNotFound):
        return f"❌ Game {exc.game_id} not found."
    if isinstance(exc, NotYourTurn):
        return "⏳ It is not your turn."
    if isinstance(exc, UnknownQuest):
        return f"❌ Quest {exc.quest_id} not found."
    if isinstance(exc, (NotParticipant, InvalidGameState, QuestStateError, ValidationError)):
        return f"❌ {exc}"
    if isinstance(exc, Banned):
        return format_ban(exc.reason, exc.seconds_remaining)
    if isinstance(exc, RateLimited):
        return format_cooldown(exc.seconds_remaining)
    return GENERIC_FAILURE
