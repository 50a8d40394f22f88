"""REST routes: players, items, leaderboards and spam moderation."""

from __future__ import annotations

from dataclasses import asdict
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..app import BotApp
from ..config import ApiKey
from ..domain.exceptions import UnknownItem, ValidationError
from ..domain.items import ItemDefinition
from ..domain.quests import QuestClaim, QuestDefinition
from ..domain.ratelimit import SpamStats
from ..storage.base import QuestProgress, utcnow
from .deps import get_app, require_api_key, require_premium_key
from .schemas import AmountRequest, ItemChangeRequest, QuestProgressRequest, WarnRequest

API_VERSION = "1.0.0"

public_router = APIRouter(tags=["status"])
users_router = APIRouter(prefix="/api/user", tags=["users"], dependencies=[Depends(require_api_key)])
items_router = APIRouter(prefix="/api", tags=["items"], dependencies=[Depends(require_api_key)])
admin_router = APIRouter(prefix="/api/admin", tags=["admin"])


def ok(data: Any = None, **extra: Any) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, **extra}
    if data is not None:
        body["data"] = data
    return body


def item_payload(item: ItemDefinition) -> dict[str, Any]:
    return {
        "id": item.item_id,
        "name": item.name,
        "category": item.category.value,
        "rarity": item.rarity.value,
        "price": item.price,
        "sellPrice": item.sell_price,
        "stackable": item.stackable,
        "stackLimit": item.stack_limit,
        "heal": item.heal,
        "attackBonus": item.attack_bonus,
        "defenseBonus": item.defense_bonus,
        "statBonus": dict(item.stat_bonus),
        "description": item.description,
    }


def quest_payload(quest: QuestDefinition) -> dict[str, Any]:
    return {
        "id": quest.quest_id,
        "name": quest.name,
        "description": quest.description,
        "type": quest.kind.value,
        "group": quest.group,
        "target": quest.target,
        "reward": {
            "exp": quest.reward.experience,
            "gold": quest.reward.gold,
            "items": dict(quest.reward.items),
        },
    }


def progress_payload(progress: QuestProgress) -> dict[str, Any]:
    return {
        "id": progress.quest_id,
        "type": progress.kind,
        "progress": progress.progress,
        "target": progress.target,
        "completed": progress.completed,
        "startedAt": progress.started_at.isoformat(),
        "completedAt": progress.completed_at.isoformat() if progress.completed_at else None,
    }


def claim_payload(claim: QuestClaim) -> dict[str, Any]:
    return {
        "id": claim.quest_id,
        "exp": claim.experience,
        "gold": claim.gold,
        "items": dict(claim.items),
        "leveled": claim.level_up.leveled,
        "level": claim.level_up.level,
    }


def spam_payload(user_id: str, stats: SpamStats) -> dict[str, Any]:
    ban = None
    if stats.ban is not None:
        ban = {
            "reason": stats.ban.reason,
            "expiresAt": stats.ban.expires_at.isoformat(),
            "secondsRemaining": round(stats.ban.seconds_remaining),
        }
    return {
        "userId": user_id,
        "lastCommandAt": stats.last_command_at.isoformat() if stats.last_command_at else None,
        "warnings": stats.warnings,
        "maxWarnings": stats.max_warnings,
        "banned": stats.banned,
        "ban": ban,
    }


@public_router.get("/")
async def index(app: BotApp = Depends(get_app)):
    return {
        "success": True,
        "message": f"{app.config.dispatch.bot_name} API",
        "version": API_VERSION,
        "status": "online",
        "timestamp": utcnow().isoformat(),
    }


@public_router.get("/health")
async def health(app: BotApp = Depends(get_app)):
    return {
        "success": True,
        "status": "healthy",
        "uptime": round((utcnow() - app.started_at).total_seconds(), 3),
        "timestamp": utcnow().isoformat(),
    }


@users_router.get("/{user_id}")
async def get_user(user_id: str, app: BotApp = Depends(get_app)):
    profile = await app.player_service.fetch(user_id)
    return ok(asdict(profile))


@users_router.get("/{user_id}/stats")
async def get_user_stats(user_id: str, app: BotApp = Depends(get_app)):
    profile = await app.player_service.fetch(user_id)
    return ok(
        {
            "level": profile.level,
            "exp": profile.experience,
            "expToNextLevel": profile.experience_to_next_level,
            "health": profile.health,
            "maxHealth": profile.max_health,
            "attack": profile.attack,
            "defense": profile.defense,
            "gold": profile.gold,
            "totalHunt": profile.total_hunts,
            "totalFish": profile.total_fishes,
            "totalGamesWon": profile.total_games_won,
        }
    )


@users_router.post("/{user_id}/exp")
async def add_experience(user_id: str, body: AmountRequest, app: BotApp = Depends(get_app)):
    if body.amount <= 0:
        raise ValidationError("Amount must be a positive number")
    mutation = await app.player_service.grant_experience(user_id, body.amount)
    return ok(
        {
            "leveled": mutation.level_up is not None and mutation.level_up.leveled,
            "level": mutation.profile.level,
            "exp": mutation.profile.experience,
        },
        message="EXP added",
    )


@users_router.post("/{user_id}/gold")
async def change_gold(user_id: str, body: AmountRequest, app: BotApp = Depends(get_app)):
    if body.amount == 0:
        raise ValidationError("Amount must be a non-zero number")
    if body.amount > 0:
        mutation = await app.player_service.add_gold(user_id, body.amount)
    else:
        mutation = await app.player_service.spend_gold(user_id, -body.amount)
    return ok({"gold": mutation.profile.gold}, message="Gold updated")


@users_router.get("/{user_id}/inventory")
async def get_inventory(user_id: str, app: BotApp = Depends(get_app)):
    profile = await app.player_service.fetch(user_id)
    return ok({"consumables": dict(profile.consumables), "items": dict(profile.inventory)})


@users_router.post("/{user_id}/inventory/add")
async def add_inventory_item(
    user_id: str, body: ItemChangeRequest, app: BotApp = Depends(get_app)
):
    await app.player_service.add_item(user_id, body.item_id, body.quantity)
    return ok(message=f"Added {body.quantity}x {body.item_id}")


@users_router.post("/{user_id}/inventory/remove")
async def remove_inventory_item(
    user_id: str, body: ItemChangeRequest, app: BotApp = Depends(get_app)
):
    await app.player_service.remove_item(user_id, body.item_id, body.quantity)
    return ok(message=f"Removed {body.quantity}x {body.item_id}")


@users_router.get("/{user_id}/quests")
async def get_user_quests(user_id: str, app: BotApp = Depends(get_app)):
    progress = await app.player_service.open_quests(user_id)
    return ok([progress_payload(quest) for quest in progress])


@users_router.post("/{user_id}/quests/{quest_id}/start")
async def start_quest(user_id: str, quest_id: str, app: BotApp = Depends(get_app)):
    mutation = await app.player_service.start_quest(user_id, quest_id)
    return ok(progress_payload(mutation.result), message="Quest started")


@users_router.post("/{user_id}/quests/{quest_id}/progress")
async def update_quest_progress(
    user_id: str,
    quest_id: str,
    body: QuestProgressRequest | None = None,
    app: BotApp = Depends(get_app),
):
    amount = body.amount if body else 1
    mutation = await app.player_service.update_quest_progress(user_id, quest_id, amount)
    return ok(progress_payload(mutation.result), message="Quest progress updated")


@users_router.post("/{user_id}/quests/{quest_id}/complete")
async def complete_quest(user_id: str, quest_id: str, app: BotApp = Depends(get_app)):
    mutation = await app.player_service.complete_quest(user_id, quest_id)
    return ok(claim_payload(mutation.result), message="Quest completed")


@items_router.get("/quests")
async def list_quests(app: BotApp = Depends(get_app)):
    return ok([quest_payload(quest) for quest in app.quests.iter_quests()])


@items_router.get("/items")
async def list_items(app: BotApp = Depends(get_app)):
    return ok([item_payload(item) for item in app.catalog.iter_items()])


@items_router.get("/items/{item_id}")
async def get_item(item_id: str, app: BotApp = Depends(get_app)):
    item = app.catalog.find_item(item_id)
    if item is None:
        raise UnknownItem(item_id)
    return ok(item_payload(item))


@items_router.get("/leaderboard/{board}")
async def get_leaderboard(
    board: str,
    limit: int = Query(default=10),
    app: BotApp = Depends(get_app),
):
    entries = await app.player_service.leaderboard(board, limit)
    return ok([asdict(entry) for entry in entries])


@items_router.get("/stats")
async def get_global_stats(app: BotApp = Depends(get_app)):
    stats = await app.player_service.global_stats()
    return ok(
        {
            "totalUsers": stats.total_users,
            "avgLevel": stats.average_level,
            "totalGold": stats.total_gold,
            "totalHunt": stats.total_hunts,
            "totalFish": stats.total_fishes,
        }
    )


@admin_router.post("/user/{user_id}/reset")
async def reset_user(
    user_id: str,
    key: ApiKey = Depends(require_premium_key),
    app: BotApp = Depends(get_app),
):
    deleted = await app.admin_service.reset_user(_actor(key), user_id)
    return ok({"deleted": deleted}, message="User reset")


@admin_router.post("/spam/check/{user_id}")
async def check_spam(
    user_id: str,
    _key: ApiKey = Depends(require_api_key),
    app: BotApp = Depends(get_app),
):
    stats = await app.rate_limiter.stats(user_id)
    return ok(spam_payload(user_id, stats))


@admin_router.post("/spam/warn/{user_id}")
async def warn_user(
    user_id: str,
    body: WarnRequest | None = None,
    key: ApiKey = Depends(require_api_key),
    app: BotApp = Depends(get_app),
):
    reason = body.reason if body else WarnRequest().reason
    outcome = await app.admin_service.warn_user(_actor(key), user_id, reason)
    return ok(
        {
            "warnings": outcome.warnings,
            "maxWarnings": outcome.max_warnings,
            "banned": outcome.banned,
        },
        message="Warning added",
    )


@admin_router.post("/spam/unban/{user_id}")
async def unban_user(
    user_id: str,
    key: ApiKey = Depends(require_api_key),
    app: BotApp = Depends(get_app),
):
    if not await app.admin_service.unban_user(_actor(key), user_id):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="User not banned")
    return ok(message="User unbanned")


def _actor(key: ApiKey) -> str:
    return f"api:{key.name}"
