"""Convert storage records to and from JSON-compatible dictionaries."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .base import Ban, GameSession, QuestProgress, RateLimitState, SpamWarning, UserRecord


def dump_datetime(value: datetime | None) -> str | None:
    if value is None:
        return None
    return ensure_aware(value).isoformat()


def load_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    return ensure_aware(datetime.fromisoformat(value))


def ensure_aware(value: datetime) -> datetime:
    if value.tzinfo is None or value.tzinfo.utcoffset(value) is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def user_to_dict(record: UserRecord) -> dict[str, Any]:
    return {
        "user_id": record.user_id,
        "name": record.name,
        "level": record.level,
        "experience": record.experience,
        "experience_to_next_level": record.experience_to_next_level,
        "health": record.health,
        "max_health": record.max_health,
        "attack": record.attack,
        "defense": record.defense,
        "gold": record.gold,
        "consumables": dict(record.consumables),
        "inventory": dict(record.inventory),
        "total_hunts": record.total_hunts,
        "total_fishes": record.total_fishes,
        "total_games_won": record.total_games_won,
        "quests": quests_to_dict(record.quests),
        "created_at": dump_datetime(record.created_at),
        "last_active_at": dump_datetime(record.last_active_at),
    }


def user_from_dict(data: dict[str, Any]) -> UserRecord:
    record = UserRecord(
        user_id=str(data["user_id"]),
        name=data.get("name"),
        level=int(data.get("level", 1)),
        experience=int(data.get("experience", 0)),
        experience_to_next_level=int(data.get("experience_to_next_level", 100)),
        health=int(data.get("health", 100)),
        max_health=int(data.get("max_health", 100)),
        attack=int(data.get("attack", 10)),
        defense=int(data.get("defense", 5)),
        gold=int(data.get("gold", 0)),
        consumables={str(k): int(v) for k, v in (data.get("consumables") or {}).items()},
        inventory={str(k): int(v) for k, v in (data.get("inventory") or {}).items()},
        total_hunts=int(data.get("total_hunts", 0)),
        total_fishes=int(data.get("total_fishes", 0)),
        total_games_won=int(data.get("total_games_won", 0)),
        quests=quests_from_dict(data.get("quests") or {}),
    )
    created_at = load_datetime(data.get("created_at"))
    last_active_at = load_datetime(data.get("last_active_at"))
    if created_at:
        record.created_at = created_at
    if last_active_at:
        record.last_active_at = last_active_at
    return record


def quests_to_dict(quests: dict[str, QuestProgress]) -> dict[str, Any]:
    return {
        quest_id: {
            "kind": quest.kind,
            "target": quest.target,
            "progress": quest.progress,
            "reward": {
                "experience": quest.reward_experience,
                "gold": quest.reward_gold,
                "items": dict(quest.reward_items),
            },
            "started_at": dump_datetime(quest.started_at),
            "completed_at": dump_datetime(quest.completed_at),
        }
        for quest_id, quest in quests.items()
    }


def quests_from_dict(data: dict[str, Any]) -> dict[str, QuestProgress]:
    quests: dict[str, QuestProgress] = {}
    for quest_id, entry in data.items():
        reward = entry.get("reward") or {}
        quest = QuestProgress(
            quest_id=str(quest_id),
            kind=str(entry.get("kind", "")),
            target=int(entry.get("target", 0)),
            progress=int(entry.get("progress", 0)),
            reward_experience=int(reward.get("experience", 0)),
            reward_gold=int(reward.get("gold", 0)),
            reward_items={str(k): int(v) for k, v in (reward.get("items") or {}).items()},
            completed_at=load_datetime(entry.get("completed_at")),
        )
        started_at = load_datetime(entry.get("started_at"))
        if started_at:
            quest.started_at = started_at
        quests[quest.quest_id] = quest
    return quests


def rate_limit_to_dict(state: RateLimitState) -> dict[str, Any]:
    ban = state.ban
    return {
        "user_id": state.user_id,
        "last_command_at": dump_datetime(state.last_command_at),
        "command_timestamps": {
            command: dump_datetime(timestamp)
            for command, timestamp in state.command_timestamps.items()
        },
        "warnings": [
            {"reason": warning.reason, "issued_at": dump_datetime(warning.issued_at)}
            for warning in state.warnings
        ],
        "ban": (
            {
                "reason": ban.reason,
                "banned_at": dump_datetime(ban.banned_at),
                "expires_at": dump_datetime(ban.expires_at),
                "warning_count": ban.warning_count,
            }
            if ban
            else None
        ),
    }


def rate_limit_from_dict(data: dict[str, Any]) -> RateLimitState:
    ban_data = data.get("ban")
    return RateLimitState(
        user_id=str(data["user_id"]),
        last_command_at=load_datetime(data.get("last_command_at")),
        command_timestamps={
            str(command): load_datetime(timestamp)
            for command, timestamp in (data.get("command_timestamps") or {}).items()
            if timestamp
        },
        warnings=[
            SpamWarning(reason=entry.get("reason", ""), issued_at=load_datetime(entry["issued_at"]))
            for entry in data.get("warnings") or []
        ],
        ban=(
            Ban(
                reason=ban_data.get("reason", ""),
                banned_at=load_datetime(ban_data["banned_at"]),
                expires_at=load_datetime(ban_data["expires_at"]),
                warning_count=int(ban_data.get("warning_count", 0)),
            )
            if ban_data
            else None
        ),
    )


def game_to_dict(session: GameSession) -> dict[str, Any]:
    return {
        "game_id": session.game_id,
        "player_x": session.player_x,
        "player_o": session.player_o,
        "wager": session.wager,
        "board": list(session.board),
        "turn": session.turn,
        "status": session.status,
        "winner": session.winner,
        "created_at": dump_datetime(session.created_at),
        "started_at": dump_datetime(session.started_at),
        "ended_at": dump_datetime(session.ended_at),
    }


def game_from_dict(data: dict[str, Any]) -> GameSession:
    session = GameSession(
        game_id=str(data["game_id"]),
        player_x=str(data["player_x"]),
        player_o=str(data["player_o"]),
        wager=int(data.get("wager", 0)),
        board=list(data.get("board") or [None] * 9),
        turn=data.get("turn", "X"),
        status=data.get("status", "waiting"),
        winner=data.get("winner"),
        started_at=load_datetime(data.get("started_at")),
        ended_at=load_datetime(data.get("ended_at")),
    )
    created_at = load_datetime(data.get("created_at"))
    if created_at:
        session.created_at = created_at
    return session
