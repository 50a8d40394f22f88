"""Configuration models for RPGForge."""

from __future__ import annotations

import os
import json
from dataclasses import dataclass, field
from typing import Literal, Mapping, Sequence


StorageBackend = Literal["memory", "json", "sqlalchemy"]


@dataclass(slots=True)
class StorageConfig:
    """Configure how player state, spam state and games are persisted."""

    backend: StorageBackend = "json"
    data_dir: str = "./data"
    dsn: str | None = None
    echo_sql: bool = False

    def resolve_dsn(self) -> str | None:
        if self.dsn:
            return self.dsn
        if self.backend == "sqlalchemy":
            return f"sqlite+aiosqlite:///{self.data_dir.rstrip('/')}/rpgforge.db"
        return None


@dataclass(slots=True)
class AdminCommandConfig:
    """Allows renaming admin bot commands."""

    warn: str = "warn"
    unban: str = "unban"
    reset_spam: str = "resetspam"
    grant_gold: str = "grantgold"
    grant_item: str = "grantitem"


@dataclass(slots=True)
class AdminConfig:
    """Feature switches for admin tooling."""

    admin_ids: set[str] = field(default_factory=set)
    enable_audit_logs: bool = True
    commands: AdminCommandConfig = field(default_factory=AdminCommandConfig)


def _default_command_cooldowns() -> dict[str, float]:
    return {
        "hunt": 5.0,
        "fish": 5.0,
        "fishing": 5.0,
        "battle": 10.0,
        "ttt": 1.0,
        "tictactoe": 1.0,
    }


@dataclass(slots=True)
class RateLimitConfig:
    """Cooldown and ban escalation rules. Durations are in seconds."""

    global_cooldown: float = 1.0
    default_command_cooldown: float = 0.5
    command_cooldowns: Mapping[str, float] = field(default_factory=_default_command_cooldowns)
    max_warnings: int = 3
    ban_duration: float = 3600.0
    warn_reset_window: float = 86400.0

    def cooldown_for(self, command: str) -> float:
        return float(self.command_cooldowns.get(command, self.default_command_cooldown))


@dataclass(slots=True)
class StarterStats:
    level: int = 1
    max_health: int = 100
    attack: int = 10
    defense: int = 5
    gold: int = 100
    consumables: Mapping[str, int] = field(default_factory=lambda: {"potion": 0, "bait": 0})


@dataclass(slots=True)
class ProgressionConfig:
    """Level curve and per-level stat growth."""

    xp_factor: int = 100
    xp_exponent: float = 1.5
    health_per_level: int = 10
    attack_per_level: int = 2
    defense_per_level: int = 1
    starter: StarterStats = field(default_factory=StarterStats)
    consumable_items: Sequence[str] = ("potion", "bait")
    potion_item: str = "potion"
    bait_item: str = "bait"


@dataclass(slots=True)
class ActivityReward:
    min_experience: int
    max_experience: int
    min_gold: int
    max_gold: int
    drops: Sequence[str] = ()
    drop_chance: float = 0.0


def _default_rewards() -> dict[str, ActivityReward]:
    return {
        "hunt": ActivityReward(8, 20, 20, 80, drops=("beef", "wild_meat"), drop_chance=0.5),
        "fish": ActivityReward(5, 15, 10, 60, drops=("fish", "rare_fish"), drop_chance=0.5),
    }


@dataclass(slots=True)
class RewardConfig:
    activities: Mapping[str, ActivityReward] = field(default_factory=_default_rewards)

    def for_activity(self, activity: str) -> ActivityReward:
        try:
            return self.activities[activity]
        except KeyError as exc:
            raise KeyError(f"No reward table for activity {activity}") from exc


@dataclass(slots=True)
class DispatchConfig:
    """Prefixes accepted in front of chat commands."""

    prefixes: Sequence[str] = ("!", ".", "/")
    bot_name: str = "RPGForge"


@dataclass(slots=True)
class ApiKey:
    name: str
    owner: str = ""
    premium: bool = False


@dataclass(slots=True)
class ApiConfig:
    keys: Mapping[str, ApiKey] = field(default_factory=dict)
    host: str = "127.0.0.1"
    port: int = 3000


@dataclass(slots=True)
class RpgForgeConfig:
    """Top-level configuration container."""

    bot_token: str = ""
    catalog_path: str | None = None
    quests_path: str | None = None
    storage: StorageConfig = field(default_factory=StorageConfig)
    admin: AdminConfig = field(default_factory=AdminConfig)
    rate_limit: RateLimitConfig = field(default_factory=RateLimitConfig)
    progression: ProgressionConfig = field(default_factory=ProgressionConfig)
    rewards: RewardConfig = field(default_factory=RewardConfig)
    dispatch: DispatchConfig = field(default_factory=DispatchConfig)
    api: ApiConfig = field(default_factory=ApiConfig)
    rng_seed: int | None = None

    @classmethod
    def from_env(cls) -> "RpgForgeConfig":
        """Create config from environment variables prefixed with RPGFORGE_."""
        prefix = "RPGFORGE_"
        storage = StorageConfig(
            backend=os.getenv(f"{prefix}STORAGE_BACKEND", "json"),
            data_dir=os.getenv(f"{prefix}DATA_DIR", "./data"),
            dsn=os.getenv(f"{prefix}STORAGE_DSN"),
            echo_sql=_flag(os.getenv(f"{prefix}STORAGE_ECHO_SQL", "false")),
        )

        admin_ids = {
            _id.strip()
            for _id in os.getenv(f"{prefix}ADMIN_IDS", "").split(",")
            if _id.strip()
        }
        admin = AdminConfig(
            admin_ids=admin_ids,
            enable_audit_logs=_flag(os.getenv(f"{prefix}ADMIN_ENABLE_AUDIT_LOGS", "true")),
        )

        rate_limit = RateLimitConfig(
            global_cooldown=float(os.getenv(f"{prefix}GLOBAL_COOLDOWN", "1.0")),
            default_command_cooldown=float(os.getenv(f"{prefix}DEFAULT_COMMAND_COOLDOWN", "0.5")),
            command_cooldowns={
                **_default_command_cooldowns(),
                **_parse_float_map(os.getenv(f"{prefix}COMMAND_COOLDOWNS"), f"{prefix}COMMAND_COOLDOWNS"),
            },
            max_warnings=int(os.getenv(f"{prefix}MAX_WARNINGS", "3")),
            ban_duration=float(os.getenv(f"{prefix}BAN_DURATION", "3600")),
            warn_reset_window=float(os.getenv(f"{prefix}WARN_RESET_WINDOW", "86400")),
        )

        prefixes = tuple(
            part.strip() for part in os.getenv(f"{prefix}PREFIXES", "!,.,/").split(",")
        )
        # An explicitly empty entry ("!,") enables the catch-all prefix.
        dispatch = DispatchConfig(
            prefixes=tuple(dict.fromkeys(prefixes)),
            bot_name=os.getenv(f"{prefix}BOT_NAME", "RPGForge"),
        )

        api = ApiConfig(
            keys=_parse_api_keys(os.getenv(f"{prefix}API_KEYS")),
            host=os.getenv(f"{prefix}API_HOST", "127.0.0.1"),
            port=int(os.getenv(f"{prefix}API_PORT", "3000")),
        )

        return cls(
            bot_token=os.getenv(f"{prefix}BOT_TOKEN", ""),
            catalog_path=os.getenv(f"{prefix}CATALOG_PATH"),
            quests_path=os.getenv(f"{prefix}QUESTS_PATH"),
            storage=storage,
            admin=admin,
            rate_limit=rate_limit,
            dispatch=dispatch,
            api=api,
            rng_seed=(
                int(os.getenv(f"{prefix}RNG_SEED")) if os.getenv(f"{prefix}RNG_SEED") else None
            ),
        )

    def resolve_catalog_path(self) -> str:
        return self.catalog_path or f"{self.storage.data_dir.rstrip('/')}/items.json"

    def resolve_quests_path(self) -> str:
        return self.quests_path or f"{self.storage.data_dir.rstrip('/')}/quests.json"


def _flag(raw: str) -> bool:
    return raw.lower() in {"1", "true", "yes"}


def _parse_float_map(raw: str | None, name: str) -> dict[str, float]:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid JSON for {name}") from exc
    if not isinstance(data, dict):
        raise ValueError(f"{name} must be a JSON object")
    return {str(k).lower(): float(v) for k, v in data.items()}


def _parse_api_keys(raw: str | None) -> dict[str, ApiKey]:
    if not raw:
        return {}
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError("Invalid JSON for RPGFORGE_API_KEYS") from exc
    if not isinstance(data, dict):
        raise ValueError("RPGFORGE_API_KEYS must be a JSON object")
    keys: dict[str, ApiKey] = {}
    for key, entry in data.items():
        if isinstance(entry, str):
            keys[str(key)] = ApiKey(name=entry)
        elif isinstance(entry, dict):
            keys[str(key)] = ApiKey(
                name=str(entry.get("name", key)),
                owner=str(entry.get("owner", "")),
                premium=bool(entry.get("premium", False)),
            )
        else:
            raise ValueError(f"RPGFORGE_API_KEYS entry for {key!r} must be a string or object")
    return keys
