"""Cooldown gate with warning escalation to temporary bans.

Per user the state moves unrestricted -> warned(n) -> banned. Bans and
warnings expire lazily: an expired ban is dropped (and persisted) the next time
it is observed, an expired warning simply stops counting.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from ..config import RateLimitConfig
from ..storage.base import Ban, RateLimitState, RateLimitStore, SpamWarning, utcnow
from ..storage.codec import ensure_aware
from ..storage.locks import KeyedLocks, spam_key
from .exceptions import Banned, RateLimited

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


@dataclass(slots=True)
class BanInfo:
    reason: str
    expires_at: datetime
    seconds_remaining: float


@dataclass(slots=True)
class WarningOutcome:
    warnings: int
    max_warnings: int
    banned: bool
    ban_duration: float


@dataclass(slots=True)
class Admission:
    """Cooldown slot reserved by ``admit``; ``revoke`` gives it back."""

    user_id: str
    command: str
    stamped_at: datetime
    previous_global: datetime | None
    previous_command: datetime | None


@dataclass(slots=True)
class SpamStats:
    last_command_at: datetime | None
    warnings: int
    max_warnings: int
    banned: bool
    ban: BanInfo | None


class RateLimiter:
    """Decide whether a (user, command) pair may run right now."""

    def __init__(
        self,
        store: RateLimitStore,
        config: RateLimitConfig,
        *,
        locks: KeyedLocks | None = None,
        clock: Clock | None = None,
    ) -> None:
        self._store = store
        self._config = config
        self._locks = locks or KeyedLocks()
        self._clock = clock or utcnow

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    async def can_execute(self, user_id: str, command: str) -> bool:
        try:
            await self.check(user_id, command)
        except (Banned, RateLimited):
            return False
        return True

    async def check(self, user_id: str, command: str) -> None:
        """Raise Banned or RateLimited when the command may not run."""
        async with self._locks.hold(spam_key(user_id)):
            now = self._now()
            state = await self._load(user_id)
            ban = await self._active_ban(state, now)
            if ban:
                raise Banned(ban.reason, self._seconds_until(ban.expires_at, now))
            remaining = self._remaining(state, command, now)
            if remaining > 0:
                logger.debug("Rate limited %s on %s for %.2fs", user_id, command, remaining)
                raise RateLimited(remaining)

    async def remaining(self, user_id: str, command: str) -> float:
        """Seconds until ``command`` is allowed, global cooldown first."""
        async with self._locks.hold(spam_key(user_id)):
            state = await self._load(user_id)
            return self._remaining(state, command, self._now())

    async def record_command(self, user_id: str, command: str) -> None:
        async with self._locks.hold(spam_key(user_id)):
            now = self._now()
            state = await self._load(user_id)
            state.last_command_at = now
            state.command_timestamps[command] = now
            await self._store.save(state)

    async def admit(self, user_id: str, command: str) -> Admission:
        """Check the gate and stamp both cooldowns in one locked section.

        Concurrent messages from one user therefore cannot all pass before
        any of them is recorded: the second one sees the first one's stamp.
        """
        async with self._locks.hold(spam_key(user_id)):
            now = self._now()
            state = await self._load(user_id)
            ban = await self._active_ban(state, now)
            if ban:
                raise Banned(ban.reason, self._seconds_until(ban.expires_at, now))
            remaining = self._remaining(state, command, now)
            if remaining > 0:
                logger.debug("Rate limited %s on %s for %.2fs", user_id, command, remaining)
                raise RateLimited(remaining)
            admission = Admission(
                user_id=user_id,
                command=command,
                stamped_at=now,
                previous_global=state.last_command_at,
                previous_command=state.command_timestamps.get(command),
            )
            state.last_command_at = now
            state.command_timestamps[command] = now
            await self._store.save(state)
            return admission

    async def revoke(self, admission: Admission) -> None:
        """Undo an admission unless a later command already overwrote it."""
        async with self._locks.hold(spam_key(admission.user_id)):
            state = await self._store.get(admission.user_id)
            if state is None:
                return
            changed = False
            if state.last_command_at == admission.stamped_at:
                state.last_command_at = admission.previous_global
                changed = True
            if state.command_timestamps.get(admission.command) == admission.stamped_at:
                if admission.previous_command is None:
                    state.command_timestamps.pop(admission.command, None)
                else:
                    state.command_timestamps[admission.command] = admission.previous_command
                changed = True
            if changed:
                await self._store.save(state)

    async def add_warning(self, user_id: str, reason: str = "Spam") -> WarningOutcome:
        async with self._locks.hold(spam_key(user_id)):
            now = self._now()
            state = await self._load(user_id)
            active = self._active_warnings(state, now)
            active.append(SpamWarning(reason=reason, issued_at=now))
            state.warnings = active
            banned = len(active) >= self._config.max_warnings
            if banned:
                state.ban = Ban(
                    reason=f"Too many warnings: {reason}",
                    banned_at=now,
                    expires_at=now + timedelta(seconds=self._config.ban_duration),
                    warning_count=len(active),
                )
                logger.info("User %s banned after %s warnings", user_id, len(active))
            await self._store.save(state)
            return WarningOutcome(
                warnings=len(active),
                max_warnings=self._config.max_warnings,
                banned=banned,
                ban_duration=self._config.ban_duration,
            )

    async def clear_warnings(self, user_id: str) -> None:
        async with self._locks.hold(spam_key(user_id)):
            state = await self._load(user_id)
            state.warnings = []
            await self._store.save(state)

    async def unban(self, user_id: str) -> bool:
        async with self._locks.hold(spam_key(user_id)):
            state = await self._load(user_id)
            if state.ban is None:
                return False
            state.ban = None
            await self._store.save(state)
            return True

    async def is_banned(self, user_id: str) -> bool:
        return await self.ban_info(user_id) is not None

    async def ban_info(self, user_id: str) -> BanInfo | None:
        async with self._locks.hold(spam_key(user_id)):
            now = self._now()
            state = await self._load(user_id)
            ban = await self._active_ban(state, now)
            if not ban:
                return None
            return BanInfo(
                reason=ban.reason,
                expires_at=ban.expires_at,
                seconds_remaining=self._seconds_until(ban.expires_at, now),
            )

    async def stats(self, user_id: str) -> SpamStats:
        ban = await self.ban_info(user_id)
        async with self._locks.hold(spam_key(user_id)):
            state = await self._load(user_id)
            return SpamStats(
                last_command_at=state.last_command_at,
                warnings=len(self._active_warnings(state, self._now())),
                max_warnings=self._config.max_warnings,
                banned=ban is not None,
                ban=ban,
            )

    async def reset(self, user_id: str) -> None:
        async with self._locks.hold(spam_key(user_id)):
            await self._store.delete(user_id)

    async def _load(self, user_id: str) -> RateLimitState:
        state = await self._store.get(user_id)
        return state or RateLimitState(user_id=user_id)

    async def _active_ban(self, state: RateLimitState, now: datetime) -> Ban | None:
        ban = state.ban
        if ban is None:
            return None
        if now > ensure_aware(ban.expires_at):
            state.ban = None
            await self._store.save(state)
            return None
        return ban

    def _active_warnings(self, state: RateLimitState, now: datetime) -> list[SpamWarning]:
        window = timedelta(seconds=self._config.warn_reset_window)
        return [w for w in state.warnings if now - ensure_aware(w.issued_at) <= window]

    def _remaining(self, state: RateLimitState, command: str, now: datetime) -> float:
        if state.last_command_at is not None:
            elapsed = (now - ensure_aware(state.last_command_at)).total_seconds()
            if elapsed < self._config.global_cooldown:
                return self._config.global_cooldown - elapsed
        last = state.command_timestamps.get(command)
        if last is not None:
            elapsed = (now - ensure_aware(last)).total_seconds()
            cooldown = self._config.cooldown_for(command)
            if elapsed < cooldown:
                return cooldown - elapsed
        return 0.0

    def _seconds_until(self, moment: datetime, now: datetime) -> float:
        return max(0.0, (ensure_aware(moment) - now).total_seconds())

    def _now(self) -> datetime:
        return ensure_aware(self._clock())
