"""Administrative operations for RPGForge bots."""

from __future__ import annotations

from typing import Any

from ..domain.events import AdminEvent, EventBus
from ..domain.player import Mutation, PlayerService
from ..domain.ratelimit import RateLimiter, WarningOutcome
from ..storage.base import AuditStore, utcnow


class AdminService:
    """Moderation and grant operations, each audited and announced."""

    def __init__(
        self,
        players: PlayerService,
        rate_limiter: RateLimiter,
        audit_store: AuditStore,
        event_bus: EventBus,
        *,
        audit_enabled: bool = True,
    ) -> None:
        self._players = players
        self._limiter = rate_limiter
        self._audit_store = audit_store
        self._events = event_bus
        self._audit_enabled = audit_enabled

    async def warn_user(self, actor_id: str, user_id: str, reason: str = "Admin warn") -> WarningOutcome:
        outcome = await self._limiter.add_warning(user_id, reason)
        await self._record(
            "warn",
            actor_id,
            user_id,
            reason=reason,
            warnings=outcome.warnings,
            banned=outcome.banned,
        )
        return outcome

    async def unban_user(self, actor_id: str, user_id: str) -> bool:
        unbanned = await self._limiter.unban(user_id)
        if unbanned:
            await self._record("unban", actor_id, user_id)
        return unbanned

    async def clear_warnings(self, actor_id: str, user_id: str) -> None:
        await self._limiter.clear_warnings(user_id)
        await self._record("clear_warnings", actor_id, user_id)

    async def reset_spam(self, actor_id: str, user_id: str) -> None:
        await self._limiter.reset(user_id)
        await self._record("reset_spam", actor_id, user_id)

    async def grant_gold(self, actor_id: str, user_id: str, amount: int) -> Mutation:
        mutation = await self._players.add_gold(user_id, amount)
        await self._record("grant_gold", actor_id, user_id, amount=amount)
        return mutation

    async def grant_item(self, actor_id: str, user_id: str, item_id: str, quantity: int = 1) -> Mutation:
        mutation = await self._players.add_item(user_id, item_id, quantity)
        await self._record("grant_item", actor_id, user_id, item_id=item_id, quantity=quantity)
        return mutation

    async def reset_user(self, actor_id: str, user_id: str) -> bool:
        deleted = await self._players.reset(user_id)
        await self._record("reset_user", actor_id, user_id, deleted=deleted)
        return deleted

    async def _record(self, action: str, actor_id: str, target_id: str, **details: Any) -> None:
        if self._audit_enabled:
            await self._audit_store.add_entry(
                action,
                {
                    "timestamp": utcnow().isoformat(),
                    "actor_id": actor_id,
                    "user_id": target_id,
                    **details,
                },
            )
        await self._events.publish(
            f"admin.{action}",
            AdminEvent(action=action, actor_id=actor_id, target_id=target_id, details=details),
        )
