"""Route inbound chat text through the rate limiter to one command handler."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator

from ..domain.exceptions import Banned, RateLimited, RpgForgeError, StorageError
from ..domain.ratelimit import Admission
from .context import CommandContext, CommandHandler, InboundMessage, ReplySender
from .formatters import GENERIC_FAILURE, describe_error, format_ban, format_cooldown
from .parser import parse_command

if TYPE_CHECKING:
    from ..app import BotApp

logger = logging.getLogger(__name__)


@dataclass(slots=True, frozen=True)
class CommandEntry:
    name: str
    handler: CommandHandler
    source: str


class CommandTable:
    """The single authority mapping command names to handlers.

    Entries are kept in registration order, which is also the priority order
    used when listing commands.
    """

    def __init__(self) -> None:
        self._entries: dict[str, CommandEntry] = {}

    def register(self, name: str, handler: CommandHandler, *, source: str) -> None:
        key = name.lstrip("/").lower()
        if not key:
            raise ValueError(f"Empty command name registered by {source}")
        existing = self._entries.get(key)
        if existing is not None:
            raise ValueError(f"Command '{key}' already registered by {existing.source}")
        self._entries[key] = CommandEntry(name=key, handler=handler, source=source)

    def register_many(self, names: Iterable[str], handler: CommandHandler, *, source: str) -> None:
        for name in names:
            self.register(name, handler, source=source)

    def get(self, name: str) -> CommandEntry | None:
        return self._entries.get(name.lower())

    def names(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __iter__(self) -> Iterator[CommandEntry]:
        return iter(list(self._entries.values()))

    def __len__(self) -> int:
        return len(self._entries)


class Dispatcher:
    """Parse, gate, run and record one command per inbound message."""

    def __init__(self, app: "BotApp", table: CommandTable, sender: ReplySender) -> None:
        self._app = app
        self._table = table
        self._sender = sender

    @property
    def table(self) -> CommandTable:
        return self._table

    async def handle(self, message: InboundMessage) -> bool:
        """Return True when the message addressed a known command."""
        parsed = parse_command(message.text, self._app.config.dispatch.prefixes)
        if parsed is None:
            return False
        entry = self._table.get(parsed.name)
        if entry is None:
            return False

        limiter = self._app.rate_limiter
        user_id = message.sender_id
        context = CommandContext(app=self._app, message=message, command=parsed, sender=self._sender)

        try:
            admission = await limiter.admit(user_id, entry.name)
        except Banned as exc:
            await self._safe_reply(context, format_ban(exc.reason, exc.seconds_remaining))
            return True
        except RateLimited as exc:
            await self._safe_reply(context, format_cooldown(exc.seconds_remaining))
            return True
        except StorageError:
            logger.exception("Rate limiter unavailable for %s", user_id)
            await self._safe_reply(context, GENERIC_FAILURE)
            return True

        logger.info("Command %s from %s in %s", entry.name, user_id, message.chat_id)
        try:
            await entry.handler(context)
        except StorageError:
            logger.exception("Storage failure while running %s for %s", entry.name, user_id)
            await self._revoke(admission)
            await self._safe_reply(context, GENERIC_FAILURE)
        except RpgForgeError as exc:
            # Game-rule declines still count as an executed command.
            await self._safe_reply(context, describe_error(exc))
        except Exception:
            logger.exception("Command %s failed for %s", entry.name, user_id)
            await self._revoke(admission)
            await self._safe_reply(context, GENERIC_FAILURE)
        return True

    async def _revoke(self, admission: Admission) -> None:
        try:
            await self._app.rate_limiter.revoke(admission)
        except StorageError:
            logger.exception("Could not release cooldown of %s for %s", admission.command, admission.user_id)

    async def _safe_reply(self, context: CommandContext, text: str) -> None:
        try:
            await context.reply(text)
        except Exception:
            logger.exception("Reply to %s failed", context.message.chat_id)
