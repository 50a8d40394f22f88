"""Admin command wiring for aiogram."""

from __future__ import annotations

from typing import TYPE_CHECKING

from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from ..commands.formatters import describe_error
from ..domain.exceptions import RpgForgeError
from ..telegram.api_utils import safe_message_answer
from ..telegram.filters import AdminFilter

if TYPE_CHECKING:
    from ..app import BotApp


def build_admin_router(app: "BotApp") -> Router:
    router = Router()
    router.message.filter(AdminFilter(app.config))
    service = app.admin_service
    commands = app.config.admin.commands

    @router.message(Command(commands.warn))
    async def handle_warn(message: Message) -> None:
        parts = (message.text or "").split(maxsplit=2)
        if len(parts) < 2:
            await safe_message_answer(message, f"Usage: /{commands.warn} <user_id> [reason]")
            return
        reason = parts[2] if len(parts) > 2 else "Admin warn"
        outcome = await service.warn_user(_actor(message), parts[1], reason)
        text = f"User {parts[1]} warned ({outcome.warnings}/{outcome.max_warnings})."
        if outcome.banned:
            text += f" Banned for {int(outcome.ban_duration // 60)} min."
        await safe_message_answer(message, text)

    @router.message(Command(commands.unban))
    async def handle_unban(message: Message) -> None:
        parts = (message.text or "").split()
        if len(parts) < 2:
            await safe_message_answer(message, f"Usage: /{commands.unban} <user_id>")
            return
        if await service.unban_user(_actor(message), parts[1]):
            await safe_message_answer(message, f"User {parts[1]} unbanned.")
        else:
            await safe_message_answer(message, f"User {parts[1]} is not banned.")

    @router.message(Command(commands.reset_spam))
    async def handle_reset_spam(message: Message) -> None:
        parts = (message.text or "").split()
        if len(parts) < 2:
            await safe_message_answer(message, f"Usage: /{commands.reset_spam} <user_id>")
            return
        await service.reset_spam(_actor(message), parts[1])
        await safe_message_answer(message, f"Spam state of {parts[1]} cleared.")

    @router.message(Command(commands.grant_gold))
    async def handle_grant_gold(message: Message) -> None:
        parts = (message.text or "").split()
        if len(parts) < 3 or not parts[2].isdigit():
            await safe_message_answer(message, f"Usage: /{commands.grant_gold} <user_id> <amount>")
            return
        try:
            mutation = await service.grant_gold(_actor(message), parts[1], int(parts[2]))
        except RpgForgeError as exc:
            await safe_message_answer(message, describe_error(exc))
            return
        await safe_message_answer(
            message, f"Granted {parts[2]} gold to {parts[1]} (now {mutation.profile.gold})."
        )

    @router.message(Command(commands.grant_item))
    async def handle_grant_item(message: Message) -> None:
        parts = (message.text or "").split()
        if len(parts) < 3:
            await safe_message_answer(
                message, f"Usage: /{commands.grant_item} <user_id> <item_id> [qty]"
            )
            return
        quantity = int(parts[3]) if len(parts) > 3 and parts[3].isdigit() else 1
        try:
            await service.grant_item(_actor(message), parts[1], parts[2], quantity)
        except RpgForgeError as exc:
            await safe_message_answer(message, describe_error(exc))
            return
        await safe_message_answer(message, f"Granted {quantity}x {parts[2]} to {parts[1]}.")

    return router


def _actor(message: Message) -> str:
    return str(message.from_user.id) if message.from_user else "unknown"
