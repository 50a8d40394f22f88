"""Factory helpers to wire the RPGForge dispatcher into aiogram."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from aiogram import Bot, F, Router
from aiogram.types import Message, ReplyParameters

from ..commands.context import InboundMessage
from ..commands.dispatcher import Dispatcher
from .api_utils import safe_api_call

if TYPE_CHECKING:
    from ..app import BotApp

logger = logging.getLogger(__name__)


class TelegramReplySender:
    """ReplySender over the Bot API; delivery failures are logged, never raised."""

    def __init__(self, bot: Bot) -> None:
        self._bot = bot

    async def send(self, chat_id: str, text: str, *, quote: Any = None) -> None:
        kwargs: dict[str, Any] = {}
        if quote is not None:
            kwargs["reply_parameters"] = ReplyParameters(
                message_id=int(quote), allow_sending_without_reply=True
            )
        await safe_api_call("bot.send_message", self._bot.send_message, chat_id, text, **kwargs)


def to_inbound(message: Message) -> InboundMessage | None:
    """Translate an aiogram message; ``None`` when it carries no usable text."""
    user = message.from_user
    text = message.text or message.caption
    if not user or not text:
        return None
    # Plain @username mentions carry no user id, so only resolvable targets count.
    mentions: list[str] = []
    for entity in message.entities or ():
        if entity.type == "text_mention" and entity.user:
            mentions.append(str(entity.user.id))
    replied = message.reply_to_message
    if replied and replied.from_user and replied.from_user.id != user.id:
        mentions.append(str(replied.from_user.id))
    return InboundMessage(
        sender_id=str(user.id),
        chat_id=str(message.chat.id),
        text=text.strip(),
        sender_name=user.username or user.full_name,
        mentions=tuple(mentions),
        message_ref=message.message_id,
    )


def build_router(app: "BotApp") -> Router:
    """Catch-all text router; the command table decides what is handled."""
    router = Router()
    table = app.build_command_table()

    @router.message(F.text | F.caption)
    async def handle_text(message: Message, bot: Bot) -> None:
        inbound = to_inbound(message)
        if inbound is None:
            return
        dispatcher = Dispatcher(app, table, TelegramReplySender(bot))
        handled = await dispatcher.handle(inbound)
        if not handled:
            logger.debug("Ignored message from %s", inbound.sender_id)

    return router
