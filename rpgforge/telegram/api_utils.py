"""Bot API calls that never take the game loop down with them.

Players block the bot, chats disappear and Telegram throttles busy groups; a
reply that cannot be delivered is logged and dropped so the command that
produced it still counts as handled.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import ParamSpec, TypeVar

from aiogram.exceptions import (
    TelegramAPIError,
    TelegramBadRequest,
    TelegramForbiddenError,
    TelegramRetryAfter,
)
from aiogram.types import Message

P = ParamSpec("P")
T = TypeVar("T")

logger = logging.getLogger(__name__)

MAX_FLOOD_WAIT = 30.0


def flood_wait(exc: TelegramRetryAfter, ceiling: float = MAX_FLOOD_WAIT) -> float:
    """Seconds to wait before resending, as asked by Telegram, capped at ``ceiling``."""
    asked = float(getattr(exc, "retry_after", 0) or 1.0)
    return min(asked, ceiling)


async def safe_api_call(
    label: str,
    func: Callable[P, Awaitable[T]],
    *args: P.args,
    retries: int = 3,
    **kwargs: P.kwargs,
) -> T | None:
    """Await ``func`` and return its result, or ``None`` when delivery failed.

    Flood control is the one failure worth waiting out; it is retried up to
    ``retries`` times in total.
    """
    for attempt in range(1, retries + 1):
        try:
            return await func(*args, **kwargs)
        except TelegramRetryAfter as exc:
            if attempt == retries:
                logger.warning("Gave up on %s after %s flood waits.", label, attempt)
                return None
            delay = flood_wait(exc)
            logger.info("Flood control on %s; resending in %.1fs (%s/%s).", label, delay, attempt, retries)
            await asyncio.sleep(delay)
        except TelegramForbiddenError:
            logger.info("Dropped %s: the player blocked the bot or left the chat.", label)
            return None
        except TelegramBadRequest as exc:
            logger.warning("Telegram rejected %s: %s", label, exc)
            return None
        except TelegramAPIError as exc:
            logger.error("Telegram error during %s: %s", label, exc, exc_info=True)
            return None
    return None


async def safe_message_answer(message: Message | None, text: str, **kwargs) -> bool:
    """Answer ``message`` in its chat; ``False`` when nothing was delivered."""
    if message is None:
        return False
    sent = await safe_api_call("message.answer", message.answer, text, **kwargs)
    return sent is not None
