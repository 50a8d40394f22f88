"""Telegram integration helpers."""

from .aiogram_router import TelegramReplySender, build_router, to_inbound
from .api_utils import safe_api_call, safe_message_answer
from .filters import AdminFilter

__all__ = [
    "TelegramReplySender",
    "build_router",
    "to_inbound",
    "safe_api_call",
    "safe_message_answer",
    "AdminFilter",
]
