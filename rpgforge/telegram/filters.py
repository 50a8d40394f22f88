"""Reusable aiogram filters for RPGForge bots."""

from __future__ import annotations

from aiogram.filters import BaseFilter
from aiogram.types import Message

from ..config import RpgForgeConfig


class AdminFilter(BaseFilter):
    def __init__(self, config: RpgForgeConfig) -> None:
        self._admins = {str(admin_id) for admin_id in config.admin.admin_ids}

    async def __call__(self, message: Message) -> bool:
        user = message.from_user
        return bool(user and str(user.id) in self._admins)
