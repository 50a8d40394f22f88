"""Chat test client that bypasses the Telegram transport."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Sequence

from ..app import BotApp
from ..commands.context import InboundMessage


@dataclass(slots=True)
class SentReply:
    __test__ = False

    chat_id: str
    text: str
    quote: Any = None


class RecordingSender:
    """ReplySender that keeps every outgoing message in memory."""

    def __init__(self) -> None:
        self.sent: List[SentReply] = []

    async def send(self, chat_id: str, text: str, *, quote: Any = None) -> None:
        self.sent.append(SentReply(chat_id=chat_id, text=text, quote=quote))


class TestClient:
    """Drive the command dispatcher with plain text, as a chat would."""

    __test__ = False

    def __init__(self, app: BotApp, chat_id: str = "test-chat") -> None:
        self.app = app
        self.chat_id = chat_id
        self.sender = RecordingSender()
        self.dispatcher = app.dispatcher(self.sender)

    async def send(
        self,
        user_id: str,
        text: str,
        *,
        name: str | None = None,
        mentions: Sequence[str] = (),
    ) -> List[str]:
        """Dispatch ``text`` from ``user_id`` and return the replies it produced."""
        before = len(self.sender.sent)
        await self.dispatcher.handle(
            InboundMessage(
                sender_id=user_id,
                chat_id=self.chat_id,
                text=text,
                sender_name=name,
                mentions=tuple(mentions),
            )
        )
        return [reply.text for reply in self.sender.sent[before:]]

    def history(self) -> List[SentReply]:
        return list(self.sender.sent)
