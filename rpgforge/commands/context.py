"""Transport-neutral message and reply contracts shared by command handlers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Protocol, Sequence

from .parser import ParsedCommand

if TYPE_CHECKING:
    from ..app import BotApp


@dataclass(slots=True)
class InboundMessage:
    """What the core needs from a transport message."""

    sender_id: str
    chat_id: str
    text: str
    sender_name: str | None = None
    mentions: Sequence[str] = ()
    message_ref: Any = None


class ReplySender(Protocol):
    async def send(self, chat_id: str, text: str, *, quote: Any = None) -> None:
        ...


@dataclass(slots=True)
class CommandContext:
    app: "BotApp"
    message: InboundMessage
    command: ParsedCommand
    sender: ReplySender

    @property
    def user_id(self) -> str:
        return self.message.sender_id

    @property
    def user_name(self) -> str | None:
        return self.message.sender_name

    @property
    def args(self) -> tuple[str, ...]:
        return self.command.args

    async def reply(self, text: str) -> None:
        await self.sender.send(self.message.chat_id, text, quote=self.message.message_ref)


CommandHandler = Callable[[CommandContext], Awaitable[None]]
