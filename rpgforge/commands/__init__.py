"""Chat command parsing and dispatch."""

from .parser import ParsedCommand, parse_command
from .context import CommandContext, InboundMessage, ReplySender
from .dispatcher import CommandTable, Dispatcher

__all__ = [
    "ParsedCommand",
    "parse_command",
    "CommandContext",
    "InboundMessage",
    "ReplySender",
    "CommandTable",
    "Dispatcher",
]
