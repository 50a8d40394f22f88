"""Split raw chat text into prefix, command name and arguments."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence


@dataclass(slots=True, frozen=True)
class ParsedCommand:
    prefix: str
    name: str
    args: tuple[str, ...]

    def arg(self, index: int, default: str = "") -> str:
        return self.args[index] if index < len(self.args) else default


def parse_command(text: str | None, prefixes: Sequence[str]) -> ParsedCommand | None:
    """Return the parsed command, or ``None`` when ``text`` is not a command.

    Non-empty prefixes win over the empty one, which only acts as a catch-all
    when it is explicitly part of ``prefixes``.
    """
    body = (text or "").strip()
    if not body:
        return None
    used = next((p for p in prefixes if p and body.startswith(p)), None)
    if used is None:
        if "" not in prefixes:
            return None
        used = ""
    parts = body[len(used):].split()
    if not parts:
        return None
    return ParsedCommand(prefix=used, name=parts[0].lower(), args=tuple(parts[1:]))


def parse_quantity(raw: str, default: int = 1) -> int:
    """Lenient count parsing: anything unparsable or below one becomes ``default``."""
    try:
        value = int(raw)
    except (TypeError, ValueError):
        return default
    return max(1, value)
