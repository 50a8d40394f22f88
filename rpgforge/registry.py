"""Runtime registry for mini-games."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator

from .commands.context import CommandHandler


@dataclass(slots=True)
class MiniGame:
    game_id: str
    name: str
    handler: CommandHandler
    description: str = ""
    command: str | None = None
    aliases: tuple[str, ...] = ()

    def command_names(self) -> list[str]:
        names = [self.command] if self.command else []
        names.extend(self.aliases)
        return [key for key in (name.lstrip("/").lower() for name in names) if key]


class MiniGameRegistry:
    """Register and look up mini-games."""

    def __init__(self) -> None:
        self._games: Dict[str, MiniGame] = {}
        self._commands: Dict[str, str] = {}

    def register(self, game: MiniGame) -> None:
        if game.game_id in self._games:
            raise ValueError(f"Mini-game {game.game_id} already registered")
        names = game.command_names()
        for name in names:
            if name in self._commands:
                other = self._commands[name]
                raise ValueError(f"Command '{name}' already used by mini-game {other}")
        for name in names:
            self._commands[name] = game.game_id
        self._games[game.game_id] = game

    def get(self, game_id: str) -> MiniGame:
        try:
            return self._games[game_id]
        except KeyError as exc:
            raise KeyError(f"Mini-game {game_id} not found") from exc

    def all(self) -> list[MiniGame]:
        return list(self._games.values())

    def find_by_command(self, command: str) -> MiniGame | None:
        key = command.lstrip("/").lower()
        game_id = self._commands.get(key)
        return self._games.get(game_id) if game_id else None

    def __iter__(self) -> Iterator[MiniGame]:
        return iter(self.all())


__all__ = ["MiniGame", "MiniGameRegistry"]
