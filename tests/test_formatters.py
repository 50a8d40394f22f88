from rpgforge.commands.formatters import (
    describe_error,
    format_cooldown,
    format_leaderboard,
    format_shop,
    render_board,
    render_help,
)
from rpgforge.commands.tictactoe import TICTACTOE
from rpgforge.domain.exceptions import InsufficientFunds, InsufficientItems, StorageError
from rpgforge.domain.items import ItemCatalog
from rpgforge.domain.player import LeaderboardEntry
from rpgforge.loaders import load_default_catalog


def test_render_board_shows_marks_and_guide():
    board = ["X", None, None, None, "O", None, None, None, None]
    lines = render_board(board).split("\n")
    assert lines[0] == "❌ ⬜ ⬜    1 2 3"
    assert lines[1] == "⬜ ⭕ ⬜    4 5 6"


def test_format_shop_shows_bundle_price():
    catalog = ItemCatalog()
    load_default_catalog(catalog)
    text = format_shop(catalog)
    assert "• potion (🔴 Potion): 50 gold" in text
    assert "(5 for 150)" in text


def test_help_lists_mini_games_and_prefixes():
    text = render_help(("!", "."), "RPGForge", [TICTACTOE])
    assert "ttt / tictactoe" in text
    assert "Prefixes: '!', '.'" in text


def test_leaderboard_values_follow_board():
    entries = [LeaderboardEntry(rank=1, user_id="1", name="ann", level=3, gold=70, hunts=4, fishes=2)]
    assert "1. ann — 70 gold" in format_leaderboard("gold", entries)
    assert "1. ann — 4 hunts" in format_leaderboard("hunt", entries)
    assert "No players yet." in format_leaderboard("level", [])


def test_describe_error_messages():
    assert describe_error(InsufficientItems("bait", 1, 0)) == "🪱 You need bait. Buy some in the shop."
    assert "Need 50, you have 10" in describe_error(InsufficientFunds(50, 10))
    assert describe_error(StorageError("disk")).startswith("⚠️")
    assert format_cooldown(2.345) == "⏳ Slow down! Try again in 2.3s."
