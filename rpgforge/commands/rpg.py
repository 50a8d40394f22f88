"""Built-in and role-playing command handlers."""

from __future__ import annotations

from .context import CommandContext
from .dispatcher import CommandTable
from .formatters import (
    format_activity,
    format_inventory,
    format_leaderboard,
    format_potion,
    format_profile,
    format_purchase,
    format_quest_claim,
    format_quest_started,
    format_quests,
    format_sale,
    format_shop,
    format_stats,
    render_help,
)
from .parser import parse_quantity

BUILTIN = "built-in"
GAME = "game"


async def handle_help(ctx: CommandContext) -> None:
    dispatch = ctx.app.config.dispatch
    await ctx.reply(render_help(dispatch.prefixes, dispatch.bot_name, ctx.app.mini_games.all()))


async def handle_profile(ctx: CommandContext) -> None:
    profile = await ctx.app.player_service.fetch(ctx.user_id, ctx.user_name)
    await ctx.reply(format_profile(profile))


async def handle_stats(ctx: CommandContext) -> None:
    profile = await ctx.app.player_service.fetch(ctx.user_id, ctx.user_name)
    await ctx.reply(format_stats(profile))


async def handle_hunt(ctx: CommandContext) -> None:
    mutation = await ctx.app.player_service.hunt(ctx.user_id, name=ctx.user_name)
    await ctx.reply(format_activity(mutation.result))


async def handle_fish(ctx: CommandContext) -> None:
    mutation = await ctx.app.player_service.fish(ctx.user_id, name=ctx.user_name)
    await ctx.reply(format_activity(mutation.result))


async def handle_shop(ctx: CommandContext) -> None:
    await ctx.reply(format_shop(ctx.app.catalog))


async def handle_buy(ctx: CommandContext) -> None:
    item_id = ctx.command.arg(0).lower()
    if not item_id:
        await ctx.reply(f"Usage: {ctx.command.prefix}buy <item> [qty]")
        return
    quantity = parse_quantity(ctx.command.arg(1))
    mutation = await ctx.app.player_service.buy(ctx.user_id, item_id, quantity, name=ctx.user_name)
    await ctx.reply(format_purchase(mutation.result))


async def handle_sell(ctx: CommandContext) -> None:
    item_id = ctx.command.arg(0).lower()
    if not item_id:
        await ctx.reply(f"Usage: {ctx.command.prefix}sell <item> [qty]")
        return
    quantity = parse_quantity(ctx.command.arg(1))
    mutation = await ctx.app.player_service.sell(ctx.user_id, item_id, quantity, name=ctx.user_name)
    await ctx.reply(format_sale(mutation.result))


async def handle_inventory(ctx: CommandContext) -> None:
    profile = await ctx.app.player_service.fetch(ctx.user_id, ctx.user_name)
    await ctx.reply(format_inventory(profile, ctx.app.catalog))


async def handle_use(ctx: CommandContext) -> None:
    target = ctx.command.arg(0).lower()
    if target != ctx.app.config.progression.potion_item:
        await ctx.reply(f"Usage: {ctx.command.prefix}use potion")
        return
    mutation = await ctx.app.player_service.use_potion(ctx.user_id, name=ctx.user_name)
    await ctx.reply(format_potion(mutation.result))


async def handle_quest(ctx: CommandContext) -> None:
    service = ctx.app.player_service
    action = ctx.command.arg(0).lower()
    quest_id = ctx.command.arg(1).lower()
    if not action:
        progress = await service.open_quests(ctx.user_id)
        await ctx.reply(format_quests(service.quest_catalog, progress))
        return
    if action not in ("start", "claim") or not quest_id:
        await ctx.reply(f"Usage: {ctx.command.prefix}quest [start|claim <quest>]")
        return
    if action == "start":
        mutation = await service.start_quest(ctx.user_id, quest_id, name=ctx.user_name)
        await ctx.reply(format_quest_started(mutation.result))
    else:
        mutation = await service.complete_quest(ctx.user_id, quest_id, name=ctx.user_name)
        await ctx.reply(format_quest_claim(mutation.result))


async def handle_leaderboard(ctx: CommandContext) -> None:
    board = ctx.command.arg(0, "level").lower()
    entries = await ctx.app.player_service.leaderboard(board, 10)
    await ctx.reply(format_leaderboard(board, entries))


def register_builtin_commands(table: CommandTable) -> None:
    table.register_many(("help", "menu"), handle_help, source=BUILTIN)


def register_game_commands(table: CommandTable) -> None:
    table.register("profile", handle_profile, source=GAME)
    table.register("stats", handle_stats, source=GAME)
    table.register("hunt", handle_hunt, source=GAME)
    table.register_many(("fish", "fishing"), handle_fish, source=GAME)
    table.register("shop", handle_shop, source=GAME)
    table.register("buy", handle_buy, source=GAME)
    table.register("sell", handle_sell, source=GAME)
    table.register_many(("inventory", "inv"), handle_inventory, source=GAME)
    table.register("use", handle_use, source=GAME)
    table.register_many(("leaderboard", "top"), handle_leaderboard, source=GAME)
    table.register_many(("quest", "quests"), handle_quest, source=GAME)
