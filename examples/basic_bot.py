"""Example RPGForge bot with a custom catalog and an extra mini-game."""

from __future__ import annotations

import asyncio
import random

from rpgforge import BotApp, MiniGame, RpgForgeConfig
from rpgforge.commands.context import CommandContext


async def coinflip_game(ctx: CommandContext) -> None:
    guess = ctx.command.arg(0).lower()
    if guess not in {"heads", "tails"}:
        await ctx.reply("Usage: coinflip heads|tails")
        return
    side = random.choice(["heads", "tails"])
    if side == guess:
        mutation = await ctx.app.player_service.add_gold(ctx.user_id, 10)
        await ctx.app.player_service.grant_experience(ctx.user_id, 5)
        await ctx.reply(f"🪙 {side.title()}! +10 gold, +5 exp (gold: {mutation.profile.gold}).")
    else:
        await ctx.reply(f"🪙 {side.title()}. No luck this time.")


def register(app: BotApp) -> None:
    """Customize admin commands and add the coinflip mini-game."""
    app.config.admin.commands.grant_gold = "givegold"

    app.mini_games.register(
        MiniGame(
            game_id="coinflip",
            name="Coinflip",
            description="guess the coin and win a little gold",
            command="coinflip",
            handler=coinflip_game,
        )
    )


async def run_bot() -> None:
    from aiogram import Bot, Dispatcher

    from rpgforge.admin import build_admin_router
    from rpgforge.telegram import build_router

    app = BotApp(RpgForgeConfig.from_env())
    register(app)
    await app.init_backend()

    bot = Bot(app.config.bot_token)
    dp = Dispatcher()
    dp.include_router(build_admin_router(app))
    dp.include_router(build_router(app))
    await dp.start_polling(bot)


if __name__ == "__main__":
    asyncio.run(run_bot())
