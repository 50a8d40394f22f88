"""Chat front-end for wagered tic-tac-toe (``ttt`` / ``tictactoe``)."""

from __future__ import annotations

from ..registry import MiniGame
from .context import CommandContext
from .formatters import format_game, render_board

USAGE = "\n".join(
    [
        "Tic-tac-toe commands:",
        "- ttt start @user [wager]",
        "- ttt join <gameId>",
        "- ttt move <gameId> <1-9>",
        "- ttt board <gameId>",
        "- ttt forfeit <gameId>",
    ]
)


def _opponent(ctx: CommandContext) -> str | None:
    """Only transport-resolved mentions name a player; bare @names are not ids."""
    if ctx.message.mentions:
        return ctx.message.mentions[0]
    return None


async def handle_tictactoe(ctx: CommandContext) -> None:
    service = ctx.app.tictactoe_service
    sub = ctx.command.arg(0).lower()
    game_id = ctx.command.arg(1)

    if not sub or sub == "help":
        await ctx.reply(USAGE)
        return

    if sub == "start":
        opponent = _opponent(ctx)
        if not opponent:
            await ctx.reply("Usage: ttt start @user [wager] (mention the user or reply to their message)")
            return
        # The wager, if any, is the last word: "start @user 10" or "start 10" in a reply.
        last = ctx.command.args[-1] if len(ctx.command.args) > 1 else ""
        wager = int(last) if last.lstrip("-").isdigit() else 0
        session = await service.create(ctx.user_id, opponent, wager, first_name=ctx.user_name)
        await ctx.reply(
            f"Game created: {session.game_id}\n"
            f"Opponent: {session.player_o}\n"
            f"Wager: {session.wager} gold\n"
            f"The opponent must type: ttt join {session.game_id}"
        )
        return

    if sub not in {"join", "move", "board", "forfeit"}:
        await ctx.reply("Unknown subcommand. Type: ttt help")
        return
    if not game_id:
        await ctx.reply(f"Usage: ttt {sub} <gameId>" + (" <1-9>" if sub == "move" else ""))
        return

    if sub == "join":
        session = await service.join(game_id, ctx.user_id)
        await ctx.reply(
            f"Game {session.game_id} started!\n"
            f"Player X: {session.player_x}\n"
            f"Player O: {session.player_o}\n"
            f"Wager: {session.wager} gold\n"
            f"Turn: {session.turn}\n\n{render_board(session.board)}"
        )
    elif sub == "board":
        session = await service.board(game_id)
        await ctx.reply(format_game(session))
    elif sub == "move":
        try:
            position = int(ctx.command.arg(2))
        except ValueError:
            await ctx.reply("Usage: ttt move <gameId> <1-9>")
            return
        outcome = await service.move(game_id, ctx.user_id, position)
        board = render_board(outcome.session.board)
        if not outcome.finished:
            await ctx.reply(f"Move placed.\nTurn: {outcome.session.turn}\n\n{board}")
        elif outcome.result == "draw":
            await ctx.reply(f"Result: draw!\n\n{board}")
        else:
            settlement = outcome.settlement
            lines = [f"Winner: {settlement.winner_id}", f"Mark: {outcome.result}", "", board]
            if settlement.wager > 0:
                if settlement.transferred:
                    lines.append(f"\n{settlement.wager} gold moved from the loser to the winner.")
                else:
                    lines.append("\nWager cancelled: the loser cannot cover it.")
            await ctx.reply("\n".join(lines))
    else:
        outcome = await service.forfeit(game_id, ctx.user_id)
        settlement = outcome.settlement
        text = f"Player {outcome.forfeited_by} forfeits.\nWinner: {settlement.winner_id}"
        if settlement.transferred:
            text += f"\n{settlement.wager} gold moved to the winner."
        await ctx.reply(text)


TICTACTOE = MiniGame(
    game_id="tictactoe",
    name="Tic-tac-toe",
    handler=handle_tictactoe,
    description="wagered tic-tac-toe against another player",
    command="ttt",
    aliases=("tictactoe",),
)
