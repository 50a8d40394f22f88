"""Command line helpers for RPGForge."""

from __future__ import annotations

import argparse
import asyncio
import importlib
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.logging import RichHandler

from .app import BotApp
from .config import RpgForgeConfig
from .loaders import validate_catalog_file
from .validators import validate_app

console = Console()


def setup_logging(level: str = "INFO") -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def run_bot() -> None:
    parser = argparse.ArgumentParser(description="RPGForge Telegram bot")
    parser.add_argument("--module", help="Python module with register(app) function")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    args = parser.parse_args()

    setup_logging(args.log_level)
    config = RpgForgeConfig.from_env()
    if not config.bot_token:
        console.print("[red]RPGFORGE_BOT_TOKEN is not set[/red]")
        sys.exit(1)
    app = BotApp(config)
    if args.module:
        _load_module(args.module, app)
    asyncio.run(_poll(app))


async def _poll(app: BotApp) -> None:
    from aiogram import Bot, Dispatcher

    from .admin import build_admin_router
    from .telegram import build_router

    await app.init_backend()
    bot = Bot(app.config.bot_token)
    dp = Dispatcher()
    # Admin commands must win over the catch-all text router.
    dp.include_router(build_admin_router(app))
    dp.include_router(build_router(app))
    logging.getLogger(__name__).info(
        "Starting %s with %s storage", app.config.dispatch.bot_name, app.config.storage.backend
    )
    try:
        await dp.start_polling(bot)
    finally:
        await bot.session.close()
        await app.close()


def run_api() -> None:
    parser = argparse.ArgumentParser(description="RPGForge HTTP API")
    parser.add_argument("--host", help="Bind address (defaults to RPGFORGE_API_HOST)")
    parser.add_argument("--port", type=int, help="Bind port (defaults to RPGFORGE_API_PORT)")
    parser.add_argument("--log-level", default="INFO", help="Logging level")
    args = parser.parse_args()

    import uvicorn

    from .api import create_api

    setup_logging(args.log_level)
    config = RpgForgeConfig.from_env()
    if not config.api.keys:
        logging.getLogger(__name__).warning("No API keys configured; every request will be rejected")
    app = BotApp(config)
    uvicorn.run(
        create_api(app),
        host=args.host or config.api.host,
        port=args.port or config.api.port,
        log_config=None,
    )


def run_validate() -> None:
    parser = argparse.ArgumentParser(description="RPGForge validator")
    parser.add_argument("--catalog", help="Path to catalog JSON file for validation")
    parser.add_argument("--module", help="Python module with register(app) function to validate")
    args = parser.parse_args()

    if args.catalog:
        errors = validate_catalog_file(Path(args.catalog))
        if errors:
            console.print("[red]Catalog errors:[/red]")
            for err in errors:
                console.print(f"- {err}")
            sys.exit(1)
        console.print("Catalog is valid ✅")
        return

    config = RpgForgeConfig.from_env()
    app = BotApp(config)
    if args.module:
        _load_module(args.module, app)
    issues = validate_app(app)
    if issues:
        console.print("[red]Configuration problems found:[/red]")
        for issue in issues:
            console.print(f"- {issue}")
        sys.exit(1)
    console.print("Bot configuration is valid ✅")


def _load_module(path: str, app: BotApp) -> None:
    cwd = str(Path.cwd())
    if cwd not in sys.path:
        sys.path.insert(0, cwd)
    module = importlib.import_module(path)
    if hasattr(module, "register"):
        module.register(app)
    else:
        raise RuntimeError(f"Module {path} has no register(app) function.")
