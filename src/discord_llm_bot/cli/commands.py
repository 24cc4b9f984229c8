"""CLI command handlers: start, check-config, register-commands."""

from __future__ import annotations

import argparse
import asyncio

from rich.console import Console
from rich.table import Table

from ..bot import DiscordLLMBot
from ..core.config import BotConfig
from ..core.logger import get_logger, setup_logging
from .parser import print_banner

logger = get_logger("cli")


def cmd_start(args: argparse.Namespace) -> int:
    """Handle start command.

    Args:
        args: Parsed arguments

    Returns:
        Exit code
    """
    try:
        config = BotConfig.load(args.config)
    except Exception as e:
        print(f"Error: Failed to load configuration: {e}")
        return 1

    if args.debug:
        config.logging.level = "DEBUG"
    if args.host:
        config.event_server.host = args.host
    if args.port:
        config.event_server.port = args.port

    setup_logging(config.logging)
    print_banner(config, args)

    try:
        bot = DiscordLLMBot(config)
        bot.start()
        return 0
    except KeyboardInterrupt:
        logger.info("Bot interrupted by user")
        return 0
    except Exception as e:
        logger.error(f"Error starting bot: {e}", exc_info=True)
        return 1


def cmd_check_config(args: argparse.Namespace) -> int:
    """Handle check-config command."""
    console = Console()
    source = args.config or "environment"
    console.print(f"\n[bold]Validating Configuration: {source}[/]\n")

    try:
        config = BotConfig.load(args.config)
    except Exception as e:
        console.print("[red]Configuration validation failed:[/]")
        console.print(f"  {e}")
        return 1

    console.print("[green]Configuration is valid![/]\n")

    table = Table(title="Settings")
    table.add_column("Setting", style="cyan")
    table.add_column("Value", style="white")
    for key, value in config.summary().items():
        table.add_row(key, str(value))
    console.print(table)
    return 0


def cmd_register_commands(args: argparse.Namespace) -> int:
    """Handle register-commands command."""
    console = Console()

    try:
        config = BotConfig.load(args.config)
    except Exception as e:
        console.print(f"[red]Error: Failed to load configuration: {e}[/]")
        return 1

    setup_logging(config.logging)

    async def _register() -> list[dict]:
        bot = DiscordLLMBot(config)
        try:
            return await bot.register_commands()
        finally:
            await bot.aclose()

    try:
        registered = asyncio.run(_register())
    except Exception as e:
        logger.error(f"Failed to register commands: {e}", exc_info=True)
        console.print(f"[red]Failed to register commands: {e}[/]")
        return 1

    for command in registered:
        console.print(f"[green]✓[/] /{command.get('name')} registered")
    return 0
