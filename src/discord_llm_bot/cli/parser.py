"""CLI argument parser and banner display."""

from __future__ import annotations

import argparse

from rich.console import Console
from rich.panel import Panel

from .. import __version__
from ..core.config import BotConfig


def print_banner(config: BotConfig, args: argparse.Namespace) -> None:
    """Print a startup banner with configuration info."""
    console = Console()

    info = f"""
[bold]Discord LLM Bot[/bold] [green]v{__version__}[/]
Thread conversations with an OpenAI-compatible model.

[dim]----------------------------------------------------[/]
[bold]Config:[/bold]   [yellow]{args.config or "environment"}[/]
[bold]Endpoint:[/bold] [yellow]{config.completion.endpoint_url}[/]
[bold]Model:[/bold]    [yellow]{config.completion.model}[/]
[bold]Listen:[/bold]   [yellow]{config.event_server.host}:{config.event_server.port}[/]
[bold]Debug:[/bold]    [{"red" if args.debug else "green"}]{args.debug}[/]
"""

    panel = Panel(
        info,
        title="[bold white]Startup[/]",
        border_style="blue",
        expand=False,
    )

    console.print(panel)


def _add_config_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-c",
        "--config",
        default=None,
        help="Path to a YAML configuration file (default: read LLM_BOT_* environment variables)",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser.

    Returns:
        ArgumentParser instance
    """
    parser = argparse.ArgumentParser(
        prog="discord-llm-bot",
        description="Discord LLM Bot - chat with a language model in Discord threads",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Register the /chat command once per application
  discord-llm-bot register-commands -c config.yaml

  # Start the bot
  discord-llm-bot start -c config.yaml --debug

  # Check configuration loaded from the environment
  discord-llm-bot check-config
        """,
    )

    parser.add_argument(
        "-v",
        "--version",
        action="version",
        version=f"%(prog)s v{__version__}",
        help="Show program's version number and exit",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    start_parser = subparsers.add_parser("start", help="Start the bot")
    _add_config_argument(start_parser)
    start_parser.add_argument("--host", default=None, help="Override the event server bind host")
    start_parser.add_argument(
        "-p", "--port", type=int, default=None, help="Override the event server bind port"
    )
    start_parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Enable debug/verbose logging mode",
    )

    check_parser = subparsers.add_parser(
        "check-config", help="Validate configuration and print a summary"
    )
    _add_config_argument(check_parser)

    register_parser = subparsers.add_parser(
        "register-commands", help="Register the /chat slash command with Discord"
    )
    _add_config_argument(register_parser)

    return parser
