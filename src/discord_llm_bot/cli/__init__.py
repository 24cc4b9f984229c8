"""CLI module for Discord LLM Bot.

This module provides the command-line interface for the bot.
"""

from __future__ import annotations

from collections.abc import Sequence

from .commands import cmd_check_config, cmd_register_commands, cmd_start
from .parser import build_parser, print_banner


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entry point.

    Args:
        argv: Optional sequence of CLI arguments (without the program name).

    Returns:
        Process exit code. 0 for success.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        raise SystemExit(0)

    handlers = {
        "start": cmd_start,
        "check-config": cmd_check_config,
        "register-commands": cmd_register_commands,
    }

    handler = handlers.get(args.command)
    if handler:
        return handler(args)

    parser.print_help()
    return 1


__all__ = [
    "main",
    "build_parser",
    "print_banner",
    "cmd_start",
    "cmd_check_config",
    "cmd_register_commands",
]
