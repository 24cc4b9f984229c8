"""Core modules for Discord LLM Bot.

This package contains the core functionality including:
- Configuration management
- Logging utilities
- Platform-neutral message models and payload parsers
- Reply chunking
- The thread provider abstraction
- The inbound event server
"""

from .chunker import DISCORD_MESSAGE_LIMIT, chunk_message
from .config import (
    BotConfig,
    ChatConfig,
    CompletionConfig,
    DiscordConfig,
    EventServerConfig,
    LoggingConfig,
)
from .event_server import EventServer
from .logger import get_logger, log_exception, setup_logging
from .message_parsers import DiscordMessageParser
from .models import ChannelMessage, ChatMessage, CommandInteraction, StatusEvent, ThreadInfo
from .provider import ThreadProvider

__all__ = [
    "DISCORD_MESSAGE_LIMIT",
    "chunk_message",
    "BotConfig",
    "ChatConfig",
    "CompletionConfig",
    "DiscordConfig",
    "EventServerConfig",
    "LoggingConfig",
    "EventServer",
    "get_logger",
    "log_exception",
    "setup_logging",
    "DiscordMessageParser",
    "ChannelMessage",
    "ChatMessage",
    "CommandInteraction",
    "StatusEvent",
    "ThreadInfo",
    "ThreadProvider",
]
