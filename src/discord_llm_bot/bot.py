"""Main bot class that wires all components together."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any

from .ai.completion import CompletionClient
from .chat.commands import CHAT_COMMAND_NAME, COMMANDS, ConversationStarter
from .chat.controller import ChatController
from .core.config import BotConfig
from .core.event_server import EventServer
from .core.logger import get_logger, setup_logging
from .core.provider import ThreadProvider
from .providers.discord import DiscordProvider

logger = get_logger("bot")


class DiscordLLMBot:
    """Discord bot answering thread conversations with an LLM.

    This class integrates:
    - Discord REST access (DiscordProvider)
    - The completion backend (CompletionClient)
    - The conversation orchestrator and the ``/chat`` command
    - The inbound event server

    Example:
        ```python
        bot = DiscordLLMBot.from_config("config.yaml")
        bot.start()
        ```
    """

    def __init__(
        self,
        config: BotConfig,
        provider: ThreadProvider | None = None,
        completion: CompletionClient | None = None,
    ) -> None:
        """Initialize the bot.

        Args:
            config: Bot configuration
            provider: Platform provider, a DiscordProvider by default
            completion: Completion client, built from ``config.completion`` by default
        """
        if config is None:
            raise ValueError("Bot configuration must not be None")

        self.config = config
        setup_logging(config.logging)

        self.provider = provider or DiscordProvider(config.discord)
        self.completion = completion or CompletionClient(config.completion)
        self.bot_id = config.discord.application_id

        self.controller = ChatController(
            provider=self.provider,
            completion=self.completion,
            bot_id=self.bot_id,
            config=config.chat,
        )
        self.starter = ConversationStarter(self.provider, self.completion, config.chat)
        self.event_server = EventServer(
            config.event_server,
            on_message=self.controller.handle_message,
            commands={CHAT_COMMAND_NAME: self.starter.execute},
            public_key=config.discord.public_key,
        )

        for key, value in config.summary().items():
            logger.info("%s: %s", key, value)
        logger.info("Discord LLM Bot initialized")

    @classmethod
    def from_config(cls, config_path: str | Path | None = None) -> DiscordLLMBot:
        """Create the bot from a YAML file, or from the environment when no path is given."""
        return cls(BotConfig.load(config_path))

    async def register_commands(self) -> list[dict[str, Any]]:
        """Overwrite the application's global slash commands with ``/chat``."""
        logger.info("Registering %d application command(s)", len(COMMANDS))
        registered = await self.provider.register_commands(COMMANDS)
        logger.info("Registered commands: %s", ", ".join(cmd.get("name", "?") for cmd in registered))
        return registered

    async def run(self) -> None:
        """Serve inbound events until stopped, then release resources."""
        logger.info("Starting Discord LLM Bot...")
        try:
            await self.event_server.serve()
        finally:
            await self.aclose()

    def start(self) -> None:
        """Blocking entry point used by the CLI."""
        asyncio.run(self.run())

    def stop(self) -> None:
        self.event_server.stop()

    async def aclose(self) -> None:
        """Wait for pending background work and close HTTP clients."""
        await self.controller.wait_for_background_tasks()
        await self.completion.aclose()
        await self.provider.aclose()
        logger.info("Discord LLM Bot stopped")
