"""Discord LLM Bot.

A Discord bot that holds conversations with an OpenAI-compatible chat
completion backend inside threads:
- ``/chat`` opens a thread owned by the invoking user
- every owner message in the thread gets a model reply built from the
  thread's own history
- long replies are split at sentence, line or word boundaries

Example:
    ```python
    from discord_llm_bot import DiscordLLMBot

    bot = DiscordLLMBot.from_config("config.yaml")
    bot.start()
    ```
"""

from importlib.metadata import PackageNotFoundError, version

try:  # pragma: no cover - best-effort during development
    __version__ = version("discord-llm-bot")
except PackageNotFoundError:  # pragma: no cover
    __version__ = "0.0.0"

from .bot import DiscordLLMBot
from .core import BotConfig, get_logger, setup_logging

__all__ = [
    "__version__",
    "DiscordLLMBot",
    "BotConfig",
    "get_logger",
    "setup_logging",
]
