"""Provider abstraction for threaded messaging platforms.

The conversation components only talk to the platform through this interface:
queries used to authorize and rebuild conversations, and the outbound
operations used to deliver replies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from .logger import get_logger
from .models import ChannelMessage, ThreadInfo

logger = get_logger("provider")


class ThreadProvider(ABC):
    """Abstract base class for threaded messaging providers."""

    provider_type: str = "base"

    def __init__(self) -> None:
        self.logger = get_logger(f"provider.{self.provider_type}")

    # ------------------------------------------------------------------
    # Message store queries
    # ------------------------------------------------------------------
    @abstractmethod
    async def fetch_thread(self, channel_id: str) -> ThreadInfo | None:
        """Return the thread for ``channel_id``, or None if it is not a thread."""

    @abstractmethod
    async def fetch_starter_message(self, thread: ThreadInfo) -> ChannelMessage | None:
        """Return the message the thread was started from, or None if unavailable."""

    @abstractmethod
    async def fetch_messages(self, channel_id: str, limit: int = 50) -> list[ChannelMessage]:
        """Return up to ``limit`` most recent messages of a channel, in any order."""

    # ------------------------------------------------------------------
    # Outbound operations
    # ------------------------------------------------------------------
    @abstractmethod
    async def send_message(self, channel_id: str, content: str) -> ChannelMessage:
        """Post a message and return it."""

    @abstractmethod
    async def edit_message(self, channel_id: str, message_id: str, content: str) -> ChannelMessage:
        """Replace the content of a previously posted message."""

    @abstractmethod
    async def rename_thread(self, thread_id: str, name: str) -> None:
        """Change a thread's display name."""

    @abstractmethod
    async def start_thread(
        self,
        channel_id: str,
        message_id: str,
        name: str,
        auto_archive_duration: int = 60,
    ) -> ThreadInfo:
        """Create a thread from an existing message."""

    # ------------------------------------------------------------------
    # Slash-command interactions
    # ------------------------------------------------------------------
    @abstractmethod
    async def edit_original_response(self, interaction_token: str, content: str) -> ChannelMessage:
        """Replace the (deferred) response of an interaction and return the message."""

    @abstractmethod
    async def send_followup(
        self, interaction_token: str, content: str, ephemeral: bool = False
    ) -> ChannelMessage:
        """Send an additional message for an interaction."""

    @abstractmethod
    async def register_commands(self, commands: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Overwrite the application's global commands."""

    async def aclose(self) -> None:
        """Release network resources."""

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} type={self.provider_type}>"
