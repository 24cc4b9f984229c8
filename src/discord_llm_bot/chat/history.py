"""Rebuild role-tagged conversation history from a thread's messages."""

from __future__ import annotations

from ..core.logger import get_logger
from ..core.models import ChatMessage
from ..core.provider import ThreadProvider

logger = get_logger("chat.history")

DEFAULT_HISTORY_LIMIT = 50


class HistoryBuilder:
    """Build the history sent to the completion backend.

    Holds no state: every call fetches the thread again.
    """

    def __init__(self, provider: ThreadProvider) -> None:
        self.provider = provider

    async def build_history(
        self, thread_id: str, limit: int = DEFAULT_HISTORY_LIMIT
    ) -> list[ChatMessage]:
        """Return the conversation in ``thread_id``, oldest message first.

        Platform notices and messages without text are skipped; messages from
        automated participants become ``assistant`` turns, everything else
        ``user`` turns.

        Raises:
            LookupFailure: If the messages cannot be fetched.
        """
        logger.info("Building conversation history for thread %s", thread_id)

        messages = await self.provider.fetch_messages(thread_id, limit=limit)
        ordered = sorted(messages, key=lambda msg: msg.created_at)

        history = [
            ChatMessage(role="assistant" if msg.author_is_bot else "user", content=msg.content)
            for msg in ordered
            if msg.content and not msg.is_system
        ]

        logger.info("Built history with %d messages", len(history))
        return history
