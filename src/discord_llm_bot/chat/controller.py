"""Conversation orchestrator for thread messages.

This module wires the conversation components together for one inbound
message at a time:

1. validate the message with the :class:`ConversationAuthorizer`
2. rebuild the history with the :class:`HistoryBuilder`
3. post an interim indicator and request a completion, editing the indicator
   while the request is being retried
4. chunk the reply and deliver it, the first chunk replacing the indicator

Each call is self-contained: nothing is remembered between messages.
"""

from __future__ import annotations

import asyncio

from ..ai.completion import CompletionClient
from ..core.chunker import chunk_message
from ..core.config import ChatConfig
from ..core.logger import get_logger, log_exception
from ..core.models import ChannelMessage, ChatMessage, StatusEvent
from ..core.provider import ThreadProvider
from .authorizer import ConversationAuthorizer
from .history import HistoryBuilder

logger = get_logger("chat.controller")

# Room left for the retry notice around the error text
_STATUS_ERROR_MAX_LENGTH = 1500


def render_retry_status(event: StatusEvent) -> str:
    """Text of the interim indicator after a failed attempt."""
    error = (event.error or "Unknown error")[:_STATUS_ERROR_MAX_LENGTH]
    return f"_Error, retrying ({event.attempt}/{event.max_attempts})..._\n```\n{error}\n```"


class ChatController:
    """Handle inbound thread messages end to end.

    Example:
        ```python
        controller = ChatController(
            provider=DiscordProvider(config.discord),
            completion=CompletionClient(config.completion),
            bot_id=config.discord.application_id,
            config=config.chat,
        )
        await controller.handle_message(message)
        ```
    """

    def __init__(
        self,
        provider: ThreadProvider,
        completion: CompletionClient,
        bot_id: str,
        config: ChatConfig | None = None,
        authorizer: ConversationAuthorizer | None = None,
        history_builder: HistoryBuilder | None = None,
    ) -> None:
        """Initialize the controller.

        Args:
            provider: Messaging platform access
            completion: Completion backend client
            bot_id: The bot's own user ID
            config: Conversation settings
            authorizer: Override for the default authorizer
            history_builder: Override for the default history builder
        """
        self.provider = provider
        self.completion = completion
        self.bot_id = bot_id
        self.config = config or ChatConfig()
        self.authorizer = authorizer or ConversationAuthorizer(provider)
        self.history_builder = history_builder or HistoryBuilder(provider)
        # Strong references so pending thread-naming tasks are not collected
        self._background_tasks: set[asyncio.Task[None]] = set()

        logger.debug(
            "ChatController initialized: provider=%s, bot_id=%s, config=%s",
            provider,
            bot_id,
            self.config,
        )

    async def handle_message(self, message: ChannelMessage) -> None:
        """Main entry point for inbound thread messages. Never raises."""
        try:
            if not await self.authorizer.is_eligible(message, self.bot_id):
                return
        except Exception as exc:
            logger.error("Authorization check failed: %s", exc, exc_info=True)
            return

        thread_id = message.channel_id
        logger.info("Processing message from %s in thread %s", message.author_id, thread_id)

        try:
            history = await self.history_builder.build_history(
                thread_id, limit=self.config.history_limit
            )

            if self.config.auto_name_threads and self._is_first_user_message(history):
                self._schedule(self._name_thread(thread_id, message.content))

            status = await self.provider.send_message(thread_id, self.config.thinking_message)

            async def on_status(event: StatusEvent) -> None:
                if event.type != "retrying":
                    return
                try:
                    await self.provider.edit_message(
                        thread_id, status.id, render_retry_status(event)
                    )
                except Exception as exc:
                    logger.warning("Failed to update status message: %s", exc)

            reply = await self.completion.complete(history, on_status)
            await self._deliver(thread_id, status, reply)
            logger.info("Sent response in thread %s", thread_id)

        except Exception as exc:
            log_exception(logger, exc, f"Error handling message {message.id}")
            await self._send_error_notice(thread_id)

    async def _deliver(self, thread_id: str, status: ChannelMessage, reply: str) -> None:
        if not reply.strip():
            raise ValueError("Completion returned a blank reply")

        chunks = chunk_message(reply, self.config.max_message_length)
        logger.info("Response split into %d chunk(s)", len(chunks))

        await self.provider.edit_message(thread_id, status.id, chunks[0])
        for chunk in chunks[1:]:
            await self.provider.send_message(thread_id, chunk)

    async def _send_error_notice(self, thread_id: str) -> None:
        try:
            await self.provider.send_message(thread_id, self.config.error_message)
        except Exception as exc:
            logger.error("Failed to send error message: %s", exc)

    @staticmethod
    def _is_first_user_message(history: list[ChatMessage]) -> bool:
        return sum(1 for entry in history if entry.role == "user") == 1

    async def _name_thread(self, thread_id: str, content: str) -> None:
        name = await self.completion.generate_thread_name(content)
        try:
            await self.provider.rename_thread(thread_id, name)
            logger.info("Renamed thread %s to %s", thread_id, name)
        except Exception as exc:
            logger.error("Failed to rename thread %s: %s", thread_id, exc)

    def _schedule(self, coro) -> None:
        task = asyncio.create_task(coro)
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def wait_for_background_tasks(self) -> None:
        """Wait for pending thread-naming tasks (used on shutdown and in tests)."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
