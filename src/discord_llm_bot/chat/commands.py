"""The ``/chat`` slash command: answer a first message and open a thread on it."""

from __future__ import annotations

from typing import Any

from ..ai.completion import CompletionClient
from ..core.chunker import chunk_message
from ..core.config import ChatConfig
from ..core.logger import get_logger, log_exception
from ..core.models import ChatMessage, CommandInteraction
from ..core.provider import ThreadProvider

logger = get_logger("chat.commands")

CHAT_COMMAND_NAME = "chat"
MESSAGE_OPTION = "message"

# Application command option type for strings
_STRING_OPTION = 3

CHAT_COMMAND: dict[str, Any] = {
    "name": CHAT_COMMAND_NAME,
    "description": "Start a conversation with an AI assistant",
    "type": 1,
    "options": [
        {
            "type": _STRING_OPTION,
            "name": MESSAGE_OPTION,
            "description": "Your message to the AI",
            "required": True,
        }
    ],
}
COMMANDS: list[dict[str, Any]] = [CHAT_COMMAND]

DEFAULT_THREAD_TITLE = "Chat"


class ConversationStarter:
    """Answer ``/chat message:<text>`` and open a thread on the answer.

    The answer becomes the interaction's original response. That message
    carries the invoking user in its interaction metadata, which is what later
    identifies the thread's owner.
    """

    def __init__(
        self,
        provider: ThreadProvider,
        completion: CompletionClient,
        config: ChatConfig | None = None,
    ) -> None:
        self.provider = provider
        self.completion = completion
        self.config = config or ChatConfig()

    async def execute(self, interaction: CommandInteraction) -> None:
        """Handle a deferred ``/chat`` interaction. Never raises."""
        prompt = str(interaction.options.get(MESSAGE_OPTION) or "").strip()
        logger.info(
            "Starting conversation for user %s in channel %s",
            interaction.user_id,
            interaction.channel_id,
        )

        answered = False
        try:
            if not prompt:
                raise ValueError("The /chat command requires a message")

            reply_text = await self.completion.complete([ChatMessage(role="user", content=prompt)])
            chunks = chunk_message(reply_text, self.config.max_message_length)

            reply = await self.provider.edit_original_response(interaction.token, chunks[0])
            answered = True

            thread = await self.provider.start_thread(
                reply.channel_id or interaction.channel_id,
                reply.id,
                DEFAULT_THREAD_TITLE,
                auto_archive_duration=self.config.auto_archive_duration,
            )
            for chunk in chunks[1:]:
                await self.provider.send_message(thread.id, chunk)
            logger.info("Created thread %s for user %s", thread.id, interaction.user_id)
        except Exception as exc:
            log_exception(logger, exc, "Error executing chat command")
            await self._report_failure(interaction, answered)

    async def _report_failure(self, interaction: CommandInteraction, answered: bool) -> None:
        # Once the answer is posted it stays; the notice goes to the user alone
        if not answered:
            try:
                await self.provider.edit_original_response(
                    interaction.token, self.config.error_message
                )
                return
            except Exception as exc:
                logger.warning("Failed to edit original response with error: %s", exc)

        try:
            await self.provider.send_followup(
                interaction.token, self.config.error_message, ephemeral=True
            )
        except Exception as exc:
            logger.error("Failed to report command error: %s", exc)
