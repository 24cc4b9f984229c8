"""Decide whether an inbound message continues a conversation.

A conversation belongs to the user who invoked the ``/chat`` command that
created its thread. Ownership is never stored: it is read back from the
interaction metadata of the thread's starter message on every check, so it
survives restarts without any state.
"""

from __future__ import annotations

from ..core.logger import get_logger
from ..core.models import ChannelMessage, ThreadInfo
from ..core.provider import ThreadProvider

logger = get_logger("chat.authorizer")


class ConversationAuthorizer:
    """Gatekeeper for inbound thread messages."""

    def __init__(self, provider: ThreadProvider) -> None:
        self.provider = provider

    async def is_eligible(self, message: ChannelMessage, bot_id: str) -> bool:
        """Check whether ``message`` should get a reply.

        Rules, in order: the author is human (and not the bot itself), the
        channel is a thread, the thread has a resolvable owner, and the author
        is that owner.

        Never raises; lookup failures count as "not eligible".
        """
        if message.author_is_bot or message.author_id == bot_id:
            return False

        try:
            thread = await self.provider.fetch_thread(message.channel_id)
        except Exception as exc:
            logger.warning("Could not resolve channel %s: %s", message.channel_id, exc)
            return False

        if thread is None:
            return False

        owner_id = await self.get_owner_id(thread)
        if owner_id is None:
            # Not a thread created by our bot
            return False

        return message.author_id == owner_id

    async def get_owner_id(self, thread: ThreadInfo) -> str | None:
        """Return the ID of the user who started the conversation in ``thread``.

        Returns None when the starter message is missing, carries no
        interaction metadata, or cannot be fetched.
        """
        try:
            starter = await self.provider.fetch_starter_message(thread)
        except Exception as exc:
            logger.error("Error fetching starter message of thread %s: %s", thread.id, exc)
            return None

        if starter is None:
            logger.debug("Thread %s has no starter message", thread.id)
            return None

        return starter.interaction_user_id
