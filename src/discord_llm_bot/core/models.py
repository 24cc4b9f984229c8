"""Platform-neutral data models shared by the conversation components.

Key types:
- ChatMessage: role-tagged entry of a conversation history sent to the model
- ChannelMessage: a message as stored by the messaging platform
- ThreadInfo: a conversation thread
- CommandInteraction: a slash-command invocation
- StatusEvent: progress signal emitted during a completion call
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Literal

Role = Literal["user", "assistant", "system"]


@dataclass
class ChatMessage:
    """One role-tagged entry of a conversation history."""

    role: Role
    content: str

    def to_dict(self) -> dict[str, str]:
        return {"role": self.role, "content": self.content}


@dataclass
class ChannelMessage:
    """Universal representation of a message stored by the platform.

    Attributes:
        id: Platform message ID.
        channel_id: Channel or thread the message was posted in.
        author_id: User ID of the author.
        author_is_bot: Whether the author is an automated participant.
        content: Text content (may be empty for embeds or attachments).
        created_at: Creation timestamp, used for chronological ordering.
        is_system: Whether this is a platform notice (thread rename, pins, ...)
            rather than a conversational message.
        interaction_user_id: For messages produced by a slash command, the ID of
            the user who invoked it.
        metadata: Extra platform-specific data.
    """

    id: str
    channel_id: str
    author_id: str
    author_is_bot: bool = False
    content: str = ""
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    is_system: bool = False
    interaction_user_id: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass
class ThreadInfo:
    """A thread channel hosting one conversation."""

    id: str
    parent_id: str | None
    name: str = ""


@dataclass
class CommandInteraction:
    """A slash-command invocation received from the platform."""

    id: str
    token: str
    command_name: str
    user_id: str
    channel_id: str
    options: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StatusEvent:
    """Progress signal emitted to an observer during one completion call.

    ``thinking`` is sent once before the first attempt; ``retrying`` after each
    failed attempt that will be followed by another one.
    """

    type: Literal["thinking", "retrying"]
    attempt: int = 0
    max_attempts: int = 0
    error: str | None = None

    @classmethod
    def thinking(cls) -> StatusEvent:
        return cls(type="thinking")

    @classmethod
    def retrying(cls, attempt: int, max_attempts: int, error: str) -> StatusEvent:
        return cls(type="retrying", attempt=attempt, max_attempts=max_attempts, error=error)
