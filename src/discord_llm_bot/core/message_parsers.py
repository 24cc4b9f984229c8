"""Parsers converting raw Discord payloads into platform-neutral models.

Key parsers:
- DiscordMessageParser: message objects, gateway ``MESSAGE_CREATE`` dispatches,
  channel objects and interaction payloads

Discord message object (abridged):
```json
{
    "id": "1200000000000000001",
    "channel_id": "1200000000000000000",
    "author": {"id": "80351110224678912", "bot": false},
    "content": "Hello",
    "timestamp": "2024-01-01T12:00:00.000000+00:00",
    "type": 0,
    "interaction_metadata": {"id": "...", "type": 2, "user": {"id": "80351110224678912"}}
}
```
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from .logger import get_logger
from .models import ChannelMessage, CommandInteraction, ThreadInfo

logger = get_logger("message_parsers")

# Message types that carry conversation: DEFAULT, REPLY, CHAT_INPUT_COMMAND, CONTEXT_MENU_COMMAND
CONVERSATIONAL_MESSAGE_TYPES = frozenset({0, 19, 20, 23})

# ANNOUNCEMENT_THREAD, PUBLIC_THREAD, PRIVATE_THREAD
THREAD_CHANNEL_TYPES = frozenset({10, 11, 12})

INTERACTION_PING = 1
INTERACTION_APPLICATION_COMMAND = 2


def parse_timestamp(value: Any) -> datetime:
    """Parse a Discord ISO8601 timestamp; unparseable values map to the epoch."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, str) and value:
        try:
            return datetime.fromisoformat(value.replace("Z", "+00:00"))
        except ValueError:
            logger.debug("Unparseable timestamp: %s", value)
    return datetime.fromtimestamp(0, tz=timezone.utc)


class DiscordMessageParser:
    """Parse Discord REST objects and relayed gateway events.

    Example:
        ```python
        parser = DiscordMessageParser()

        if parser.can_parse(payload):
            message = parser.parse(payload)
            print(f"{message.author_id}: {message.content}")
        ```
    """

    def can_parse(self, payload: dict[str, Any]) -> bool:
        """Check whether the payload is a message creation event.

        Accepts a gateway dispatch envelope (``{"t": "MESSAGE_CREATE", "d": {...}}``)
        or a bare message object.
        """
        if "t" in payload:
            return payload.get("t") == "MESSAGE_CREATE" and isinstance(payload.get("d"), dict)
        return "channel_id" in payload and "author" in payload

    def parse(self, payload: dict[str, Any]) -> ChannelMessage | None:
        """Parse a gateway event or message object, None if it is not a message."""
        if not self.can_parse(payload):
            return None
        data = payload["d"] if "t" in payload else payload
        try:
            return self.parse_message(data)
        except (KeyError, TypeError) as exc:
            logger.warning("Malformed Discord message payload: %s", exc)
            return None

    def parse_message(self, data: dict[str, Any]) -> ChannelMessage:
        """Convert a Discord message object.

        Raises:
            KeyError: If mandatory fields are missing.
        """
        author = data.get("author") or {}
        message_type = int(data.get("type", 0))

        return ChannelMessage(
            id=str(data["id"]),
            channel_id=str(data["channel_id"]),
            author_id=str(author.get("id", "")),
            author_is_bot=bool(author.get("bot", False)) or bool(data.get("webhook_id")),
            content=data.get("content") or "",
            created_at=parse_timestamp(data.get("timestamp")),
            is_system=message_type not in CONVERSATIONAL_MESSAGE_TYPES,
            interaction_user_id=self._interaction_user_id(data),
            metadata={"type": message_type},
        )

    def parse_thread(self, data: dict[str, Any]) -> ThreadInfo | None:
        """Convert a Discord channel object, None unless it is a thread."""
        if not isinstance(data, dict):
            return None
        if int(data.get("type", -1)) not in THREAD_CHANNEL_TYPES:
            return None
        parent_id = data.get("parent_id")
        return ThreadInfo(
            id=str(data["id"]),
            parent_id=str(parent_id) if parent_id else None,
            name=data.get("name") or "",
        )

    def parse_interaction(self, payload: dict[str, Any]) -> CommandInteraction | None:
        """Convert an application-command interaction, None for other types."""
        if payload.get("type") != INTERACTION_APPLICATION_COMMAND:
            return None

        data = payload.get("data") or {}
        user = (payload.get("member") or {}).get("user") or payload.get("user") or {}
        options = {
            option["name"]: option.get("value")
            for option in data.get("options") or []
            if "name" in option
        }
        return CommandInteraction(
            id=str(payload.get("id", "")),
            token=str(payload.get("token", "")),
            command_name=data.get("name", ""),
            user_id=str(user.get("id", "")),
            channel_id=str(payload.get("channel_id", "")),
            options=options,
        )

    @staticmethod
    def _interaction_user_id(data: dict[str, Any]) -> str | None:
        """Who invoked the command this message answers, if any."""
        for key in ("interaction_metadata", "interaction"):
            user = (data.get(key) or {}).get("user") or {}
            if user.get("id"):
                return str(user["id"])
        return None
