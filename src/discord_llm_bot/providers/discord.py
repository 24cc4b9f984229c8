"""Discord REST API provider.

Implements :class:`ThreadProvider` on top of the Discord HTTP API (v10) with an
``httpx.AsyncClient``. Gateway events are not consumed here; they reach the bot
through the event server.
"""

from __future__ import annotations

from typing import Any

import httpx

from ..ai.exceptions import DeliveryFailure, DiscordAPIError, LookupFailure
from ..core.config import DiscordConfig
from ..core.message_parsers import DiscordMessageParser
from ..core.models import ChannelMessage, ThreadInfo
from ..core.provider import ThreadProvider
from .common.async_http import AsyncHTTPProviderMixin

EPHEMERAL_FLAG = 1 << 6

# Model output must never ping @everyone, roles or users
_NO_MENTIONS = {"parse": []}


class DiscordProvider(ThreadProvider, AsyncHTTPProviderMixin):
    """Thread provider backed by the Discord REST API.

    Example:
        ```python
        provider = DiscordProvider(config.discord)
        thread = await provider.fetch_thread("1200000000000000000")
        if thread:
            await provider.send_message(thread.id, "Hello!")
        await provider.aclose()
        ```
    """

    provider_type = "discord"

    def __init__(
        self,
        config: DiscordConfig,
        http_client: httpx.AsyncClient | None = None,
        parser: DiscordMessageParser | None = None,
    ) -> None:
        """Initialize the provider.

        Args:
            config: Discord credentials and API settings
            http_client: Preconfigured client; one is created when omitted
            parser: Payload parser, defaults to DiscordMessageParser
        """
        super().__init__()
        self.config = config
        self.parser = parser or DiscordMessageParser()
        self._owns_client = http_client is None
        self._async_client = http_client or httpx.AsyncClient(
            base_url=config.api_base_url,
            timeout=config.timeout,
            headers={
                "Authorization": f"Bot {config.token}",
                "User-Agent": "DiscordBot (discord-llm-bot, 0.1)",
            },
        )

    @property
    def application_id(self) -> str:
        return self.config.application_id

    async def _lookup(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            return await self._async_request_json(self._async_client, method, url, **kwargs)
        except DiscordAPIError as exc:
            raise LookupFailure(str(exc)) from exc
        except httpx.HTTPError as exc:
            raise LookupFailure(f"{method} {url} failed: {exc}") from exc

    async def _deliver(self, method: str, url: str, **kwargs: Any) -> Any:
        try:
            return await self._async_request_json(self._async_client, method, url, **kwargs)
        except DiscordAPIError as exc:
            raise DeliveryFailure(str(exc)) from exc
        except httpx.HTTPError as exc:
            raise DeliveryFailure(f"{method} {url} failed: {exc}") from exc

    # ------------------------------------------------------------------
    # Message store queries
    # ------------------------------------------------------------------
    async def fetch_thread(self, channel_id: str) -> ThreadInfo | None:
        data = await self._lookup("GET", f"/channels/{channel_id}")
        return self.parser.parse_thread(data)

    async def fetch_starter_message(self, thread: ThreadInfo) -> ChannelMessage | None:
        # A thread started from a message shares that message's ID and lives
        # under the parent channel.
        if not thread.parent_id:
            return None
        url = f"/channels/{thread.parent_id}/messages/{thread.id}"
        try:
            data = await self._async_request_json(self._async_client, "GET", url)
        except DiscordAPIError as exc:
            if exc.status_code == 404:
                self.logger.debug("Starter message of thread %s not found", thread.id)
                return None
            raise LookupFailure(str(exc)) from exc
        except httpx.HTTPError as exc:
            raise LookupFailure(f"GET {url} failed: {exc}") from exc
        return self.parser.parse_message(data)

    async def fetch_messages(self, channel_id: str, limit: int = 50) -> list[ChannelMessage]:
        data = await self._lookup(
            "GET", f"/channels/{channel_id}/messages", params={"limit": min(limit, 100)}
        )
        return [self.parser.parse_message(item) for item in data or []]

    # ------------------------------------------------------------------
    # Outbound operations
    # ------------------------------------------------------------------
    async def send_message(self, channel_id: str, content: str) -> ChannelMessage:
        data = await self._deliver(
            "POST",
            f"/channels/{channel_id}/messages",
            json={"content": content, "allowed_mentions": _NO_MENTIONS},
        )
        return self.parser.parse_message(data)

    async def edit_message(self, channel_id: str, message_id: str, content: str) -> ChannelMessage:
        data = await self._deliver(
            "PATCH",
            f"/channels/{channel_id}/messages/{message_id}",
            json={"content": content, "allowed_mentions": _NO_MENTIONS},
        )
        return self.parser.parse_message(data)

    async def rename_thread(self, thread_id: str, name: str) -> None:
        await self._deliver("PATCH", f"/channels/{thread_id}", json={"name": name})

    async def start_thread(
        self,
        channel_id: str,
        message_id: str,
        name: str,
        auto_archive_duration: int = 60,
    ) -> ThreadInfo:
        data = await self._deliver(
            "POST",
            f"/channels/{channel_id}/messages/{message_id}/threads",
            json={"name": name, "auto_archive_duration": auto_archive_duration},
        )
        thread = self.parser.parse_thread(data)
        if thread is None:
            raise DeliveryFailure(f"Discord did not return a thread for message {message_id}")
        return thread

    # ------------------------------------------------------------------
    # Slash-command interactions
    # ------------------------------------------------------------------
    async def edit_original_response(self, interaction_token: str, content: str) -> ChannelMessage:
        data = await self._deliver(
            "PATCH",
            f"/webhooks/{self.application_id}/{interaction_token}/messages/@original",
            json={"content": content, "allowed_mentions": _NO_MENTIONS},
        )
        return self.parser.parse_message(data)

    async def send_followup(
        self, interaction_token: str, content: str, ephemeral: bool = False
    ) -> ChannelMessage:
        payload: dict[str, Any] = {"content": content, "allowed_mentions": _NO_MENTIONS}
        if ephemeral:
            payload["flags"] = EPHEMERAL_FLAG
        data = await self._deliver(
            "POST",
            f"/webhooks/{self.application_id}/{interaction_token}",
            json=payload,
            params={"wait": "true"},
        )
        return self.parser.parse_message(data)

    async def register_commands(self, commands: list[dict[str, Any]]) -> list[dict[str, Any]]:
        data = await self._deliver(
            "PUT", f"/applications/{self.application_id}/commands", json=commands
        )
        return list(data or [])

    async def aclose(self) -> None:
        if self._owns_client:
            await self._async_client.aclose()
