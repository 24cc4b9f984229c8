"""Client for OpenAI-compatible chat completion backends.

The client is stateless between calls: each :meth:`CompletionClient.complete`
builds the request from the given history, drives it through the bounded retry
loop and reports progress to an optional observer.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Sequence
from typing import Any

import httpx

from ..core.config import CompletionConfig
from ..core.logger import get_logger
from ..core.models import ChatMessage, StatusEvent
from .exceptions import BackendFailure, TransportFailure
from .retry import ATTEMPT_TIMEOUT, MAX_ATTEMPTS, RetryState, run_with_retries

logger = get_logger("ai.completion")

StatusObserver = Callable[[StatusEvent], Awaitable[None]]

THREAD_NAME_PROMPT = (
    "Based on the following user message, generate a concise thread name that summarizes "
    "the topic. The thread name must be no more than 50 characters. "
    "Respond with ONLY the thread name, no quotes, no explanations."
)
THREAD_NAME_MAX_LENGTH = 50
DEFAULT_THREAD_NAME = "Chat"


class CompletionClient:
    """Send conversation histories to the completion backend.

    Example:
        ```python
        client = CompletionClient(config.completion)

        async def on_status(event: StatusEvent) -> None:
            print(event.type, event.attempt)

        reply = await client.complete(
            [ChatMessage(role="user", content="Hello")], on_status
        )
        await client.aclose()
        ```
    """

    def __init__(
        self,
        config: CompletionConfig,
        http_client: httpx.AsyncClient | None = None,
        *,
        max_attempts: int = MAX_ATTEMPTS,
        timeout: float = ATTEMPT_TIMEOUT,
    ) -> None:
        """Initialize the client.

        Args:
            config: Backend settings (endpoint, key, model, sampling)
            http_client: Shared async HTTP client; one is created when omitted
            max_attempts: Total tries per completion
            timeout: Seconds allowed for each try
        """
        self.config = config
        self.max_attempts = max_attempts
        self.timeout = timeout
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def url(self) -> str:
        return f"{self.config.endpoint_url}/v1/chat/completions"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.config.api_key:
            headers["Authorization"] = f"Bearer {self.config.api_key}"
        return headers

    def build_request(self, history: Sequence[ChatMessage]) -> dict[str, Any]:
        """Build the request body, prepending the system directive when missing."""
        messages = list(history)
        if not messages or messages[0].role != "system":
            messages.insert(0, ChatMessage(role="system", content=self.config.system_prompt))

        return {
            "model": self.config.model,
            "messages": [message.to_dict() for message in messages],
            "temperature": self.config.temperature,
            "max_tokens": self.config.max_tokens,
        }

    async def complete(
        self,
        history: Sequence[ChatMessage],
        on_status: StatusObserver | None = None,
    ) -> str:
        """Get the assistant reply for a conversation.

        Args:
            history: Chronological conversation history
            on_status: Observer notified with ``thinking`` once, then
                ``retrying`` after every failed attempt except the last

        Returns:
            Non-empty assistant content

        Raises:
            CompletionFailure: If all attempts failed
        """
        payload = self.build_request(history)
        state = RetryState(max_attempts=self.max_attempts, timeout=self.timeout)

        logger.info("Sending request to %s", self.url)
        logger.debug("Messages: %d messages", len(history))

        await self._notify(on_status, StatusEvent.thinking())

        async def on_retry(retry_state: RetryState) -> None:
            await self._notify(
                on_status,
                StatusEvent.retrying(
                    attempt=retry_state.attempt,
                    max_attempts=retry_state.max_attempts,
                    error=retry_state.last_error or "Unknown error",
                ),
            )

        content = await run_with_retries(
            lambda: self._post(payload),
            state,
            on_retry=on_retry,
            retry_on=(TransportFailure, BackendFailure),
        )
        logger.info("Received response: %s...", content[:100])
        return content

    async def generate_thread_name(self, user_message: str) -> str:
        """Summarize a user's first message into a short thread title.

        Never raises; falls back to ``"Chat"`` on any failure or empty reply.
        """
        messages = [
            ChatMessage(role="system", content=THREAD_NAME_PROMPT),
            ChatMessage(role="user", content=user_message),
        ]
        try:
            response = await self.complete(messages)
        except Exception as exc:
            logger.error("Error generating thread name: %s", exc, exc_info=True)
            return DEFAULT_THREAD_NAME

        thread_name = response.strip()[:THREAD_NAME_MAX_LENGTH]
        logger.info("Generated thread name: %s", thread_name)
        return thread_name or DEFAULT_THREAD_NAME

    async def _post(self, payload: dict[str, Any]) -> str:
        """Perform one HTTP attempt and extract the reply content."""
        try:
            response = await self._client.post(self.url, json=payload, headers=self._headers())
        except httpx.HTTPError as exc:
            raise TransportFailure(f"{type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            raise BackendFailure(
                f"Chat API error: {response.status_code} {response.reason_phrase} - "
                f"{response.text}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise BackendFailure(
                "Invalid JSON in chat completion response", response.status_code
            ) from exc

        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices:
            raise BackendFailure("No choices in chat completion response", response.status_code)

        first = choices[0] if isinstance(choices[0], dict) else {}
        message = first.get("message")
        content = message.get("content") if isinstance(message, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise BackendFailure("No content in chat completion response", response.status_code)

        return content

    async def _notify(self, observer: StatusObserver | None, event: StatusEvent) -> None:
        if observer is None:
            return
        try:
            await observer(event)
        except Exception as exc:
            logger.warning("Status observer failed on %s event: %s", event.type, exc)

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()
