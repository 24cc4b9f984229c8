"""Async HTTP provider mixin with common request and error handling logic.

This module provides asynchronous HTTP request functionality with:
- Structured logging with provider context
- Consistent error handling for non-success responses

Requests are never retried here: a failed lookup or delivery is reported to
the caller, which decides what the user sees.
"""

from __future__ import annotations

from typing import Any

import httpx

from ...ai.exceptions import DiscordAPIError
from ...core.logger import get_logger

logger = get_logger("providers.http")


class AsyncHTTPProviderMixin:
    """Mixin providing asynchronous JSON requests against a REST API.

    Usage:
        class MyProvider(AsyncHTTPProviderMixin):
            async def get_thing(self, thing_id: str) -> dict:
                return await self._async_request_json(
                    self._async_client, "GET", f"/things/{thing_id}"
                )
    """

    provider_type: str

    async def _async_request_json(
        self,
        client: httpx.AsyncClient | None,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Make an async HTTP request and decode the JSON body.

        Args:
            client: httpx AsyncClient instance.
            method: HTTP method.
            url: Target URL, relative to the client's base URL.
            json: JSON body.
            params: Query parameters.
            headers: Additional headers.

        Returns:
            Decoded JSON, or None for empty (204) responses.

        Raises:
            RuntimeError: If client is not initialized.
            DiscordAPIError: If the API answers with a non-success status.
            httpx.HTTPError: On transport failures.
        """
        if not client:
            raise RuntimeError("Async HTTP client not initialized")

        response = await client.request(method, url, json=json, params=params, headers=headers)

        if not response.is_success:
            code: int | None = None
            detail = response.text
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict):
                code = body.get("code")
                detail = body.get("message", detail)

            logger.warning(
                "HTTP request failed",
                extra={
                    "provider_type": self.provider_type,
                    "method": method,
                    "url": url,
                    "status_code": response.status_code,
                    "error": detail,
                },
            )
            raise DiscordAPIError(
                f"{method} {url} failed: {response.status_code} {detail}",
                status_code=response.status_code,
                code=code,
            )

        if response.status_code == 204 or not response.content:
            return None
        return response.json()
