"""Tests for the completion backend client."""

from __future__ import annotations

import asyncio
import json

import httpx
import pytest
from pytest_httpx import HTTPXMock

from discord_llm_bot.ai.completion import CompletionClient
from discord_llm_bot.ai.exceptions import CompletionFailure
from discord_llm_bot.ai.retry import MAX_ATTEMPTS
from discord_llm_bot.core.config import CompletionConfig
from discord_llm_bot.core.models import ChatMessage, StatusEvent

URL = "https://llm.example.com/v1/chat/completions"


def completion_body(content: str | None) -> dict:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


class Recorder:
    """Status observer collecting events."""

    def __init__(self) -> None:
        self.events: list[StatusEvent] = []

    async def __call__(self, event: StatusEvent) -> None:
        self.events.append(event)


@pytest.fixture
def history() -> list[ChatMessage]:
    return [
        ChatMessage(role="user", content="Hi"),
        ChatMessage(role="assistant", content="Hello! How can I help?"),
        ChatMessage(role="user", content="Tell me a joke"),
    ]


@pytest.fixture
def client(completion_config) -> CompletionClient:
    return CompletionClient(completion_config, max_attempts=3, timeout=5.0)


class TestRequestBuilding:
    def test_system_prompt_prepended(self, client, history):
        payload = client.build_request(history)

        assert payload["model"] == "gpt-3.5-turbo"
        assert payload["temperature"] == 0.7
        assert payload["max_tokens"] == 1000
        assert payload["messages"][0] == {
            "role": "system",
            "content": client.config.system_prompt,
        }
        assert payload["messages"][1:] == [message.to_dict() for message in history]

    def test_existing_system_message_kept(self, client):
        history = [ChatMessage(role="system", content="Custom"), ChatMessage(role="user", content="x")]

        payload = client.build_request(history)

        assert [m["content"] for m in payload["messages"]] == ["Custom", "x"]

    def test_url(self, client):
        assert client.url == URL


class TestComplete:
    @pytest.mark.anyio
    async def test_success(self, client, history, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=URL, method="POST", json=completion_body("Why not?"))
        recorder = Recorder()

        reply = await client.complete(history, recorder)

        assert reply == "Why not?"
        assert recorder.events == [StatusEvent.thinking()]

        request = httpx_mock.get_request()
        assert request.headers["Authorization"] == "Bearer sk-test"
        body = json.loads(request.content)
        assert body["messages"][0]["role"] == "system"
        assert body["messages"][-1] == {"role": "user", "content": "Tell me a joke"}

    @pytest.mark.anyio
    async def test_no_auth_header_without_key(self, history, httpx_mock: HTTPXMock):
        config = CompletionConfig(endpoint_url="https://llm.example.com")
        client = CompletionClient(config, max_attempts=1)
        httpx_mock.add_response(url=URL, method="POST", json=completion_body("ok"))

        await client.complete(history)

        assert "Authorization" not in httpx_mock.get_request().headers

    @pytest.mark.anyio
    async def test_retries_after_http_error(self, client, history, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=URL, method="POST", status_code=500, text="boom")
        httpx_mock.add_response(url=URL, method="POST", json=completion_body("Recovered"))
        recorder = Recorder()

        reply = await client.complete(history, recorder)

        assert reply == "Recovered"
        assert recorder.events == [
            StatusEvent.thinking(),
            StatusEvent.retrying(
                attempt=1,
                max_attempts=3,
                error="Chat API error: 500 Internal Server Error - boom",
            ),
        ]

    @pytest.mark.anyio
    async def test_retries_after_transport_error(self, client, history, httpx_mock: HTTPXMock):
        httpx_mock.add_exception(httpx.ConnectError("connection refused"), url=URL)
        httpx_mock.add_response(url=URL, method="POST", json=completion_body("Back online"))

        assert await client.complete(history) == "Back online"

    @pytest.mark.anyio
    async def test_gives_up_after_max_attempts(self, client, history, httpx_mock: HTTPXMock):
        for _ in range(3):
            httpx_mock.add_response(url=URL, method="POST", status_code=503, text="overloaded")
        recorder = Recorder()

        with pytest.raises(CompletionFailure) as exc_info:
            await client.complete(history, recorder)

        assert exc_info.value.attempts == 3
        assert str(exc_info.value).startswith("Failed to get chat response after 3 attempts")
        assert len(httpx_mock.get_requests()) == 3
        retries = [event for event in recorder.events if event.type == "retrying"]
        assert [event.attempt for event in retries] == [1, 2]

    @pytest.mark.anyio
    async def test_missing_choices_is_a_failure(self, completion_config, history, httpx_mock):
        client = CompletionClient(completion_config, max_attempts=1)
        httpx_mock.add_response(url=URL, method="POST", json={"choices": []})

        with pytest.raises(CompletionFailure, match="No choices in chat completion response"):
            await client.complete(history)

    @pytest.mark.anyio
    async def test_empty_content_is_a_failure(self, completion_config, history, httpx_mock):
        client = CompletionClient(completion_config, max_attempts=1)
        httpx_mock.add_response(url=URL, method="POST", json=completion_body(""))

        with pytest.raises(CompletionFailure, match="No content in chat completion response"):
            await client.complete(history)

    @pytest.mark.anyio
    async def test_non_list_choices_retried(self, completion_config, history, httpx_mock):
        client = CompletionClient(completion_config, max_attempts=3)
        httpx_mock.add_response(url=URL, method="POST", json={"choices": 5})
        httpx_mock.add_response(url=URL, method="POST", json=completion_body("Recovered"))

        assert await client.complete(history) == "Recovered"
        assert len(httpx_mock.get_requests()) == 2

    @pytest.mark.anyio
    async def test_malformed_message_is_a_failure(self, completion_config, history, httpx_mock):
        client = CompletionClient(completion_config, max_attempts=1)
        httpx_mock.add_response(
            url=URL, method="POST", json={"choices": [{"message": "not an object"}]}
        )

        with pytest.raises(CompletionFailure, match="No content in chat completion response"):
            await client.complete(history)

    @pytest.mark.anyio
    async def test_whitespace_content_retried(self, completion_config, history, httpx_mock):
        client = CompletionClient(completion_config, max_attempts=3)
        httpx_mock.add_response(url=URL, method="POST", json=completion_body("   \n\t"))
        httpx_mock.add_response(url=URL, method="POST", json=completion_body("Real answer"))
        recorder = Recorder()

        assert await client.complete(history, recorder) == "Real answer"
        assert recorder.events[1] == StatusEvent.retrying(
            attempt=1, max_attempts=3, error="No content in chat completion response"
        )

    @pytest.mark.anyio
    async def test_non_json_body_is_a_failure(self, completion_config, history, httpx_mock):
        client = CompletionClient(completion_config, max_attempts=1)
        httpx_mock.add_response(url=URL, method="POST", text="<html>oops</html>")

        with pytest.raises(CompletionFailure, match="Invalid JSON"):
            await client.complete(history)

    @pytest.mark.anyio
    async def test_attempt_timeout(self, completion_config, history):
        calls = 0

        async def handler(request: httpx.Request) -> httpx.Response:
            nonlocal calls
            calls += 1
            await asyncio.sleep(1)
            return httpx.Response(200, json=completion_body("too late"))

        http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        client = CompletionClient(completion_config, http_client, max_attempts=2, timeout=0.05)

        with pytest.raises(CompletionFailure) as exc_info:
            await client.complete(history)

        assert calls == 2
        assert exc_info.value.last_error == "Request timeout after 50ms"
        await http_client.aclose()

    @pytest.mark.anyio
    async def test_observer_failure_ignored(self, client, history, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=URL, method="POST", json=completion_body("Still fine"))

        async def broken_observer(event: StatusEvent) -> None:
            raise RuntimeError("observer down")

        assert await client.complete(history, broken_observer) == "Still fine"


class TestGenerateThreadName:
    @pytest.mark.anyio
    async def test_name_trimmed_and_truncated(self, client, httpx_mock: HTTPXMock):
        long_name = "  " + "Quantum computing basics " * 4 + "\n"
        httpx_mock.add_response(url=URL, method="POST", json=completion_body(long_name))

        name = await client.generate_thread_name("Explain quantum computing")

        assert name == long_name.strip()[:50]
        assert len(name) == 50
        body = json.loads(httpx_mock.get_request().content)
        assert body["messages"][0]["role"] == "system"
        assert "thread name" in body["messages"][0]["content"]
        assert body["messages"][1] == {"role": "user", "content": "Explain quantum computing"}

    @pytest.mark.anyio
    async def test_blank_name_falls_back(self, client, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=URL, method="POST", json=completion_body("   "))

        assert await client.generate_thread_name("hi") == "Chat"

    @pytest.mark.anyio
    async def test_failure_falls_back(self, completion_config, httpx_mock: HTTPXMock):
        client = CompletionClient(completion_config, max_attempts=1)
        httpx_mock.add_response(url=URL, method="POST", status_code=500)

        assert await client.generate_thread_name("hi") == "Chat"


class TestDefaultRetryBudget:
    @pytest.fixture
    def client(self, completion_config) -> CompletionClient:
        return CompletionClient(completion_config)

    @pytest.mark.anyio
    async def test_always_failing_backend(self, client, history, httpx_mock: HTTPXMock):
        for _ in range(MAX_ATTEMPTS):
            httpx_mock.add_response(url=URL, method="POST", status_code=500, text="down")
        recorder = Recorder()

        with pytest.raises(CompletionFailure) as exc_info:
            await client.complete(history, recorder)

        assert MAX_ATTEMPTS == 10
        assert exc_info.value.attempts == 10
        assert len(httpx_mock.get_requests()) == 10
        assert recorder.events[0] == StatusEvent.thinking()
        assert [event.type for event in recorder.events].count("thinking") == 1
        retries = recorder.events[1:]
        assert [event.type for event in retries] == ["retrying"] * 9
        assert [event.attempt for event in retries] == list(range(1, 10))
        assert all(event.max_attempts == 10 for event in retries)

    @pytest.mark.anyio
    async def test_fails_twice_then_succeeds(self, client, history, httpx_mock: HTTPXMock):
        httpx_mock.add_response(url=URL, method="POST", status_code=502, text="bad gateway")
        httpx_mock.add_exception(httpx.ReadError("connection reset"), url=URL)
        httpx_mock.add_response(url=URL, method="POST", json=completion_body("Third time lucky"))
        recorder = Recorder()

        reply = await client.complete(history, recorder)

        assert reply == "Third time lucky"
        assert len(httpx_mock.get_requests()) == 3
        retries = [event for event in recorder.events if event.type == "retrying"]
        assert [event.attempt for event in retries] == [1, 2]
        assert retries[1].error == "ReadError: connection reset"
