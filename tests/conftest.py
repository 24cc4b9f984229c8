"""Test configuration hooks."""

from __future__ import annotations

import pytest

from discord_llm_bot.core.config import ChatConfig, CompletionConfig, DiscordConfig

from tests.mocks import InMemoryThreadProvider


# Configure anyio to only use asyncio backend (skip trio tests)
@pytest.fixture(scope="session")
def anyio_backend():
    """Configure anyio to use only asyncio backend."""
    return "asyncio"


@pytest.fixture
def discord_config() -> DiscordConfig:
    return DiscordConfig(token="bot-token", application_id="999")


@pytest.fixture
def completion_config() -> CompletionConfig:
    return CompletionConfig(endpoint_url="https://llm.example.com", api_key="sk-test")


@pytest.fixture
def chat_config() -> ChatConfig:
    return ChatConfig()


@pytest.fixture
def provider() -> InMemoryThreadProvider:
    return InMemoryThreadProvider()
