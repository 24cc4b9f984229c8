"""Configuration management for Discord LLM Bot.

This module provides configuration models and loading functionality using Pydantic
for validation and type safety. Settings come from environment variables
(prefix ``LLM_BOT_``, nested with ``__``), an optional ``.env`` file and an
optional YAML file.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_DOTENV_LOADED = False

DEFAULT_SYSTEM_PROMPT = (
    "Be concise, conversational, and friendly, responding in at most a couple of sentences."
)

# Discord only accepts these auto-archive durations (minutes)
_ARCHIVE_DURATIONS = (60, 1440, 4320, 10080)


def _load_env_once() -> None:
    """Load environment variables from a .env file exactly once."""

    global _DOTENV_LOADED
    if not _DOTENV_LOADED:
        load_dotenv()
        _DOTENV_LOADED = True


def _expand_env_vars(data: Any) -> Any:
    """Recursively expand environment variables in configuration data."""

    if isinstance(data, str):
        return os.path.expandvars(data)
    if isinstance(data, dict):
        return {key: _expand_env_vars(value) for key, value in data.items()}
    if isinstance(data, list):
        return [_expand_env_vars(item) for item in data]
    return data


class DiscordConfig(BaseModel):
    """Credentials and transport settings for the Discord REST API."""

    token: str = Field(..., min_length=1, description="Bot token")
    application_id: str = Field(
        ..., min_length=1, description="Application (client) ID, also the bot user ID"
    )
    public_key: str | None = Field(
        default=None,
        description="Hex Ed25519 public key used to verify interaction requests",
    )
    api_base_url: str = Field(
        default="https://discord.com/api/v10", description="Discord REST API base URL"
    )
    timeout: float = Field(default=10.0, gt=0.0, description="Request timeout in seconds")

    @field_validator("api_base_url")
    @classmethod
    def strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


class CompletionConfig(BaseModel):
    """Settings for the OpenAI-compatible chat completion backend."""

    endpoint_url: str = Field(..., min_length=1, description="Backend base URL")
    api_key: str = Field(default="", description="Bearer token, empty to send none")
    model: str = Field(default="gpt-3.5-turbo", description="Model name")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=1000, gt=0, description="Maximum output tokens")
    system_prompt: str = Field(
        default=DEFAULT_SYSTEM_PROMPT,
        description="System directive prepended to every conversation",
    )

    @field_validator("endpoint_url")
    @classmethod
    def validate_url(cls, value: str) -> str:
        value = value.strip().rstrip("/")
        if not value.startswith(("http://", "https://")):
            raise ValueError(f"Completion endpoint must be an http(s) URL, got: {value}")
        return value


class ChatConfig(BaseModel):
    """Configuration for conversation behaviour inside threads."""

    history_limit: int = Field(
        default=50, ge=1, le=100, description="Messages fetched to rebuild history"
    )
    max_message_length: int = Field(
        default=2000, ge=1, description="Platform per-message character limit"
    )
    thinking_message: str = Field(
        default="_Thinking..._", description="Interim indicator posted while waiting"
    )
    error_message: str = Field(
        default=(
            "Sorry, I encountered an error while processing your message. "
            "Please try again later."
        ),
        description="Generic notice posted when a reply cannot be produced",
    )
    auto_name_threads: bool = Field(
        default=True, description="Rename the thread after the first user message"
    )
    auto_archive_duration: int = Field(
        default=60, description="Thread auto-archive duration in minutes"
    )

    @field_validator("auto_archive_duration")
    @classmethod
    def validate_archive_duration(cls, value: int) -> int:
        if value not in _ARCHIVE_DURATIONS:
            raise ValueError(
                f"auto_archive_duration must be one of {_ARCHIVE_DURATIONS}, got: {value}"
            )
        return value


class EventServerConfig(BaseModel):
    """Inbound HTTP server receiving interactions and relayed gateway events."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8000, ge=1, le=65535, description="Bind port")
    relay_token: str | None = Field(
        default=None,
        description="Bearer token for /gateway/events; relayed events are refused when unset",
    )


class LoggingConfig(BaseModel):
    """Configuration for logging."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Log format",
    )
    log_file: str | None = Field(default=None, description="Log file path")
    max_bytes: int = Field(default=10485760, description="Max log file size (10MB)")
    backup_count: int = Field(default=5, description="Number of backup files")

    @field_validator("level")
    @classmethod
    def normalise_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level


class BotConfig(BaseSettings):
    """Main configuration for the Discord LLM Bot."""

    model_config = SettingsConfigDict(
        env_prefix="LLM_BOT_",
        env_nested_delimiter="__",
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    discord: DiscordConfig = Field(..., description="Discord API settings")
    completion: CompletionConfig = Field(..., description="Completion backend settings")
    chat: ChatConfig = Field(default_factory=ChatConfig, description="Conversation settings")
    event_server: EventServerConfig = Field(
        default_factory=EventServerConfig, description="Inbound event server settings"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )

    @classmethod
    def load(cls, path: str | Path | None = None) -> BotConfig:
        """Load configuration from a YAML file when given, else from the environment."""

        if path is not None:
            return cls.from_yaml(path)
        _load_env_once()
        return cls()

    @classmethod
    def from_yaml(cls, path: str | Path) -> BotConfig:
        """Load configuration from a YAML file."""

        _load_env_once()
        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path, encoding="utf-8") as handle:
            try:
                config_data = yaml.safe_load(handle)
            except yaml.YAMLError as exc:
                raise ValueError(f"Invalid YAML in config file: {exc}") from exc

        if not config_data:
            config_data = {}

        config_data = _expand_env_vars(config_data)
        return cls(**config_data)

    def summary(self) -> dict[str, Any]:
        """Return the non-secret settings worth logging at startup."""

        return {
            "Discord Application ID": self.discord.application_id,
            "Chat Endpoint": self.completion.endpoint_url,
            "Chat Model": self.completion.model,
            "Temperature": self.completion.temperature,
            "Max Tokens": self.completion.max_tokens,
            "History Limit": self.chat.history_limit,
            "API Key": "set" if self.completion.api_key else "not set",
        }
