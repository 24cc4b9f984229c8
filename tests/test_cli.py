"""Tests for the command-line interface."""

from __future__ import annotations

import os
from unittest.mock import MagicMock

import pytest

from discord_llm_bot.cli import build_parser, main

CONFIG_YAML = """
discord:
  token: bot-token
  application_id: "999"
completion:
  endpoint_url: https://llm.example.com
  api_key: sk-secret
"""


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    monkeypatch.chdir(tmp_path)
    for key in list(os.environ):
        if key.upper().startswith("LLM_BOT_"):
            monkeypatch.delenv(key)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(CONFIG_YAML, encoding="utf-8")
    return path


class FakeBot:
    """Stands in for DiscordLLMBot in command handlers."""

    instances: list[FakeBot] = []

    def __init__(self, config) -> None:
        self.config = config
        self.closed = False
        FakeBot.instances.append(self)

    async def register_commands(self):
        return [{"id": "1", "name": "chat"}]

    async def aclose(self) -> None:
        self.closed = True


def test_no_command_prints_help():
    with pytest.raises(SystemExit) as exc_info:
        main([])

    assert exc_info.value.code == 0


def test_parser_commands():
    parser = build_parser()

    args = parser.parse_args(["start", "-c", "bot.yaml", "--port", "9000", "--debug"])

    assert args.command == "start"
    assert args.config == "bot.yaml"
    assert args.port == 9000
    assert args.debug is True


class TestCheckConfig:
    def test_valid(self, config_file, capsys):
        assert main(["check-config", "-c", str(config_file)]) == 0

        output = capsys.readouterr().out
        assert "Configuration is valid" in output
        assert "sk-secret" not in output

    def test_missing_file(self, tmp_path):
        assert main(["check-config", "-c", str(tmp_path / "nope.yaml")]) == 1

    def test_missing_required_settings(self):
        assert main(["check-config"]) == 1

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("LLM_BOT_DISCORD__TOKEN", "t")
        monkeypatch.setenv("LLM_BOT_DISCORD__APPLICATION_ID", "1")
        monkeypatch.setenv("LLM_BOT_COMPLETION__ENDPOINT_URL", "http://localhost:11434")

        assert main(["check-config"]) == 0


class TestRegisterCommands:
    def test_registers_and_closes(self, config_file, monkeypatch):
        FakeBot.instances = []
        monkeypatch.setattr("discord_llm_bot.cli.commands.DiscordLLMBot", FakeBot)

        assert main(["register-commands", "-c", str(config_file)]) == 0

        assert len(FakeBot.instances) == 1
        assert FakeBot.instances[0].closed is True

    def test_failure_exit_code(self, config_file, monkeypatch):
        class BrokenBot(FakeBot):
            async def register_commands(self):
                raise RuntimeError("401 Unauthorized")

        monkeypatch.setattr("discord_llm_bot.cli.commands.DiscordLLMBot", BrokenBot)

        assert main(["register-commands", "-c", str(config_file)]) == 1


class TestStart:
    def test_start_applies_overrides(self, config_file, monkeypatch):
        bot_cls = MagicMock()
        monkeypatch.setattr("discord_llm_bot.cli.commands.DiscordLLMBot", bot_cls)

        code = main(["start", "-c", str(config_file), "--port", "9000", "--debug"])

        assert code == 0
        config = bot_cls.call_args.args[0]
        assert config.event_server.port == 9000
        assert config.logging.level == "DEBUG"
        bot_cls.return_value.start.assert_called_once()

    def test_start_failure(self, config_file, monkeypatch):
        bot_cls = MagicMock()
        bot_cls.return_value.start.side_effect = RuntimeError("port in use")
        monkeypatch.setattr("discord_llm_bot.cli.commands.DiscordLLMBot", bot_cls)

        assert main(["start", "-c", str(config_file)]) == 1

    def test_start_invalid_config(self, tmp_path):
        assert main(["start", "-c", str(tmp_path / "missing.yaml")]) == 1
