"""Smoke tests for bot application bootstrap and handler registration."""

from __future__ import annotations

import asyncio
from pathlib import Path
import sqlite3

import pytest
from telegram.ext import Application, CommandHandler, MessageHandler

from notionagent.agent.orchestrator import Orchestrator
from notionagent.agent.sessions import SqliteSessionStore
from notionagent.bot.config import BotSettings
from notionagent.bot.main import build_application, close_resources


@pytest.fixture
def mock_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> BotSettings:
    """Minimal valid settings for application bootstrap."""
    monkeypatch.setenv("NOTION_API_TOKEN", "secret_test")
    monkeypatch.delenv("OPENROUTER_API_KEY", raising=False)
    return BotSettings(
        token="test_bot_token_12345",
        db_path=tmp_path / "sessions.db",
        session_ttl_seconds=600,
        use_llm=False,
    )


def test_build_application_registers_commands_and_text_handler(mock_settings: BotSettings) -> None:
    """Verify application registers the four commands and one text handler."""
    app = build_application(mock_settings)

    assert isinstance(app, Application)
    handlers = app.handlers[0]

    cmd_handlers = [h for h in handlers if isinstance(h, CommandHandler)]
    assert sorted(command for h in cmd_handlers for command in h.commands) == ["cancel", "debug", "help", "start"]

    text_handlers = [h for h in handlers if isinstance(h, MessageHandler)]
    assert len(text_handlers) == 1, "Expected exactly one MessageHandler for plain requests"

    asyncio.run(close_resources(app))


def test_build_application_stores_dependencies_in_bot_data(mock_settings: BotSettings) -> None:
    """Verify bot_data holds the session store and the orchestrator sharing it."""
    app = build_application(mock_settings)

    sessions = app.bot_data["sessions"]
    orchestrator = app.bot_data["orchestrator"]
    assert isinstance(sessions, SqliteSessionStore)
    assert isinstance(orchestrator, Orchestrator)
    assert orchestrator.sessions is sessions
    assert mock_settings.db_path.exists()

    asyncio.run(close_resources(app))


def test_build_application_uses_provided_token(mock_settings: BotSettings) -> None:
    app = build_application(mock_settings)

    assert app.bot.token == mock_settings.token

    asyncio.run(close_resources(app))


def test_shutdown_hook_closes_store_client_and_sessions(mock_settings: BotSettings) -> None:
    app = build_application(mock_settings)
    store = app.bot_data["store"]
    sessions = app.bot_data["sessions"]

    assert app.post_shutdown is close_resources

    asyncio.run(close_resources(app))

    assert store._client.is_closed
    with pytest.raises(sqlite3.ProgrammingError):
        sessions.get("10:123")


def test_build_application_fails_without_store_token(mock_settings: BotSettings, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("NOTION_API_TOKEN")

    with pytest.raises(ValueError, match="NOTION_API_TOKEN"):
        build_application(mock_settings)


def test_bot_settings_from_env_fails_fast_on_missing_token() -> None:
    with pytest.raises(ValueError, match="Missing required bot environment variables: TELEGRAM_BOT_TOKEN"):
        BotSettings.from_env({})


def test_bot_settings_from_env_fails_fast_on_empty_token() -> None:
    with pytest.raises(ValueError, match="TELEGRAM_BOT_TOKEN"):
        BotSettings.from_env({"TELEGRAM_BOT_TOKEN": "   "})


def test_bot_settings_from_env_uses_defaults_for_optional_config() -> None:
    settings = BotSettings.from_env({"TELEGRAM_BOT_TOKEN": "valid_token_123"})

    assert settings.token == "valid_token_123"
    assert settings.db_path == Path(".notionagent-sessions.db")
    assert settings.session_ttl_seconds == 1800
    assert settings.use_llm is False


def test_bot_settings_from_env_parses_custom_config_values() -> None:
    settings = BotSettings.from_env(
        {
            "TELEGRAM_BOT_TOKEN": "custom_token",
            "NOTIONAGENT_DB_PATH": "custom.db",
            "NOTIONAGENT_SESSION_TTL_SECONDS": "90",
            "NOTIONAGENT_USE_LLM": "Yes",
        }
    )

    assert settings.db_path == Path("custom.db")
    assert settings.session_ttl_seconds == 90
    assert settings.use_llm is True


def test_bot_settings_from_env_rejects_invalid_numeric_values() -> None:
    with pytest.raises(ValueError, match="must be >="):
        BotSettings.from_env({"TELEGRAM_BOT_TOKEN": "token", "NOTIONAGENT_SESSION_TTL_SECONDS": "0"})

    with pytest.raises(ValueError):
        BotSettings.from_env({"TELEGRAM_BOT_TOKEN": "token", "NOTIONAGENT_SESSION_TTL_SECONDS": "soon"})
