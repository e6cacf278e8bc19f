"""Shared bot handler context resolvers."""

from __future__ import annotations

from telegram import Update
from telegram.ext import ContextTypes

from notionagent.agent.orchestrator import Orchestrator


class ConfigError(RuntimeError):
    """Raised when required handler configuration is missing or invalid."""


UNAVAILABLE_MESSAGE = "The Notion assistant is temporarily unavailable. Please try again later."
UNKNOWN_SENDER_MESSAGE = "Could not identify the chat or user."


def _resolve_orchestrator(context: ContextTypes.DEFAULT_TYPE) -> Orchestrator:
    orchestrator = context.bot_data.get("orchestrator")
    if orchestrator is None:
        raise ConfigError("Orchestrator missing from context.bot_data['orchestrator']")
    if not isinstance(orchestrator, Orchestrator):
        raise ConfigError("context.bot_data['orchestrator'] must be an Orchestrator")
    return orchestrator


def _resolve_identity(update: Update) -> str | None:
    chat = getattr(update, "effective_chat", None)
    user = getattr(update, "effective_user", None)
    if chat is None or user is None:
        return None
    return f"{int(chat.id)}:{int(user.id)}"
