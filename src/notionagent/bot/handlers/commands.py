"""Command handlers for /start, /help, /cancel and /debug, plus the plain-text request handler."""

from __future__ import annotations

import asyncio
import logging

from telegram import Update
from telegram.ext import BaseHandler, CommandHandler, ContextTypes, MessageHandler, filters

from notionagent.agent.intent import CANCELLED_MESSAGE
from notionagent.bot.handlers.common import (
    UNAVAILABLE_MESSAGE,
    UNKNOWN_SENDER_MESSAGE,
    ConfigError,
    _resolve_identity,
    _resolve_orchestrator,
)

logger = logging.getLogger(__name__)

MAX_MESSAGE_LENGTH = 4096

START_TEXT = (
    "Hi! I edit your Notion workspace from plain sentences.\n\n"
    "Examples:\n"
    "• add buy milk as todo in Tasks page\n"
    "• write \"Meeting notes for today\" in the Journal page\n"
    "• add item one, item two, item three in checklist in Daily Tasks\n"
    "• create a page called Project Ideas\n"
    "• read the Journal page\n\n"
    "Changes ask for confirmation first: reply 'yes' or 'no'.\n"
    "Use /help for details."
)

HELP_TEXT = (
    "Commands:\n\n"
    "/start - greeting and examples\n"
    "/help - this message\n"
    "/cancel - drop the pending confirmation and queued actions\n"
    "/debug - show which services are configured\n\n"
    "Anything else you type is treated as a request.\n"
    "• Name the page: \"... in the Tasks page\"\n"
    "• Name a section: \"... in the Today section of Tasks\"\n"
    "• Pick a format: \"as todo\", \"as bullet\", \"in a toggle\", \"as code\"\n"
    "• Several actions: \"add X then add Y\"; reply 'continue' to run queued ones."
)


def _fit_message(text: str) -> str:
    if len(text) <= MAX_MESSAGE_LENGTH:
        return text
    return text[: MAX_MESSAGE_LENGTH - 1] + "…"


async def start_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /start command with usage examples."""
    del context
    if update.message is None:
        return
    await update.message.reply_text(START_TEXT)


async def help_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /help command with request syntax guidance."""
    del context
    if update.message is None:
        return
    await update.message.reply_text(HELP_TEXT)


async def cancel_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /cancel by evicting the sender's session."""
    if update.message is None:
        return

    identity = _resolve_identity(update)
    if identity is None:
        await update.message.reply_text(UNKNOWN_SENDER_MESSAGE)
        return

    try:
        orchestrator = _resolve_orchestrator(context)
    except ConfigError as error:
        logger.error("/cancel failed due to configuration error: %s", error)
        await update.message.reply_text(UNAVAILABLE_MESSAGE)
        return

    orchestrator.sessions.evict(identity)
    await update.message.reply_text(CANCELLED_MESSAGE)


async def debug_command(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Handle /debug with the orchestrator's configuration report."""
    if update.message is None:
        return

    try:
        orchestrator = _resolve_orchestrator(context)
    except ConfigError as error:
        logger.error("/debug failed due to configuration error: %s", error)
        await update.message.reply_text(UNAVAILABLE_MESSAGE)
        return

    await update.message.reply_text(orchestrator.debug_report())


async def handle_request(update: Update, context: ContextTypes.DEFAULT_TYPE) -> None:
    """Feed a plain-text message to the orchestrator and reply with its answer."""
    message = update.message
    if message is None or not message.text:
        return

    identity = _resolve_identity(update)
    if identity is None:
        await message.reply_text(UNKNOWN_SENDER_MESSAGE)
        return

    try:
        orchestrator = _resolve_orchestrator(context)
    except ConfigError as error:
        logger.error("Request failed due to configuration error: %s", error)
        await message.reply_text(UNAVAILABLE_MESSAGE)
        return

    # Store and completion calls block, keep them off the event loop.
    reply = await asyncio.to_thread(orchestrator.chat, identity, message.text)
    await message.reply_text(_fit_message(reply.content))


def build_command_handlers() -> list[CommandHandler]:
    """Create command handlers for registration in Application."""
    return [
        CommandHandler("start", start_command),
        CommandHandler("help", help_command),
        CommandHandler("cancel", cancel_command),
        CommandHandler("debug", debug_command),
    ]


def build_message_handler() -> BaseHandler:
    return MessageHandler(filters.TEXT & ~filters.COMMAND, handle_request)
