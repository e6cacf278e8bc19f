"""Production Telegram bot entrypoint with handler registration and polling."""

from __future__ import annotations

import asyncio
import logging
import sys

from dotenv import load_dotenv
from telegram.ext import Application

load_dotenv()

from notionagent.agent.factory import build_orchestrator, completion_from_env
from notionagent.agent.sessions import SqliteSessionStore
from notionagent.bot.config import BotSettings
from notionagent.bot.handlers.commands import build_command_handlers, build_message_handler
from notionagent.store.config import StoreSettings
from notionagent.store.notion import NotionStore


logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)
logger = logging.getLogger(__name__)


def build_application(settings: BotSettings) -> Application:
    """Build PTB Application with all handlers registered."""
    store = NotionStore(StoreSettings.from_env())
    completion = completion_from_env() if settings.use_llm else None
    sessions = SqliteSessionStore(settings.db_path, ttl_seconds=settings.session_ttl_seconds)
    orchestrator = build_orchestrator(store, completion=completion, sessions=sessions)

    application = Application.builder().token(settings.token).post_shutdown(close_resources).build()

    # Store shared dependencies in bot_data
    application.bot_data["store"] = store
    application.bot_data["sessions"] = sessions
    application.bot_data["orchestrator"] = orchestrator

    # Commands first so the text handler never sees them
    for handler in build_command_handlers():
        application.add_handler(handler)
    application.add_handler(build_message_handler())

    logger.info("Registered all handlers: commands, text requests")
    return application


async def close_resources(application: Application) -> None:
    """Close the Notion HTTP client and the session database."""
    store = application.bot_data.get("store")
    if isinstance(store, NotionStore):
        store.close()
    sessions = application.bot_data.get("sessions")
    if isinstance(sessions, SqliteSessionStore):
        sessions.close()


async def run_bot(settings: BotSettings) -> None:
    """Run bot with polling and graceful shutdown."""
    application = build_application(settings)

    await application.initialize()
    logger.info("Bot initialized. Starting polling...")

    await application.start()
    updater = application.updater
    if updater is None:
        raise RuntimeError("Bot updater is not initialized")

    await updater.start_polling(allowed_updates=["message"])
    logger.info("Bot polling started. Press Ctrl+C to stop.")

    try:
        await asyncio.Event().wait()
    except (KeyboardInterrupt, SystemExit):
        logger.info("Received stop signal. Shutting down...")

    await updater.stop()
    await application.stop()
    await application.shutdown()
    # post_shutdown only runs under run_polling/run_webhook
    await close_resources(application)

    logger.info("Bot stopped cleanly.")


def main() -> None:
    """Main entrypoint for Telegram bot."""
    try:
        settings = BotSettings.from_env()
        logger.info(
            "Loaded bot config: db=%s, session_ttl=%ss, llm=%s",
            settings.db_path,
            settings.session_ttl_seconds,
            settings.use_llm,
        )
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)

    try:
        asyncio.run(run_bot(settings))
    except ValueError as e:
        logger.error("Configuration error: %s", e)
        sys.exit(1)
    except KeyboardInterrupt:
        logger.info("Bot interrupted by user.")
        sys.exit(0)


if __name__ == "__main__":
    main()
