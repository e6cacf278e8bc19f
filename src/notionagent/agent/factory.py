"""Wire the orchestrator from settings for the bot and the CLI."""

from __future__ import annotations

import logging
import os
from typing import Mapping

from notionagent.agent.executor import DocumentStore, Executor
from notionagent.agent.orchestrator import Orchestrator
from notionagent.agent.sessions import SessionStore
from notionagent.llm.config import LlmSettings
from notionagent.llm.format_agent import FormatAgent
from notionagent.llm.openrouter import CompletionClient
from notionagent.parsing.strategies import CommandParser, LlmParseStrategy, ParseStrategy, RuleParseStrategy
from notionagent.store.config import StoreSettings
from notionagent.store.notion import NotionStore


logger = logging.getLogger(__name__)


def build_orchestrator(
    store: DocumentStore,
    *,
    completion: CompletionClient | None = None,
    sessions: SessionStore | None = None,
) -> Orchestrator:
    strategies: list[ParseStrategy] = []
    if completion is not None:
        strategies.append(LlmParseStrategy(completion))
    strategies.append(RuleParseStrategy())

    executor = Executor(store, format_agent=FormatAgent(completion))
    return Orchestrator(CommandParser(strategies), executor, sessions)


def completion_from_env(environ: Mapping[str, str] | None = None) -> CompletionClient | None:
    try:
        settings = LlmSettings.from_env(environ)
    except ValueError as exc:
        logger.info("Completion collaborator disabled, running rule-based only: %s", exc)
        return None
    return CompletionClient(settings)


def build_orchestrator_from_env(
    environ: Mapping[str, str] | None = None,
    *,
    use_llm: bool = False,
    sessions: SessionStore | None = None,
) -> Orchestrator:
    """Raises ValueError when the store settings are missing or invalid."""
    source = os.environ if environ is None else environ
    store = NotionStore(StoreSettings.from_env(source))
    completion = completion_from_env(source) if use_llm else None
    return build_orchestrator(store, completion=completion, sessions=sessions)
