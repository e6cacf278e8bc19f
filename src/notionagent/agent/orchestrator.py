"""Conversation turn handling: confirmation gate, action queue and error mapping."""

from __future__ import annotations

from dataclasses import dataclass
import json
import logging
from typing import Any

from notionagent.agent.executor import Executor, ExecutionResult
from notionagent.agent.intent import (
    CANCELLED_MESSAGE,
    CONFIRMATION_PROMPT,
    is_affirmative,
    is_continuation,
    is_destructive,
    is_negative,
)
from notionagent.agent.sessions import InMemorySessionStore, SessionState, SessionStore
from notionagent.llm.openrouter import CompletionRequestError
from notionagent.parsing.descriptors import Action, ActionDescriptor
from notionagent.parsing.strategies import CommandParser
from notionagent.store.errors import (
    NotFoundError,
    RateLimitedError,
    StoreError,
    UnauthorizedError,
    ValidationError,
)


logger = logging.getLogger(__name__)

EMPTY_INPUT_MESSAGE = "Please tell me what to do in Notion."


@dataclass(frozen=True, slots=True)
class ChatReply:
    content: str
    require_confirm: bool = False


def format_error(exc: Exception) -> str:
    if isinstance(exc, UnauthorizedError):
        return (
            "Error: Your Notion integration lacks permission to access this content. "
            "Make sure your integration is granted access to the page."
        )
    if isinstance(exc, NotFoundError):
        return (
            "Error: The page or content you're looking for wasn't found. "
            "Please verify the page exists and your integration has access to it."
        )
    if isinstance(exc, RateLimitedError):
        return "Error: Notion API rate limit reached. Please try again in a few moments."
    if isinstance(exc, ValidationError):
        return f"Error: Your request contains invalid data: {exc.message}"
    if isinstance(exc, StoreError):
        return f"Error: {exc.message}"
    return f"Error: {exc}"


def _queue_note(remaining: int) -> str:
    noun = "action" if remaining == 1 else "actions"
    return f"\n\n{remaining} more {noun} queued. Reply 'continue' to run the next one."


class Orchestrator:
    """Drive one conversation turn; never raises for store, completion or parsing failures."""

    def __init__(
        self,
        parser: CommandParser,
        executor: Executor,
        sessions: SessionStore | None = None,
    ) -> None:
        self._parser = parser
        self._executor = executor
        self._sessions = sessions or InMemorySessionStore()

    @property
    def sessions(self) -> SessionStore:
        return self._sessions

    def chat(self, identity: str, text: str, *, confirm: bool = False) -> ChatReply:
        message = (text or "").strip()
        if not message:
            return ChatReply(content=EMPTY_INPUT_MESSAGE)

        state = self._sessions.get(identity) or SessionState()

        if state.require_confirm and state.pending_action:
            if is_negative(message):
                self._sessions.evict(identity)
                return ChatReply(content=CANCELLED_MESSAGE)
            if confirm or is_affirmative(message):
                pending = state.pending_action
                state.clear_confirmation()
                return self._run_input(identity, state, pending)

        if state.remaining_commands and is_continuation(message):
            return self._run_next(identity, state)

        if is_negative(message) and state.remaining_commands:
            self._sessions.evict(identity)
            return ChatReply(content=CANCELLED_MESSAGE)

        if is_destructive(message) and not confirm:
            state.pending_action = message
            state.require_confirm = True
            state.remaining_commands = []
            self._sessions.put(identity, state)
            return ChatReply(content=CONFIRMATION_PROMPT, require_confirm=True)

        state.clear_confirmation()
        return self._run_input(identity, state, message)

    def _run_input(self, identity: str, state: SessionState, text: str) -> ChatReply:
        try:
            descriptors = self._parser.parse(text)
        except Exception as exc:
            logger.exception("Failed to parse %r", text)
            self._sessions.put(identity, state)
            return ChatReply(content=format_error(exc))

        first, rest = descriptors[0], list(descriptors[1:])
        if first.action is Action.UNKNOWN and not first.content:
            first = ActionDescriptor(action=Action.UNKNOWN, content=text)
        # A single non-destructive request (read, debug, help) leaves an existing queue in place.
        if rest or is_destructive(text):
            state.remaining_commands = rest
        return self._finish(identity, state, self._execute(first))

    def _run_next(self, identity: str, state: SessionState) -> ChatReply:
        result = self._execute(state.remaining_commands[0])
        if not result.retryable:
            state.remaining_commands.pop(0)
        return self._finish(identity, state, result)

    def _finish(self, identity: str, state: SessionState, result: ExecutionResult) -> ChatReply:
        content = result.message
        if state.remaining_commands:
            content += _queue_note(len(state.remaining_commands))
        self._sessions.put(identity, state)
        return ChatReply(content=content)

    def _execute(self, descriptor: ActionDescriptor) -> ExecutionResult:
        if descriptor.action is Action.DEBUG:
            return ExecutionResult(success=True, message=self.debug_report())
        try:
            result = self._executor.execute(descriptor)
        except (StoreError, CompletionRequestError) as exc:
            logger.exception("Action %s failed", descriptor.action.value)
            return ExecutionResult(success=False, message=format_error(exc), retryable=True)
        except Exception as exc:
            logger.exception("Unexpected failure while running %s", descriptor.action.value)
            return ExecutionResult(success=False, message=format_error(exc), retryable=True)
        if not result.success:
            logger.info("Action %s did not complete: %s", descriptor.action.value, result.message)
        return result

    def debug_report(self) -> str:
        report: dict[str, Any] = {"parseStrategies": self._parser.strategy_names, **self._executor.describe()}
        return json.dumps(report, indent=2)


def process_chat(orchestrator: Orchestrator, identity: str, text: str, confirm: bool = False) -> dict[str, Any]:
    """Request/response shape of the inbound surface."""
    reply = orchestrator.chat(identity, text, confirm=confirm)
    return {"response": reply.content, "requireConfirm": reply.require_confirm}
