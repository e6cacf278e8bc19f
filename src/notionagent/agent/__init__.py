"""Conversation orchestration over the parsing, targeting and block layers."""

from .executor import ExecutionResult, Executor
from .orchestrator import ChatReply, Orchestrator, process_chat
from .sessions import InMemorySessionStore, SessionState, SessionStore, SqliteSessionStore

__all__ = [
    "ChatReply",
    "ExecutionResult",
    "Executor",
    "InMemorySessionStore",
    "Orchestrator",
    "SessionState",
    "SessionStore",
    "SqliteSessionStore",
    "process_chat",
]
