"""Per-conversation confirmation state and the stores that keep it."""

from __future__ import annotations

from dataclasses import dataclass, field
import json
from pathlib import Path
import sqlite3
import threading
import time
from typing import Any, Callable, Protocol

from notionagent.parsing.descriptors import ActionDescriptor


DEFAULT_SESSION_TTL_SECONDS = 1800.0


@dataclass(slots=True)
class SessionState:
    pending_action: str | None = None
    require_confirm: bool = False
    remaining_commands: list[ActionDescriptor] = field(default_factory=list)

    def clear_confirmation(self) -> None:
        self.pending_action = None
        self.require_confirm = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "pendingAction": self.pending_action,
            "requireConfirm": self.require_confirm,
            "remainingCommands": [descriptor.to_dict() for descriptor in self.remaining_commands],
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SessionState":
        commands = data.get("remainingCommands") or []
        return cls(
            pending_action=data.get("pendingAction"),
            require_confirm=bool(data.get("requireConfirm")),
            remaining_commands=[ActionDescriptor.from_mapping(item) for item in commands if isinstance(item, dict)],
        )


class SessionStore(Protocol):
    def get(self, identity: str) -> SessionState | None: ...

    def put(self, identity: str, state: SessionState) -> None: ...

    def evict(self, identity: str) -> None: ...


def _validate_ttl(ttl_seconds: float | None) -> float | None:
    if ttl_seconds is not None and ttl_seconds <= 0:
        raise ValueError("ttl_seconds must be positive")
    return ttl_seconds


class InMemorySessionStore:
    """Session map with inactivity expiry checked on read; `ttl_seconds=None` never expires."""

    def __init__(
        self,
        ttl_seconds: float | None = DEFAULT_SESSION_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._ttl_seconds = _validate_ttl(ttl_seconds)
        self._clock = clock
        self._sessions: dict[str, tuple[float, SessionState]] = {}
        self._lock = threading.Lock()

    def get(self, identity: str) -> SessionState | None:
        with self._lock:
            entry = self._sessions.get(identity)
            if entry is None:
                return None
            touched_at, state = entry
            if self._ttl_seconds is not None and self._clock() - touched_at > self._ttl_seconds:
                del self._sessions[identity]
                return None
            return state

    def put(self, identity: str, state: SessionState) -> None:
        with self._lock:
            self._sessions[identity] = (self._clock(), state)

    def evict(self, identity: str) -> None:
        with self._lock:
            self._sessions.pop(identity, None)


class SqliteSessionStore:
    """SQLite-backed session store with the same expiry rules as the in-memory one."""

    def __init__(
        self,
        db_path: str | Path,
        ttl_seconds: float | None = DEFAULT_SESSION_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._db_path = Path(db_path)
        self._ttl_seconds = _validate_ttl(ttl_seconds)
        self._clock = clock
        self._lock = threading.Lock()
        # Handlers hand the orchestrator to worker threads.
        self._connection = sqlite3.connect(str(self._db_path), check_same_thread=False)
        self._connection.row_factory = sqlite3.Row
        self._ensure_schema()

    def _ensure_schema(self) -> None:
        self._connection.executescript(
            """
            CREATE TABLE IF NOT EXISTS sessions (
                identity TEXT PRIMARY KEY,
                state TEXT NOT NULL,
                updated_at REAL NOT NULL
            );
            """
        )

    @property
    def connection(self) -> sqlite3.Connection:
        return self._connection

    def close(self) -> None:
        self._connection.close()

    def __enter__(self) -> "SqliteSessionStore":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def get(self, identity: str) -> SessionState | None:
        with self._lock:
            row = self._connection.execute(
                "SELECT state, updated_at FROM sessions WHERE identity = ?",
                (identity,),
            ).fetchone()
            if row is None:
                return None
            if self._ttl_seconds is not None and self._clock() - float(row["updated_at"]) > self._ttl_seconds:
                with self._connection:
                    self._connection.execute("DELETE FROM sessions WHERE identity = ?", (identity,))
                return None
        return SessionState.from_dict(json.loads(row["state"]))

    def put(self, identity: str, state: SessionState) -> None:
        payload = json.dumps(state.to_dict(), ensure_ascii=False)
        with self._lock, self._connection:
            self._connection.execute(
                """
                INSERT INTO sessions (identity, state, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(identity) DO UPDATE SET
                    state = excluded.state,
                    updated_at = excluded.updated_at
                """,
                (identity, payload, self._clock()),
            )

    def evict(self, identity: str) -> None:
        with self._lock, self._connection:
            self._connection.execute("DELETE FROM sessions WHERE identity = ?", (identity,))
