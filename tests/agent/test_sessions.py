from __future__ import annotations

from pathlib import Path

import pytest

from notionagent.agent.sessions import InMemorySessionStore, SessionState, SqliteSessionStore
from notionagent.parsing.descriptors import Action, ActionDescriptor


class _Clock:
    def __init__(self, now: float = 1000.0) -> None:
        self.now = now

    def __call__(self) -> float:
        return self.now


def _state() -> SessionState:
    return SessionState(
        pending_action="add eggs to Groceries",
        require_confirm=True,
        remaining_commands=[
            ActionDescriptor(action=Action.WRITE, primary_target="Groceries", content="milk", is_multi_action=True)
        ],
    )


def test_session_state_round_trips_through_dict() -> None:
    state = _state()

    restored = SessionState.from_dict(state.to_dict())

    assert restored == state
    assert state.to_dict()["pendingAction"] == "add eggs to Groceries"


def test_clear_confirmation_keeps_queue() -> None:
    state = _state()

    state.clear_confirmation()

    assert state.pending_action is None
    assert state.require_confirm is False
    assert len(state.remaining_commands) == 1


def test_memory_store_expires_after_inactivity() -> None:
    clock = _Clock()
    store = InMemorySessionStore(ttl_seconds=60, clock=clock)
    store.put("chat:1", _state())

    clock.now += 59
    assert store.get("chat:1") is not None

    clock.now += 61
    assert store.get("chat:1") is None


def test_memory_store_without_ttl_never_expires() -> None:
    clock = _Clock()
    store = InMemorySessionStore(ttl_seconds=None, clock=clock)
    store.put("chat:1", _state())

    clock.now += 10**9

    assert store.get("chat:1") is not None


def test_memory_store_evict() -> None:
    store = InMemorySessionStore()
    store.put("chat:1", _state())

    store.evict("chat:1")
    store.evict("chat:unknown")

    assert store.get("chat:1") is None


@pytest.mark.parametrize("ttl", [0, -5])
def test_stores_reject_non_positive_ttl(ttl: float, tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="ttl_seconds must be positive"):
        InMemorySessionStore(ttl_seconds=ttl)
    with pytest.raises(ValueError, match="ttl_seconds must be positive"):
        SqliteSessionStore(tmp_path / "sessions.sqlite3", ttl_seconds=ttl)


def test_sqlite_store_persists_across_connections(tmp_path: Path) -> None:
    db_path = tmp_path / "sessions.sqlite3"
    clock = _Clock()

    with SqliteSessionStore(db_path, clock=clock) as store:
        store.put("cli", _state())

    with SqliteSessionStore(db_path, clock=clock) as store:
        restored = store.get("cli")

    assert restored == _state()


def test_sqlite_store_upserts_and_expires(tmp_path: Path) -> None:
    clock = _Clock()
    with SqliteSessionStore(tmp_path / "sessions.sqlite3", ttl_seconds=30, clock=clock) as store:
        store.put("cli", _state())
        store.put("cli", SessionState())

        assert store.get("cli") == SessionState()
        count = store.connection.execute("SELECT COUNT(*) FROM sessions").fetchone()[0]
        assert count == 1

        clock.now += 31
        assert store.get("cli") is None
        assert store.connection.execute("SELECT COUNT(*) FROM sessions").fetchone()[0] == 0


def test_sqlite_store_evict(tmp_path: Path) -> None:
    with SqliteSessionStore(tmp_path / "sessions.sqlite3") as store:
        store.put("cli", _state())
        store.evict("cli")

        assert store.get("cli") is None
