from __future__ import annotations

from typing import Any

import pytest

from notionagent.agent.executor import Executor, find_block, helpful_response
from notionagent.blocks.models import payload_text
from notionagent.parsing.descriptors import PLACEMENT_BELOW, Action, ActionDescriptor
from notionagent.store.errors import TransportError
from notionagent.store.memory import InMemoryStore
from notionagent.targeting.resolver import TargetResolver


def _block(block_type: str, text: str, block_id: str | None = None, **extra: Any) -> dict[str, Any]:
    block: dict[str, Any] = {
        "type": block_type,
        block_type: {"rich_text": [{"type": "text", "text": {"content": text}}], **extra},
    }
    if block_id is not None:
        block["id"] = block_id
    return block


def _texts(store: InMemoryStore, page_id: str) -> list[tuple[str, str]]:
    return [(block["type"], payload_text(block)) for block in store.blocks_of(page_id)]


def test_write_into_section_inserts_after_its_last_block() -> None:
    store = InMemoryStore()
    page = store.add_page(
        "Work",
        [
            _block("heading_2", "Tasks", "h1"),
            _block("to_do", "fix bug", "t1", checked=False),
            _block("heading_2", "Notes", "h2"),
            _block("paragraph", "misc", "p1"),
        ],
    )

    result = Executor(store).execute(
        ActionDescriptor(action=Action.WRITE, primary_target="Work", section_target="Tasks", content="review PRs")
    )

    assert result.success is True
    assert result.message == 'Successfully wrote "review PRs" to "Work" in the "Tasks" section'
    assert [text for _, text in _texts(store, page.id)] == ["Tasks", "fix bug", "review PRs", "Notes", "misc"]


def test_write_below_section_reports_placement() -> None:
    store = InMemoryStore()
    store.add_page("Journal", [_block("heading_1", "Meetings", "h1")])

    result = Executor(store).execute(
        ActionDescriptor(
            action=Action.WRITE,
            primary_target="Journal",
            section_target="Meetings",
            content="standup",
            placement=PLACEMENT_BELOW,
        )
    )

    assert result.message.endswith('below the "Meetings" section')


def test_write_defaults_to_todo_on_task_pages() -> None:
    store = InMemoryStore()
    page = store.add_page("Chores", [_block("heading_2", "Todo"), _block("to_do", "dishes", checked=False)])

    result = Executor(store).execute(ActionDescriptor(action=Action.WRITE, primary_target="Chores", content="laundry"))

    assert result.message == 'Successfully wrote "laundry" to "Chores"'
    assert _texts(store, page.id)[-1] == ("to_do", "laundry")


def test_write_to_missing_section_appends_at_end() -> None:
    store = InMemoryStore()
    page = store.add_page("Journal", [_block("paragraph", "hello")])

    result = Executor(store).execute(
        ActionDescriptor(action=Action.WRITE, primary_target="Journal", section_target="Archive", content="later")
    )

    assert result.success is True
    assert result.message.endswith('(no section matching "Archive", added at the end)')
    assert _texts(store, page.id)[-1] == ("paragraph", "later")


def test_write_url_adds_bookmark_and_comment() -> None:
    store = InMemoryStore()
    page = store.add_page("Reading List")

    Executor(store).execute(
        ActionDescriptor(
            action=Action.WRITE,
            primary_target="Reading List",
            content="https://example.com",
            is_url=True,
            comment_text="great article",
        )
    )

    assert _texts(store, page.id) == [("bookmark", "https://example.com"), ("paragraph", "great article")]


def test_write_enumerated_todo_items() -> None:
    store = InMemoryStore()
    page = store.add_page("Groceries")

    Executor(store).execute(
        ActionDescriptor(action=Action.WRITE, primary_target="Groceries", content="eggs, milk, and bread", format_type="to_do")
    )

    assert _texts(store, page.id) == [("to_do", "eggs"), ("to_do", "milk"), ("to_do", "bread")]


def test_write_without_content_asks_for_it() -> None:
    store = InMemoryStore()
    store.add_page("Notes")

    result = Executor(store).execute(ActionDescriptor(action=Action.WRITE, primary_target="Notes"))

    assert result.success is False
    assert result.message == 'No content specified to write to "Notes". Please specify what to write.'


def test_write_divider_needs_no_content() -> None:
    store = InMemoryStore()
    page = store.add_page("Notes")

    result = Executor(store).execute(ActionDescriptor(action=Action.WRITE, primary_target="Notes", format_type="divider"))

    assert result.success is True
    assert store.blocks_of(page.id)[0]["type"] == "divider"


def test_missing_target_asks_for_page_name() -> None:
    result = Executor(InMemoryStore()).execute(ActionDescriptor(action=Action.WRITE, content="eggs"))

    assert result.success is False
    assert result.message == "Which page should I use? Please name the page."


def test_unknown_page_reports_not_found() -> None:
    result = Executor(InMemoryStore()).execute(ActionDescriptor(action=Action.READ, primary_target="Ghost"))

    assert result.success is False
    assert result.message.startswith('Could not find a page with name "Ghost"')


def test_low_confidence_match_is_flagged() -> None:
    store = InMemoryStore()
    store.add_page("Tasks")

    result = Executor(store).execute(ActionDescriptor(action=Action.WRITE, primary_target="tsk", content="stretch"))

    assert result.success is True
    assert result.message == 'Successfully wrote "stretch" to "Tasks" (closest match for "tsk")'


def test_edit_replaces_matching_block_text() -> None:
    store = InMemoryStore()
    page = store.add_page("Groceries", [_block("to_do", "buy milk", "t1", checked=False)])

    result = Executor(store).execute(
        ActionDescriptor(action=Action.EDIT, primary_target="Groceries", old_content="MILK", new_content="buy oat milk")
    )

    assert result.message == 'Successfully edited "MILK" to "buy oat milk" in "Groceries"'
    assert _texts(store, page.id) == [("to_do", "buy oat milk")]


def test_edit_without_match_reports_it() -> None:
    store = InMemoryStore()
    store.add_page("Groceries", [_block("paragraph", "eggs")])

    result = Executor(store).execute(
        ActionDescriptor(action=Action.EDIT, primary_target="Groceries", old_content="milk", new_content="x")
    )

    assert result.success is False
    assert result.message == 'Could not find any content matching "milk" on page "Groceries"'


def test_delete_removes_first_matching_block() -> None:
    store = InMemoryStore()
    page = store.add_page("Groceries", [_block("paragraph", "eggs"), _block("paragraph", "milk")])

    result = Executor(store).execute(ActionDescriptor(action=Action.DELETE, primary_target="Groceries", content="milk"))

    assert result.message == 'Successfully deleted "milk" from "Groceries"'
    assert _texts(store, page.id) == [("paragraph", "eggs")]


def test_move_copies_block_then_removes_original() -> None:
    store = InMemoryStore()
    source = store.add_page("Tasks", [_block("to_do", "buy milk", "t1", checked=True)])
    destination = store.add_page("Groceries")

    result = Executor(store).execute(
        ActionDescriptor(action=Action.MOVE, primary_target="Tasks", secondary_target="Groceries", content="milk")
    )

    assert result.message == 'Successfully moved "milk" from "Tasks" to "Groceries"'
    assert store.blocks_of(source.id) == []
    moved = store.blocks_of(destination.id)[0]
    assert moved["to_do"]["checked"] is True
    assert moved["id"] != "t1"


def test_move_to_unknown_destination() -> None:
    store = InMemoryStore()
    store.add_page("Tasks", [_block("paragraph", "buy milk")])
    executor = Executor(store, resolver=TargetResolver(store, lenient=False))

    result = executor.execute(
        ActionDescriptor(action=Action.MOVE, primary_target="Tasks", secondary_target="Nowhere", content="milk")
    )

    assert result.success is False
    assert result.message == 'Could not find target page "Nowhere". Please check if this page exists.'


def test_read_lists_blocks_with_markers() -> None:
    store = InMemoryStore()
    store.add_page(
        "Plan",
        [
            _block("heading_1", "Goals"),
            _block("to_do", "ship", checked=True),
            _block("bulleted_list_item", "idea"),
            {"type": "divider", "divider": {}},
        ],
    )

    result = Executor(store).execute(ActionDescriptor(action=Action.READ, primary_target="Plan"))

    assert result.message == 'Contents of "Plan":\n# Goals\n[x] ship\n- idea\n---'


def test_read_empty_page() -> None:
    store = InMemoryStore()
    store.add_page("Blank")

    result = Executor(store).execute(ActionDescriptor(action=Action.READ, primary_target="Blank"))

    assert result.message == '"Blank" is empty.'


def test_create_page_under_parent() -> None:
    store = InMemoryStore()
    store.add_page("Work")

    result = Executor(store).execute(
        ActionDescriptor(action=Action.CREATE, primary_target="Project Ideas", secondary_target="Work")
    )

    assert result.message == 'Successfully created page "Project Ideas" in "Work"'
    assert store.calls[-1][0] == "create_page"


def test_create_page_with_missing_parent() -> None:
    store = InMemoryStore()
    store.add_page("Work")
    executor = Executor(store, resolver=TargetResolver(store, lenient=False))

    result = executor.execute(ActionDescriptor(action=Action.CREATE, primary_target="Ideas", secondary_target="Zzz"))

    assert result.success is False
    assert result.message == 'Could not find parent page "Zzz" to create the new page in.'


def test_unknown_action_returns_helpful_response() -> None:
    result = Executor(InMemoryStore()).execute(ActionDescriptor(action=Action.UNKNOWN, content="hello there"))

    assert result.success is False
    assert result.message == helpful_response("hello there")
    assert result.message.startswith('I couldn\'t determine what action to take with "hello there". Try:')


def test_find_block_is_case_insensitive_substring() -> None:
    blocks = [_block("paragraph", "Buy Milk", "a"), _block("paragraph", "milk again", "b")]

    assert find_block(blocks, "milk")["id"] == "a"
    assert find_block(blocks, "  ") is None


def test_describe_reports_store_and_formatter() -> None:
    assert Executor(InMemoryStore()).describe() == {"store": "InMemoryStore", "formatAgent": "rules"}


class _SourceDeleteFails(InMemoryStore):
    def __init__(self, source_block_id: str) -> None:
        super().__init__()
        self._source_block_id = source_block_id

    def delete_block(self, block_id: str) -> dict[str, Any]:
        if block_id == self._source_block_id:
            raise TransportError(operation="delete_block", message="timed out")
        return super().delete_block(block_id)


def test_move_removes_copy_when_source_delete_fails() -> None:
    store = _SourceDeleteFails("t1")
    source = store.add_page("Tasks", [_block("to_do", "buy milk", "t1", checked=False)])
    destination = store.add_page("Groceries")

    with pytest.raises(TransportError):
        Executor(store).execute(
            ActionDescriptor(action=Action.MOVE, primary_target="Tasks", secondary_target="Groceries", content="milk")
        )

    assert store.blocks_of(destination.id) == []
    assert _texts(store, source.id) == [("to_do", "buy milk")]
