from __future__ import annotations

import pytest

from notionagent.blocks.models import join_plain_text, payload_text
from notionagent.store.errors import NotFoundError, RateLimitedError
from notionagent.store.memory import InMemoryStore
from notionagent.store.models import UNTITLED, page_title


def _paragraph(text: str, block_id: str | None = None) -> dict:
    block = {"type": "paragraph", "paragraph": {"rich_text": [{"type": "text", "text": {"content": text}}]}}
    if block_id:
        block["id"] = block_id
    return block


def test_append_after_anchor_inserts_in_place() -> None:
    store = InMemoryStore()
    page = store.add_page("Notes", [_paragraph("first", "a"), _paragraph("last", "z")])

    store.append_children(page.id, [_paragraph("middle")], after="a")

    texts = [block["paragraph"]["rich_text"][0]["text"]["content"] for block in store.blocks_of(page.id)]
    assert texts == ["first", "middle", "last"]


def test_append_with_unknown_anchor_raises_not_found() -> None:
    store = InMemoryStore()
    page = store.add_page("Notes")

    with pytest.raises(NotFoundError):
        store.append_children(page.id, [_paragraph("x")], after="missing")


def test_update_block_keeps_type_and_replaces_text() -> None:
    store = InMemoryStore()
    page = store.add_page("Tasks", [{"id": "t1", "type": "to_do", "to_do": {"rich_text": [], "checked": True}}])

    store.update_block("t1", "renamed")

    block = store.blocks_of(page.id)[0]
    assert block["to_do"]["checked"] is True
    assert block["to_do"]["rich_text"][0]["text"]["content"] == "renamed"


def test_delete_block_removes_it_from_page() -> None:
    store = InMemoryStore()
    page = store.add_page("Notes", [_paragraph("gone", "b1")])

    removed = store.delete_block("b1")

    assert removed["archived"] is True
    assert store.blocks_of(page.id) == []


def test_create_page_checks_parent_exists() -> None:
    store = InMemoryStore()
    parent = store.add_page("Projects")

    child = store.create_page("Ideas", parent_id=parent.id)

    assert child.title == "Ideas"
    assert [document.title for document in store.search_by_title("ide")] == ["Ideas"]
    with pytest.raises(NotFoundError):
        store.create_page("Orphan", parent_id="page-404")


def test_configured_failure_is_raised_and_call_recorded() -> None:
    store = InMemoryStore()
    store.failures["list_all"] = RateLimitedError(operation="list_all", message="slow down", status_code=429)

    with pytest.raises(RateLimitedError):
        store.list_all()

    assert store.calls == [("list_all", ())]


@pytest.mark.parametrize(
    ("page", "expected"),
    [
        ({"properties": {"title": {"title": [{"plain_text": "Tasks"}]}}}, "Tasks"),
        ({"properties": {"Project": {"type": "title", "title": [{"text": {"content": "Roadmap"}}]}}}, "Roadmap"),
        ({"title": "Top level"}, "Top level"),
        ({"title": [{"plain_text": "Database"}]}, "Database"),
        ({"properties": {}}, UNTITLED),
    ],
)
def test_page_title_variants(page: dict, expected: str) -> None:
    assert page_title(page) == expected


def test_page_title_and_block_text_share_run_joining() -> None:
    runs = [{"plain_text": "Daily "}, {"text": {"content": "Tasks"}}, "noise"]

    assert join_plain_text(runs) == "Daily Tasks"
    assert page_title({"properties": {"title": {"title": runs}}}) == "Daily Tasks"
    assert payload_text({"type": "paragraph", "paragraph": {"rich_text": runs}}) == "Daily Tasks"
