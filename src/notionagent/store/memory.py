"""In-process document store with the same surface as the HTTP client."""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
import itertools
from typing import Any, Mapping, Sequence

from notionagent.blocks.models import rich_text
from notionagent.store.errors import NotFoundError, StoreError
from notionagent.store.models import Document


@dataclass(slots=True)
class _Page:
    id: str
    title: str
    parent_id: str | None = None
    blocks: list[dict[str, Any]] = field(default_factory=list)


class InMemoryStore:
    """Pages and blocks held in dictionaries; `failures` maps an operation name to an error to raise."""

    def __init__(self) -> None:
        self._pages: dict[str, _Page] = {}
        self._ids = itertools.count(1)
        self.failures: dict[str, StoreError] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []

    def _next_id(self, prefix: str) -> str:
        return f"{prefix}-{next(self._ids)}"

    def _record(self, operation: str, *args: Any) -> None:
        self.calls.append((operation, args))
        error = self.failures.get(operation)
        if error is not None:
            raise error

    def add_page(self, title: str, blocks: Sequence[Mapping[str, Any]] = (), *, page_id: str | None = None) -> Document:
        page = _Page(id=page_id or self._next_id("page"), title=title)
        for block in blocks:
            page.blocks.append(self._stored_block(block))
        self._pages[page.id] = page
        return Document(id=page.id, title=page.title)

    def blocks_of(self, document_id: str) -> list[dict[str, Any]]:
        return copy.deepcopy(self._page(document_id, "blocks_of").blocks)

    def _stored_block(self, block: Mapping[str, Any]) -> dict[str, Any]:
        stored = copy.deepcopy(dict(block))
        stored.setdefault("id", self._next_id("block"))
        stored.setdefault("object", "block")
        return stored

    def _page(self, document_id: str, operation: str) -> _Page:
        page = self._pages.get(document_id)
        if page is None:
            raise NotFoundError(operation=operation, message=f"Could not find page {document_id}", status_code=404)
        return page

    def _locate_block(self, block_id: str, operation: str) -> tuple[_Page, int]:
        for page in self._pages.values():
            for index, block in enumerate(page.blocks):
                if block.get("id") == block_id:
                    return page, index
        raise NotFoundError(operation=operation, message=f"Could not find block {block_id}", status_code=404)

    def search_by_title(self, query: str) -> list[Document]:
        self._record("search", query)
        needle = query.strip().lower()
        return [
            Document(id=page.id, title=page.title)
            for page in self._pages.values()
            if needle and needle in page.title.lower()
        ]

    def list_all(self) -> list[Document]:
        self._record("list_all")
        return [Document(id=page.id, title=page.title) for page in self._pages.values()]

    def get_children(self, document_id: str) -> list[dict[str, Any]]:
        self._record("get_children", document_id)
        return copy.deepcopy(self._page(document_id, "get_children").blocks)

    def append_children(
        self,
        document_id: str,
        blocks: Sequence[Mapping[str, Any]],
        *,
        after: str | None = None,
    ) -> list[dict[str, Any]]:
        self._record("append_children", document_id, tuple(blocks), after)
        page = self._page(document_id, "append_children")
        stored = [self._stored_block(block) for block in blocks]
        if after is None:
            page.blocks.extend(stored)
        else:
            positions = [index for index, block in enumerate(page.blocks) if block.get("id") == after]
            if not positions:
                raise NotFoundError(operation="append_children", message=f"Could not find block {after}", status_code=404)
            insert_at = positions[0] + 1
            page.blocks[insert_at:insert_at] = stored
        return copy.deepcopy(stored)

    def update_block(self, block_id: str, content: str) -> dict[str, Any]:
        self._record("update_block", block_id, content)
        page, index = self._locate_block(block_id, "update_block")
        block = page.blocks[index]
        block_type = str(block.get("type") or "paragraph")
        body = dict(block.get(block_type) or {})
        body["rich_text"] = rich_text(content)
        block[block_type] = body
        return copy.deepcopy(block)

    def delete_block(self, block_id: str) -> dict[str, Any]:
        self._record("delete_block", block_id)
        page, index = self._locate_block(block_id, "delete_block")
        removed = page.blocks.pop(index)
        removed["archived"] = True
        return removed

    def create_page(self, title: str, *, parent_id: str | None = None) -> Document:
        self._record("create_page", title, parent_id)
        if parent_id is not None:
            self._page(parent_id, "create_page")
        page = _Page(id=self._next_id("page"), title=title, parent_id=parent_id)
        self._pages[page.id] = page
        return Document(id=page.id, title=page.title)
