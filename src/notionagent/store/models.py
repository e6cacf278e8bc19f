"""Store-side records shared by the resolver, the executor and store clients."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from notionagent.blocks.models import join_plain_text


UNTITLED = "Untitled"


@dataclass(frozen=True, slots=True)
class Document:
    id: str
    title: str
    url: str | None = None


def page_title(page: Mapping[str, Any]) -> str:
    """Title from `properties.title`, `Name`, `name`, then a top-level `title`."""
    properties = page.get("properties")
    if isinstance(properties, Mapping):
        for key in ("title", "Title", "Name", "name"):
            prop = properties.get(key)
            if isinstance(prop, Mapping):
                title = join_plain_text(prop.get("title"))
                if title:
                    return title
        for prop in properties.values():
            if isinstance(prop, Mapping) and prop.get("type") == "title":
                title = join_plain_text(prop.get("title"))
                if title:
                    return title

    top_level = page.get("title")
    if isinstance(top_level, str) and top_level.strip():
        return top_level
    title = join_plain_text(top_level)
    return title or UNTITLED


def document_from_page(page: Mapping[str, Any]) -> Document:
    url = page.get("url")
    return Document(id=str(page.get("id", "")), title=page_title(page), url=str(url) if url else None)
