"""Typed document block kinds and their store payload shapes."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Union


PLAIN_TEXT_LANGUAGE = "plain text"
DEFAULT_CALLOUT_EMOJI = "💡"
DEFAULT_FILE_NAME = "Unnamed file"


class BlockKind(str, Enum):
    PARAGRAPH = "paragraph"
    HEADING_1 = "heading_1"
    HEADING_2 = "heading_2"
    HEADING_3 = "heading_3"
    BULLETED_LIST_ITEM = "bulleted_list_item"
    NUMBERED_LIST_ITEM = "numbered_list_item"
    TO_DO = "to_do"
    TOGGLE = "toggle"
    CODE = "code"
    QUOTE = "quote"
    CALLOUT = "callout"
    BOOKMARK = "bookmark"
    DIVIDER = "divider"
    IMAGE = "image"
    FILE = "file"


TEXT_KINDS = frozenset(
    {
        BlockKind.PARAGRAPH,
        BlockKind.HEADING_1,
        BlockKind.HEADING_2,
        BlockKind.HEADING_3,
        BlockKind.BULLETED_LIST_ITEM,
        BlockKind.NUMBERED_LIST_ITEM,
        BlockKind.TO_DO,
        BlockKind.TOGGLE,
        BlockKind.QUOTE,
        BlockKind.CALLOUT,
        BlockKind.CODE,
    }
)
LIST_KINDS = frozenset({BlockKind.BULLETED_LIST_ITEM, BlockKind.NUMBERED_LIST_ITEM, BlockKind.TO_DO})
HEADING_KINDS = frozenset({BlockKind.HEADING_1, BlockKind.HEADING_2, BlockKind.HEADING_3})
MEDIA_KINDS = frozenset({BlockKind.IMAGE, BlockKind.FILE})

_PLAIN_TEXT_KINDS = frozenset(
    {
        BlockKind.PARAGRAPH,
        BlockKind.HEADING_1,
        BlockKind.HEADING_2,
        BlockKind.HEADING_3,
        BlockKind.BULLETED_LIST_ITEM,
        BlockKind.NUMBERED_LIST_ITEM,
        BlockKind.QUOTE,
    }
)


def rich_text(content: str) -> list[dict[str, Any]]:
    return [{"type": "text", "text": {"content": content}}]


def _envelope(kind: BlockKind, body: dict[str, Any]) -> dict[str, Any]:
    return {"object": "block", "type": kind.value, kind.value: body}


@dataclass(frozen=True, slots=True)
class TextBlock:
    """Block whose body is only a rich-text run (paragraphs, headings, list items, quotes)."""

    kind: BlockKind
    text: str

    def __post_init__(self) -> None:
        if self.kind not in _PLAIN_TEXT_KINDS:
            raise ValueError(f"{self.kind.value} is not a plain text block kind")

    def to_payload(self) -> dict[str, Any]:
        return _envelope(self.kind, {"rich_text": rich_text(self.text)})


@dataclass(frozen=True, slots=True)
class ToDoBlock:
    text: str
    checked: bool = False
    kind: BlockKind = BlockKind.TO_DO

    def to_payload(self) -> dict[str, Any]:
        return _envelope(self.kind, {"rich_text": rich_text(self.text), "checked": self.checked})


@dataclass(frozen=True, slots=True)
class ToggleBlock:
    """Toggle owning an ordered tuple of child blocks."""

    text: str
    children: tuple["Block", ...] = ()
    kind: BlockKind = BlockKind.TOGGLE

    def to_payload(self) -> dict[str, Any]:
        return _envelope(
            self.kind,
            {
                "rich_text": rich_text(self.text),
                "children": [child.to_payload() for child in self.children],
            },
        )


@dataclass(frozen=True, slots=True)
class CodeBlock:
    text: str
    language: str = PLAIN_TEXT_LANGUAGE
    kind: BlockKind = BlockKind.CODE

    def to_payload(self) -> dict[str, Any]:
        return _envelope(self.kind, {"rich_text": rich_text(self.text), "language": self.language})


@dataclass(frozen=True, slots=True)
class CalloutBlock:
    text: str
    emoji: str = DEFAULT_CALLOUT_EMOJI
    kind: BlockKind = BlockKind.CALLOUT

    def to_payload(self) -> dict[str, Any]:
        return _envelope(
            self.kind,
            {"rich_text": rich_text(self.text), "icon": {"type": "emoji", "emoji": self.emoji}},
        )


@dataclass(frozen=True, slots=True)
class BookmarkBlock:
    url: str
    caption: str = ""
    kind: BlockKind = BlockKind.BOOKMARK

    def to_payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {"url": self.url}
        if self.caption:
            body["caption"] = rich_text(self.caption)
        return _envelope(self.kind, body)


@dataclass(frozen=True, slots=True)
class DividerBlock:
    kind: BlockKind = BlockKind.DIVIDER

    def to_payload(self) -> dict[str, Any]:
        return _envelope(self.kind, {})


@dataclass(frozen=True, slots=True)
class MediaBlock:
    """Externally hosted image or file."""

    kind: BlockKind
    url: str
    caption: str = ""
    name: str | None = None

    def __post_init__(self) -> None:
        if self.kind not in MEDIA_KINDS:
            raise ValueError(f"{self.kind.value} is not a media block kind")

    def to_payload(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "type": "external",
            "external": {"url": self.url},
            "caption": rich_text(self.caption) if self.caption else [],
        }
        if self.kind is BlockKind.FILE:
            body["name"] = self.name or DEFAULT_FILE_NAME
        return _envelope(self.kind, body)


Block = Union[TextBlock, ToDoBlock, ToggleBlock, CodeBlock, CalloutBlock, BookmarkBlock, DividerBlock, MediaBlock]


def to_payloads(blocks: list[Block] | tuple[Block, ...]) -> list[dict[str, Any]]:
    return [block.to_payload() for block in blocks]


def join_plain_text(runs: object) -> str:
    """Concatenate the text of a rich-text run list, preferring `plain_text` when present."""
    if not isinstance(runs, list):
        return ""
    parts: list[str] = []
    for run in runs:
        if not isinstance(run, Mapping):
            continue
        plain = run.get("plain_text")
        if isinstance(plain, str):
            parts.append(plain)
            continue
        text = run.get("text")
        if isinstance(text, Mapping) and isinstance(text.get("content"), str):
            parts.append(text["content"])
    return "".join(parts)


def payload_text(block: Mapping[str, Any]) -> str:
    """Plain text of a store block payload; empty for kinds without rich text."""
    block_type = block.get("type")
    if not isinstance(block_type, str):
        return ""
    body = block.get(block_type)
    if not isinstance(body, Mapping):
        return ""
    if block_type == BlockKind.BOOKMARK.value:
        return str(body.get("url") or "")
    return join_plain_text(body.get("rich_text"))
