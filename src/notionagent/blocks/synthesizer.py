"""Turn free text plus an optional format hint into typed document blocks."""

from __future__ import annotations

import logging
import re

from notionagent.blocks.enumeration import split_list_items
from notionagent.blocks.languages import (
    detect_language,
    extract_fenced_code,
    has_fence,
    normalize_language,
    strip_fences,
)
from notionagent.blocks.models import (
    Block,
    BlockKind,
    BookmarkBlock,
    CalloutBlock,
    CodeBlock,
    DividerBlock,
    LIST_KINDS,
    MediaBlock,
    TextBlock,
    ToDoBlock,
    ToggleBlock,
)


logger = logging.getLogger(__name__)

FORMAT_SYNONYMS: dict[str, BlockKind] = {
    "paragraph": BlockKind.PARAGRAPH,
    "text": BlockKind.PARAGRAPH,
    "plain": BlockKind.PARAGRAPH,
    "heading": BlockKind.HEADING_1,
    "heading1": BlockKind.HEADING_1,
    "heading_1": BlockKind.HEADING_1,
    "h1": BlockKind.HEADING_1,
    "title": BlockKind.HEADING_1,
    "heading2": BlockKind.HEADING_2,
    "heading_2": BlockKind.HEADING_2,
    "h2": BlockKind.HEADING_2,
    "subtitle": BlockKind.HEADING_2,
    "subheading": BlockKind.HEADING_2,
    "heading3": BlockKind.HEADING_3,
    "heading_3": BlockKind.HEADING_3,
    "h3": BlockKind.HEADING_3,
    "bullet": BlockKind.BULLETED_LIST_ITEM,
    "bullets": BlockKind.BULLETED_LIST_ITEM,
    "bulleted": BlockKind.BULLETED_LIST_ITEM,
    "bulleted_list": BlockKind.BULLETED_LIST_ITEM,
    "bulleted_list_item": BlockKind.BULLETED_LIST_ITEM,
    "bullet_list": BlockKind.BULLETED_LIST_ITEM,
    "list": BlockKind.BULLETED_LIST_ITEM,
    "number": BlockKind.NUMBERED_LIST_ITEM,
    "numbered": BlockKind.NUMBERED_LIST_ITEM,
    "numbered_list": BlockKind.NUMBERED_LIST_ITEM,
    "numbered_list_item": BlockKind.NUMBERED_LIST_ITEM,
    "ordered_list": BlockKind.NUMBERED_LIST_ITEM,
    "todo": BlockKind.TO_DO,
    "to_do": BlockKind.TO_DO,
    "to-do": BlockKind.TO_DO,
    "todos": BlockKind.TO_DO,
    "checklist": BlockKind.TO_DO,
    "check_list": BlockKind.TO_DO,
    "task": BlockKind.TO_DO,
    "tasks": BlockKind.TO_DO,
    "toggle": BlockKind.TOGGLE,
    "dropdown": BlockKind.TOGGLE,
    "code": BlockKind.CODE,
    "codeblock": BlockKind.CODE,
    "code_block": BlockKind.CODE,
    "quote": BlockKind.QUOTE,
    "blockquote": BlockKind.QUOTE,
    "callout": BlockKind.CALLOUT,
    "note": BlockKind.CALLOUT,
    "notification": BlockKind.CALLOUT,
    "bookmark": BlockKind.BOOKMARK,
    "url": BlockKind.BOOKMARK,
    "link": BlockKind.BOOKMARK,
    "divider": BlockKind.DIVIDER,
    "separator": BlockKind.DIVIDER,
    "image": BlockKind.IMAGE,
    "file": BlockKind.FILE,
}

_URL_ONLY_RE = re.compile(r"^https?://\S+$", re.IGNORECASE)
_TOGGLE_RE = re.compile(r"^\s*((?:[^:\n]|:(?=//))+?)\s*:(?!//)\s*([\s\S]+)$")
_TASK_HEADER_RE = re.compile(r"\b(?:check\s*list|to-?dos?|tasks?)\b", re.IGNORECASE)
_CHECKBOX_RE = re.compile(r"^-\s+\[([ xX]?)\]\s+(.*)$")


def normalize_format(format_type: str | None) -> BlockKind | None:
    """Map a loosely spelled format hint to a block kind; None when unknown or empty."""
    if format_type is None:
        return None
    key = re.sub(r"[\s]+", "_", format_type.strip().lower())
    if not key:
        return None
    if key in FORMAT_SYNONYMS:
        return FORMAT_SYNONYMS[key]
    return FORMAT_SYNONYMS.get(key.replace("_", ""))


def is_url(text: str) -> bool:
    return _URL_ONLY_RE.match(text.strip()) is not None


def code_block(content: str, language: str | None = None) -> CodeBlock:
    """Build a code block, taking the language from the argument, the fence tag or the content."""
    fenced = extract_fenced_code(content)
    if fenced is not None:
        code = fenced.code or strip_fences(content)
        tag = language or fenced.language
    else:
        code = strip_fences(content)
        tag = language

    if tag:
        return CodeBlock(text=code, language=normalize_language(tag))
    return CodeBlock(text=code, language=detect_language(code))


def toggle_with_checklist(items: list[str], title: str = "Checklist") -> ToggleBlock:
    return ToggleBlock(text=title, children=tuple(ToDoBlock(text=item) for item in items if item.strip()))


def bookmark(url: str) -> BookmarkBlock:
    return BookmarkBlock(url=url.strip())


def divider() -> DividerBlock:
    return DividerBlock()


def image(url: str, caption: str = "") -> MediaBlock:
    if not url.strip():
        raise ValueError("url is required for image blocks")
    return MediaBlock(kind=BlockKind.IMAGE, url=url.strip(), caption=caption)


def file(url: str, name: str | None = None, caption: str = "") -> MediaBlock:
    if not url.strip():
        raise ValueError("url is required for file blocks")
    return MediaBlock(kind=BlockKind.FILE, url=url.strip(), caption=caption, name=name)


def _list_item(kind: BlockKind, text: str) -> Block:
    if kind is BlockKind.TO_DO:
        return ToDoBlock(text=text)
    return TextBlock(kind=kind, text=text)


def _markdown_line(line: str) -> Block:
    text = line.strip()
    if text.startswith("### "):
        return TextBlock(kind=BlockKind.HEADING_3, text=text[4:].strip())
    if text.startswith("## "):
        return TextBlock(kind=BlockKind.HEADING_2, text=text[3:].strip())
    if text.startswith("# "):
        return TextBlock(kind=BlockKind.HEADING_1, text=text[2:].strip())
    if text.startswith("> "):
        return TextBlock(kind=BlockKind.QUOTE, text=text[2:].strip())
    checkbox = _CHECKBOX_RE.match(text)
    if checkbox is not None:
        return ToDoBlock(text=checkbox.group(2).strip(), checked=checkbox.group(1).lower() == "x")
    if text.startswith(("- ", "* ", "• ")):
        return TextBlock(kind=BlockKind.BULLETED_LIST_ITEM, text=text[2:].strip())
    if text.startswith("💡"):
        return CalloutBlock(text=text[len("💡"):].strip())
    if text == "---":
        return DividerBlock()
    if is_url(text):
        return BookmarkBlock(url=text)
    return TextBlock(kind=BlockKind.PARAGRAPH, text=text)


def _auto_detect(content: str) -> list[Block]:
    if has_fence(content):
        return [code_block(content)]
    if is_url(content):
        return [BookmarkBlock(url=content.strip())]

    lines = [line for line in content.splitlines() if line.strip()]
    if not lines:
        return [TextBlock(kind=BlockKind.PARAGRAPH, text=content.strip())]
    return [_markdown_line(line) for line in lines]


def _paragraphs(content: str) -> list[Block]:
    lines = [line.strip() for line in content.splitlines() if line.strip()]
    if not lines:
        return [TextBlock(kind=BlockKind.PARAGRAPH, text=content.strip())]
    return [TextBlock(kind=BlockKind.PARAGRAPH, text=line) for line in lines]


def _toggle(content: str) -> ToggleBlock:
    match = _TOGGLE_RE.match(content)
    if match is None or has_fence(match.group(1)):
        return ToggleBlock(text=content.strip())

    header, body = match.group(1).strip(), match.group(2).strip()
    if has_fence(body):
        return ToggleBlock(text=header, children=(code_block(body),))

    items = split_list_items(body)
    if len(items) > 1:
        kind = BlockKind.TO_DO if _TASK_HEADER_RE.search(header) else BlockKind.BULLETED_LIST_ITEM
        if "\n" in body:
            children = tuple(_auto_detect(body))
            if all(child.kind is BlockKind.PARAGRAPH for child in children):
                children = tuple(_list_item(kind, item) for item in items)
            return ToggleBlock(text=header, children=children)
        return ToggleBlock(text=header, children=tuple(_list_item(kind, item) for item in items))
    return ToggleBlock(text=header, children=tuple(_auto_detect(body)))


def synthesize(content: str, format_type: str | None = None, *, language: str | None = None) -> list[Block]:
    """Build blocks for content; the hint picks the kind, otherwise the text shape does."""
    text = content if content is not None else ""
    if format_type is None or not format_type.strip():
        return _auto_detect(text)

    kind = normalize_format(format_type)
    if kind is None:
        logger.warning("Unknown format type %r, defaulting to paragraph", format_type)
        return _paragraphs(text)

    if kind in LIST_KINDS:
        items = split_list_items(text, format_cue=True)
        if not items:
            items = [text.strip()]
        return [_list_item(kind, item) for item in items]

    if kind is BlockKind.TOGGLE:
        return [_toggle(text)]
    if kind is BlockKind.CODE:
        return [code_block(text, language)]
    if kind is BlockKind.CALLOUT:
        return [CalloutBlock(text=text.strip())]
    if kind is BlockKind.BOOKMARK:
        return [BookmarkBlock(url=text.strip())]
    if kind is BlockKind.DIVIDER:
        return [DividerBlock()]
    if kind is BlockKind.IMAGE:
        return [MediaBlock(kind=BlockKind.IMAGE, url=text.strip())]
    if kind is BlockKind.FILE:
        return [MediaBlock(kind=BlockKind.FILE, url=text.strip())]
    if kind is BlockKind.PARAGRAPH:
        return _paragraphs(text)
    return [TextBlock(kind=kind, text=text.strip())]
