"""Structural repair of candidate blocks before they are sent to the store."""

from __future__ import annotations

import copy
from typing import Any, Mapping

from notionagent.blocks.languages import normalize_language
from notionagent.blocks.models import (
    DEFAULT_CALLOUT_EMOJI,
    DEFAULT_FILE_NAME,
    Block,
    BlockKind,
    MEDIA_KINDS,
    TEXT_KINDS,
    rich_text,
)


_KNOWN_TYPES = frozenset(kind.value for kind in BlockKind)
_TEXT_TYPES = frozenset(kind.value for kind in TEXT_KINDS)
_MEDIA_TYPES = frozenset(kind.value for kind in MEDIA_KINDS)
_TRUE_STRINGS = frozenset({"1", "true", "yes", "on", "x", "checked"})


def _empty_paragraph() -> dict[str, Any]:
    return {"object": "block", "type": "paragraph", "paragraph": {"rich_text": rich_text("")}}


def _normalize_run(run: object) -> dict[str, Any]:
    if isinstance(run, str):
        return rich_text(run)[0]
    if not isinstance(run, Mapping):
        return rich_text("" if run is None else str(run))[0]

    normalized = dict(run)
    run_type = normalized.get("type")
    if not isinstance(run_type, str) or not run_type:
        run_type = "text"
        normalized["type"] = run_type
    if run_type != "text":
        return normalized

    text = normalized.get("text")
    if isinstance(text, str):
        normalized["text"] = {"content": text}
    elif not isinstance(text, Mapping):
        plain = normalized.get("plain_text")
        normalized["text"] = {"content": plain if isinstance(plain, str) else ""}
    else:
        text_body = dict(text)
        content = text_body.get("content")
        if content is None:
            text_body["content"] = ""
        elif not isinstance(content, str):
            text_body["content"] = str(content)
        normalized["text"] = text_body
    return normalized


def _normalize_rich_text(value: object, *, default_when_missing: bool) -> list[dict[str, Any]]:
    if value is None:
        return rich_text("") if default_when_missing else []
    if isinstance(value, (str, Mapping)):
        return [_normalize_run(value)]
    if isinstance(value, (list, tuple)):
        return [_normalize_run(run) for run in value]
    return [_normalize_run(str(value))]


def _as_checked(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _infer_type(block: Mapping[str, Any]) -> str | None:
    candidates = [key for key in block if key in _KNOWN_TYPES]
    if len(candidates) == 1:
        return candidates[0]
    return None


def _repair_media(block_type: str, body: dict[str, Any]) -> dict[str, Any]:
    if not body:
        body = {"type": "external", "external": {"url": ""}}
    source_type = body.get("type")
    if source_type not in {"external", "file"}:
        source_type = "file" if isinstance(body.get("file"), Mapping) else "external"
        body["type"] = source_type
    source = body.get(source_type)
    if not isinstance(source, Mapping):
        body[source_type] = {"url": ""}
    elif not isinstance(source.get("url"), str):
        body[source_type] = {**source, "url": ""}
    body["caption"] = _normalize_rich_text(body.get("caption"), default_when_missing=False)
    if block_type == BlockKind.FILE.value and not body.get("name"):
        body["name"] = DEFAULT_FILE_NAME
    return body


def validate(block: Block | Mapping[str, Any] | None) -> dict[str, Any]:
    """Return a structurally complete copy of the block; never raises."""
    if block is None:
        return _empty_paragraph()
    if hasattr(block, "to_payload"):
        block = block.to_payload()
    if not isinstance(block, Mapping):
        return _empty_paragraph()

    result: dict[str, Any] = copy.deepcopy(dict(block))
    result["object"] = "block"

    block_type = result.get("type")
    if not isinstance(block_type, str) or not block_type:
        block_type = _infer_type(result)
        if block_type is None:
            return _empty_paragraph()
        result["type"] = block_type

    body = result.get(block_type)
    body = dict(body) if isinstance(body, Mapping) else {}

    if block_type in _TEXT_TYPES:
        body["rich_text"] = _normalize_rich_text(body.get("rich_text"), default_when_missing=True)

    if block_type == BlockKind.TO_DO.value:
        body["checked"] = _as_checked(body.get("checked", False))
    elif block_type == BlockKind.TOGGLE.value:
        children = body.get("children")
        if isinstance(children, Mapping):
            children = [children]
        elif not isinstance(children, (list, tuple)):
            children = []
        body["children"] = [validate(child) for child in children]
    elif block_type == BlockKind.CODE.value:
        language = body.get("language")
        body["language"] = normalize_language(language if isinstance(language, str) else None)
    elif block_type == BlockKind.CALLOUT.value:
        if not isinstance(body.get("icon"), Mapping):
            body["icon"] = {"type": "emoji", "emoji": DEFAULT_CALLOUT_EMOJI}
    elif block_type == BlockKind.BOOKMARK.value:
        if not isinstance(body.get("url"), str):
            body["url"] = ""
        if "caption" in body:
            body["caption"] = _normalize_rich_text(body.get("caption"), default_when_missing=False)
    elif block_type in _MEDIA_TYPES:
        body = _repair_media(block_type, body)

    result[block_type] = body
    return result


def validate_all(blocks: list[Block] | list[Mapping[str, Any]] | tuple[Any, ...]) -> list[dict[str, Any]]:
    return [validate(block) for block in blocks]
