"""Deciding whether a piece of text is a list of items or one item of prose."""

from __future__ import annotations

import re


_LIST_MARKER_RE = re.compile(r"^\s*(?:[-*•]\s+(?:\[[ xX]?\]\s*)?|\[[ xX]?\]\s*|\d+\s*[.:)]\s+)")
_DASH_SEPARATOR_RE = re.compile(r"\s+-\s+")
_EXPLICIT_CUE_RE = re.compile(
    r",\s*(?:\d+\s*[.,:)]|(?:and|first|second|third|next|finally|lastly)\b)",
    re.IGNORECASE,
)
_LEADING_CONJUNCTION_RE = re.compile(r"^(?:and|or)\s+", re.IGNORECASE)
_NUMBER_MARKER_RE = re.compile(r"^\d+\s*[.:)]\s*")

MAX_ITEM_WORDS = 6

PROSE_MARKERS = frozenset(
    {
        "hey",
        "hi",
        "hello",
        "well",
        "oh",
        "ok",
        "okay",
        "yes",
        "no",
        "so",
        "but",
        "because",
        "although",
        "however",
        "which",
        "who",
        "that",
        "then",
        "please",
        "thanks",
        "i",
        "we",
        "you",
        "he",
        "she",
        "they",
        "it",
        "let",
        "lets",
    }
)


def strip_list_marker(line: str) -> str:
    return _LIST_MARKER_RE.sub("", line, count=1).strip()


def has_explicit_cue(text: str) -> bool:
    return _EXPLICIT_CUE_RE.search(text) is not None


def is_dash_list(text: str) -> bool:
    stripped = text.strip()
    if stripped.startswith("- ") and len(_DASH_SEPARATOR_RE.split(stripped[2:])) >= 2:
        return True
    return len(_DASH_SEPARATOR_RE.split(stripped)) >= 3


def _clean_item(item: str) -> str:
    cleaned = _LEADING_CONJUNCTION_RE.sub("", item.strip())
    cleaned = _NUMBER_MARKER_RE.sub("", cleaned)
    return cleaned.strip().rstrip(".").strip()


def looks_like_items(segments: list[str]) -> bool:
    """True when every comma segment reads as a short standalone item rather than a clause."""
    if len(segments) < 2:
        return False
    for segment in segments:
        words = segment.split()
        if not words or len(words) > MAX_ITEM_WORDS:
            return False
        if "'" in segment or "’" in segment:
            return False
        if words[0].lower().strip(",.!?") in PROSE_MARKERS:
            return False
    return True


def split_list_items(text: str, *, format_cue: bool = False) -> list[str]:
    """Split text into list items, or return it whole when it is a single item.

    Newlines and dash-delimited lists always split. Commas split only with an
    explicit cue (", and", ordinals, numbered markers) or, when the caller
    already knows a list format was requested, when each segment reads as a
    short item.
    """
    stripped = text.strip()
    if not stripped:
        return []

    lines = [line for line in stripped.splitlines() if line.strip()]
    if len(lines) > 1:
        return [item for item in (strip_list_marker(line) for line in lines) if item]

    if is_dash_list(stripped):
        body = stripped[2:] if stripped.startswith("- ") else stripped
        return [item for item in (_clean_item(part) for part in _DASH_SEPARATOR_RE.split(body)) if item]

    if "," in stripped:
        segments = [segment.strip() for segment in stripped.split(",")]
        if has_explicit_cue(stripped):
            return [item for item in (_clean_item(segment) for segment in segments) if item]
        if format_cue and looks_like_items(segments):
            return [item for item in (_clean_item(segment) for segment in segments) if item]

    return [strip_list_marker(stripped) or stripped]
