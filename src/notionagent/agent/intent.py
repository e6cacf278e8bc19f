"""Keyword classification of destructive requests and confirmation replies."""

from __future__ import annotations

import re


DESTRUCTIVE_KEYWORDS = (
    "create",
    "add",
    "insert",
    "update",
    "modify",
    "edit",
    "delete",
    "remove",
    "rename",
    "move",
    "archive",
    "publish",
    "upload",
    "write",
    "new page",
)

CONFIRMATION_PROMPT = (
    "CONFIRM? This action will modify your Notion workspace. "
    "Reply 'yes' to confirm or 'no' to cancel."
)
CANCELLED_MESSAGE = "Action cancelled."
NOTHING_PENDING_MESSAGE = "There is nothing waiting for confirmation."

AFFIRMATIVE_REPLIES = frozenset({"yes", "y", "yep", "yeah", "confirm", "confirmed", "ok", "okay", "sure", "do it", "go ahead"})
NEGATIVE_REPLIES = frozenset({"no", "n", "nope", "cancel", "stop", "abort", "never mind", "nevermind"})
CONTINUE_REPLIES = frozenset({"continue", "next", "go on", "proceed", "keep going", "carry on"})

_KEYWORD_RES = tuple(re.compile(rf"\b{re.escape(keyword)}\b", re.IGNORECASE) for keyword in DESTRUCTIVE_KEYWORDS)
_REPLY_NOISE_RE = re.compile(r"[\s.!?,]+$")


def is_destructive(text: str) -> bool:
    return any(pattern.search(text) for pattern in _KEYWORD_RES)


def _normalize_reply(text: str) -> str:
    return _REPLY_NOISE_RE.sub("", " ".join(text.strip().lower().split()))


def is_affirmative(text: str) -> bool:
    return _normalize_reply(text) in AFFIRMATIVE_REPLIES


def is_negative(text: str) -> bool:
    return _normalize_reply(text) in NEGATIVE_REPLIES


def is_continuation(text: str) -> bool:
    reply = _normalize_reply(text)
    return reply in CONTINUE_REPLIES or reply in AFFIRMATIVE_REPLIES
