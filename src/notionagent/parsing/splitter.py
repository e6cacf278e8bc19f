"""Split one message into the ordered list of actions it bundles."""

from __future__ import annotations

from dataclasses import replace
import logging
import re

from notionagent.blocks.enumeration import split_list_items
from notionagent.blocks.languages import has_fence
from notionagent.blocks.models import LIST_KINDS
from notionagent.blocks.synthesizer import normalize_format
from notionagent.parsing.descriptors import Action, ActionDescriptor
from notionagent.parsing.rules import clean_command, clean_page_name, parse_command, strip_quotes
from notionagent.parsing.vocabulary import (
    FORMAT_PATTERN,
    VERB_PATTERN,
    WRITE_VERB_PATTERN,
    canonical_format,
)


logger = logging.getLogger(__name__)

_TARGET_TAIL = r"(?:\s+(?:in|into|to|on)\s+(?:the\s+)?(?P<{name}>[^,\n]+?))?"

_CONJUNCTION_RE = re.compile(
    rf"^(?:{WRITE_VERB_PATTERN})\s+(?P<first>.+?)\s+(?:in|as|into)\s+(?:an?\s+)?(?P<first_fmt>{FORMAT_PATTERN})"
    + _TARGET_TAIL.format(name="first_target")
    + rf"\s*,?\s+and\s+(?:(?:{WRITE_VERB_PATTERN})\s+)?(?P<second>.+?)\s+(?:in|as|into)\s+(?:an?\s+)?"
    rf"(?P<second_fmt>{FORMAT_PATTERN})(?:\s+(?:too|also|as\s+well))?"
    + _TARGET_TAIL.format(name="target")
    + r"$",
    re.IGNORECASE,
)
_THIS_AS_RE = re.compile(
    rf"^(?P<head>.+?)\s*,?\s+and\s+(?:(?:{WRITE_VERB_PATTERN})\s+)?(?:this|that)\s+as\s+(?:an?\s+)?"
    rf"(?P<fmt>{FORMAT_PATTERN})\s*:\s*(?P<content>[\s\S]+)$",
    re.IGNORECASE,
)
_SEQUENCE_MARKER_RE = re.compile(
    r"(?:\s*[,;.]\s*|\s+)(?:(?:and\s+then|then|finally|after\s+that|afterwards|next|also|and)(?:\s*,\s*|\s+))+"
    rf"(?=(?:{VERB_PATTERN})\b)",
    re.IGNORECASE,
)
_CONNECTIVE_RE = re.compile(r"\b(?:then|finally|after\s+that|afterwards)\b", re.IGNORECASE)

_INHERITING_ACTIONS = frozenset({Action.WRITE, Action.EDIT, Action.DELETE, Action.READ})


def _mark_multi(descriptors: list[ActionDescriptor]) -> list[ActionDescriptor]:
    if len(descriptors) < 2:
        return descriptors
    return [replace(descriptor, is_multi_action=True) for descriptor in descriptors]


def _conjunction(text: str) -> list[ActionDescriptor] | None:
    match = _CONJUNCTION_RE.match(text)
    if match is not None:
        shared = match.group("target")
        first_target = match.group("first_target") or shared
        second_target = shared or first_target
        return [
            ActionDescriptor(
                action=Action.WRITE,
                primary_target=clean_page_name(first_target) if first_target else None,
                content=strip_quotes(match.group("first")),
                format_type=canonical_format(match.group("first_fmt")),
            ),
            ActionDescriptor(
                action=Action.WRITE,
                primary_target=clean_page_name(second_target) if second_target else None,
                content=strip_quotes(match.group("second")),
                format_type=canonical_format(match.group("second_fmt")),
            ),
        ]

    match = _THIS_AS_RE.match(text)
    if match is None:
        return None
    head = parse_command(match.group("head"))
    if head.action is Action.UNKNOWN:
        return None
    target = head.primary_target
    return [
        head,
        ActionDescriptor(
            action=Action.WRITE,
            primary_target=target,
            content=match.group("content").strip(),
            format_type=canonical_format(match.group("fmt")),
        ),
    ]


def _enumerate_items(descriptor: ActionDescriptor) -> list[ActionDescriptor] | None:
    """Expand a list-format write whose content is an explicit enumeration."""
    if descriptor.action is not Action.WRITE or not descriptor.content or descriptor.is_url:
        return None
    kind = normalize_format(descriptor.format_type)
    if kind not in LIST_KINDS:
        return None
    content = descriptor.content
    if "\n" in content or has_fence(content) or _CONNECTIVE_RE.search(content):
        return None
    items = split_list_items(content, format_cue=True)
    if len(items) < 2:
        return None
    return [replace(descriptor, content=item) for item in items]


def _sequence_segments(text: str) -> list[str]:
    if has_fence(text) or "\n" in text:
        return [text]
    return [segment for segment in _SEQUENCE_MARKER_RE.split(text) if segment.strip()]


def inherit_targets(descriptors: list[ActionDescriptor]) -> list[ActionDescriptor]:
    """Give untargeted descriptors the most recently stated target, or the first one stated later."""
    inherited: list[ActionDescriptor] = []
    current: str | None = None
    for descriptor in descriptors:
        stated = descriptor.primary_target
        if stated is not None:
            current = stated
            inherited.append(descriptor)
        elif current is not None and descriptor.action in _INHERITING_ACTIONS:
            inherited.append(replace(descriptor, primary_target=current))
        else:
            inherited.append(descriptor)

    first_stated = next(
        (d.primary_target for d in inherited if d.primary_target and d.action is not Action.CREATE),
        None,
    )
    if first_stated is None:
        return inherited
    return [
        replace(d, primary_target=first_stated)
        if d.primary_target is None and d.action in _INHERITING_ACTIONS
        else d
        for d in inherited
    ]


def _sequence(text: str) -> list[ActionDescriptor] | None:
    segments = _sequence_segments(text)
    if len(segments) < 2:
        return None
    parsed = [parse_command(segment) for segment in segments]
    if any(descriptor.action is Action.UNKNOWN for descriptor in parsed):
        return None
    expanded: list[ActionDescriptor] = []
    for descriptor in parsed:
        expanded.extend(_enumerate_items(descriptor) or [descriptor])
    return inherit_targets(expanded)


def split(text: str) -> list[ActionDescriptor]:
    """Return one descriptor per action in `text`; never an empty list."""
    cleaned = clean_command(text)

    conjunction = _conjunction(cleaned)
    if conjunction is not None:
        logger.debug("Split %r by conjunction into %d actions", cleaned, len(conjunction))
        return _mark_multi(conjunction)

    base = parse_command(cleaned)
    enumerated = _enumerate_items(base)
    if enumerated is not None:
        logger.debug("Split %r by enumeration into %d actions", cleaned, len(enumerated))
        return _mark_multi(enumerated)

    sequence = _sequence(cleaned)
    if sequence is not None:
        logger.debug("Split %r by sequence markers into %d actions", cleaned, len(sequence))
        return _mark_multi(sequence)

    return [base]
