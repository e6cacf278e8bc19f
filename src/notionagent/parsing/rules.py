"""Rule-based parsing of a single natural-language command."""

from __future__ import annotations

from dataclasses import dataclass
import re

from notionagent.blocks.languages import extract_fenced_code
from notionagent.parsing.descriptors import PLACEMENT_BELOW, PLACEMENT_IN, Action, ActionDescriptor
from notionagent.parsing.vocabulary import (
    FORMAT_PATTERN,
    WRITE_VERB_PATTERN,
    canonical_format,
    is_container_format,
)


_CODE_PLACEHOLDER = "\u0000code\u0000"
_QUOTES = "\"'“”‘’"

_POLITE_PREFIX_RE = re.compile(
    r"^(?:(?:hey|hi|ok|okay)[,!]?\s+)?"
    r"(?:(?:can|could|would|will)\s+you\s+)?(?:please\s+|kindly\s+)?"
    r"(?:in\s+notion[,:]?\s+)?(?:please\s+)?",
    re.IGNORECASE,
)
_TRAILING_NOISE_RE = re.compile(r"(?:\s+in\s+notion)?(?:\s*,?\s*please)?\s*[.!?]*\s*$", re.IGNORECASE)
_DEBUG_RE = re.compile(r"^/?(?:show\s+)?debug(?:\s+info(?:rmation)?)?$", re.IGNORECASE)

_PAGE_SUFFIX_RE = re.compile(r"\s+page$", re.IGNORECASE)
_ARTICLE_RE = re.compile(r"^(?:the|my|our)\s+", re.IGNORECASE)
_URL_PREFIX_RE = re.compile(r"^(https?://\S+)", re.IGNORECASE)

_PREPOSITIONS = r"(?:in|into|to|on|onto|under|below|beneath|after)"
_NO_PREPOSITION = rf"(?:(?!\b{_PREPOSITIONS}\b)[^\"'\n])"

_SECTION_RE = re.compile(
    rf"\s*\b(?P<prep>{_PREPOSITIONS})\s+(?:the\s+)?[\"'“]?(?P<section>{_NO_PREPOSITION}+?)[\"'”]?"
    r"\s+(?:title\s+|heading\s+)?section\b(?P<tail>\s+(?:of|in|on)\b)?",
    re.IGNORECASE,
)
_PAGE_IN_PAGE_RE = re.compile(
    rf"\s+(?:in|into|to|on)\s+(?:the\s+)?[\"'“]?(?P<section>{_NO_PREPOSITION}+?)[\"'”]?\s+page\s+"
    r"(?:in|of|on|inside)\s+(?:the\s+|my\s+)?[\"'“]?(?P<target>[^\"'\n]+?)[\"'”]?(?:\s+page)?\s*$",
    re.IGNORECASE,
)
_TARGET_PREP_RE = re.compile(r"\s+(?:in|into|to|on|onto)\s+", re.IGNORECASE)
_TRAILING_AS_FORMAT_RE = re.compile(
    rf"\s+as\s+(?:a\s+|an\s+)?(?:new\s+)?(?P<fmt>{FORMAT_PATTERN})(?:\s+(?:item|items|block|entry|entries))?\s*$",
    re.IGNORECASE,
)
_LEADING_THIS_AS_RE = re.compile(
    rf"^(?:this|that|it)\s+as\s+(?:a\s+|an\s+)?(?P<fmt>{FORMAT_PATTERN})(?:\s+(?:item|items|block))?\s*:\s*(?P<content>[\s\S]+)$",
    re.IGNORECASE,
)
_LEADING_FORMAT_RE = re.compile(
    rf"^(?:(?:a|an|the|this|these|some)\s+)?(?:new\s+)?(?P<fmt>{FORMAT_PATTERN})(?:\s+(?:item|items|block|entry))?"
    r"(?:\s*:\s*|\s+(?:with|saying|that\s+says|called|named|titled|containing|of)\s*:?\s*)(?P<content>[\s\S]+)$",
    re.IGNORECASE,
)
_ARTICLE_FORMAT_RE = re.compile(
    r"^(?:a|an)\s+(?P<fmt>toggle|heading(?:\s+[123])?|title|subtitle|callout|quote|code\s+block)\s+(?P<content>[\s\S]+)$",
    re.IGNORECASE,
)
_BARE_FORMAT_RE = re.compile(r"^(?:a\s+|an\s+)?(?P<fmt>divider|separator)$", re.IGNORECASE)
_COMMENT_RE = re.compile(
    r"\s+(?:with\s+(?:a\s+|the\s+)?(?:comment|note)|comment|note|saying|with)\s*:?\s*(?P<comment>[\s\S]+)$",
    re.IGNORECASE,
)
_MULTILINE_HEADER_RE = re.compile(
    rf"^(?:(?:this|these|the\s+following)(?:\s+\w+)?\s*)?(?:as\s+(?:a\s+|an\s+)?(?P<fmt>{FORMAT_PATTERN})\s*)?"
    r"(?:(?:to|in|into|on)\s+(?P<target>.+?))?\s*:?\s*$",
    re.IGNORECASE,
)

_WRITE_RE = re.compile(rf"^(?:{WRITE_VERB_PATTERN})\b\s*(?P<body>[\s\S]*)$", re.IGNORECASE)
_CREATE_IN_PARENT_RE = re.compile(
    r"^(?:(?:create|make)\s+(?:a\s+)?(?:new\s+)?|add\s+(?:a\s+)?new\s+)(?:sub-?)?page\s+(?:in|under|inside)\s+"
    r"(?:the\s+)?[\"'“]?(?P<parent>.+?)[\"'”]?(?:\s+page)?\s+(?:called|named|titled|saying)\s+[\"'“]?(?P<title>.+?)[\"'”]?$",
    re.IGNORECASE,
)
_CREATE_RE = re.compile(
    r"^(?:(?:create|make)\s+(?:a\s+)?(?:new\s+)?|add\s+(?:a\s+)?new\s+)(?:sub-?)?page\s*(?:(?:called|named|titled)\s+)?"
    r"[\"'“]?(?P<title>.+?)[\"'”]?(?:\s+(?:in|under|inside)\s+(?:the\s+)?[\"'“]?(?P<parent>.+?)[\"'”]?(?:\s+page)?)?$",
    re.IGNORECASE,
)
_EDIT_QUOTED_RE = re.compile(
    r"^(?:edit|change|update|modify|replace)\s+[\"“'](?P<old>[^\"”']+)[\"”']\s+(?:to|with|into|by)\s+"
    r"[\"“'](?P<new>[^\"”']+)[\"”'](?:\s+(?:in|on)\s+(?:the\s+)?(?P<target>.+?))?$",
    re.IGNORECASE,
)
_EDIT_RE = re.compile(
    r"^(?:edit|change|update|modify|replace)\s+(?P<old>.+?)\s+(?:to|with|into)\s+(?P<new>.+?)"
    r"(?:\s+(?:in|on)\s+(?:the\s+)?(?P<target>[^\"'\n]+?))?$",
    re.IGNORECASE,
)
_MOVE_RE = re.compile(
    r"^move\s+(?P<content>.+?)\s+from\s+(?:the\s+)?(?P<source>.+?)\s+to\s+(?:the\s+)?(?P<dest>.+?)$",
    re.IGNORECASE,
)
_DELETE_RE = re.compile(
    r"^(?:delete|remove|erase)\s+(?:the\s+)?(?:(?:line|block|item|text|entry|task|todo)\s+)?"
    r"(?P<content>.+?)(?:\s+(?:from|in|on)\s+(?:the\s+)?(?P<target>[^\n]+?))?$",
    re.IGNORECASE,
)
_READ_RE = re.compile(
    r"^(?:read|show|get|display|open|view|what(?:'s|\s+is)\s+in)\s+(?:me\s+)?(?:the\s+)?"
    r"(?:(?:contents?|text)\s+(?:of|in|on|from)\s+)?(?:the\s+)?(?P<target>[^\n]+?)$",
    re.IGNORECASE,
)


@dataclass(slots=True)
class _WriteParts:
    content: str
    target: str | None = None
    section: str | None = None
    placement: str = PLACEMENT_IN
    format_type: str | None = None
    comment: str | None = None


def clean_command(text: str) -> str:
    cleaned = text.strip()
    cleaned = _POLITE_PREFIX_RE.sub("", cleaned, count=1)
    if "\n" not in cleaned and "```" not in cleaned:
        cleaned = _TRAILING_NOISE_RE.sub("", cleaned)
    return cleaned.strip()


def strip_quotes(text: str) -> str:
    stripped = text.strip()
    if len(stripped) >= 2 and stripped[0] in _QUOTES and stripped[-1] in _QUOTES:
        return stripped[1:-1].strip()
    return stripped


def clean_page_name(text: str) -> str:
    name = strip_quotes(text.strip().rstrip(".,;:!?"))
    name = _ARTICLE_RE.sub("", name)
    name = _PAGE_SUFFIX_RE.sub("", name)
    return strip_quotes(name).strip()


def _has_page_suffix(text: str) -> bool:
    stripped = strip_quotes(text.strip().rstrip(".,;:!?"))
    return _PAGE_SUFFIX_RE.search(stripped) is not None


def _protect_code(body: str) -> tuple[str, str | None]:
    fenced = extract_fenced_code(body)
    if fenced is None:
        return body, None
    return body[: fenced.start] + _CODE_PLACEHOLDER + body[fenced.end :], body[fenced.start : fenced.end]


def _restore_code(text: str, code: str | None) -> str:
    if code is None:
        return text
    return text.replace(_CODE_PLACEHOLDER, code)


def _take_section(rest: str, parts: _WriteParts) -> str:
    match = _SECTION_RE.search(rest)
    if match is None:
        return rest
    parts.section = strip_quotes(match.group("section"))
    if match.group("prep").lower() in {"below", "beneath", "after"}:
        parts.placement = PLACEMENT_BELOW
    replacement = " in " if match.group("tail") else " "
    return (rest[: match.start()] + replacement + rest[match.end() :]).strip()


def _take_trailing_format(rest: str, parts: _WriteParts) -> str:
    match = _TRAILING_AS_FORMAT_RE.search(rest)
    if match is None:
        return rest
    if parts.format_type is None:
        parts.format_type = canonical_format(match.group("fmt"))
    return rest[: match.start()]


def _take_target(rest: str, parts: _WriteParts) -> str:
    """Peel `in <page>` and `in <format>` phrases off the end of the text, right to left."""
    while True:
        matches = list(_TARGET_PREP_RE.finditer(rest))
        if not matches:
            return rest
        match = matches[-1]
        candidate = rest[match.end() :].strip()
        if not candidate or _CODE_PLACEHOLDER in candidate:
            return rest
        if not _has_page_suffix(candidate) and is_container_format(candidate):
            if parts.format_type is None:
                parts.format_type = canonical_format(_ARTICLE_RE.sub("", candidate.lower()).removeprefix("a "))
            rest = rest[: match.start()]
            continue
        if parts.target is None:
            name = clean_page_name(candidate)
            if not name:
                return rest
            parts.target = name
            rest = rest[: match.start()]
            continue
        return rest


def _take_leading_format(rest: str, parts: _WriteParts) -> str:
    for pattern in (_LEADING_THIS_AS_RE, _LEADING_FORMAT_RE, _ARTICLE_FORMAT_RE):
        match = pattern.match(rest)
        if match is not None:
            parts.format_type = parts.format_type or canonical_format(match.group("fmt"))
            return match.group("content")
    bare = _BARE_FORMAT_RE.match(rest.strip())
    if bare is not None:
        parts.format_type = canonical_format(bare.group("fmt"))
        return ""
    return rest


def _parse_multiline(body: str) -> _WriteParts | None:
    header, _, remainder = body.partition("\n")
    if not remainder.strip() or _CODE_PLACEHOLDER in header:
        return None
    match = _MULTILINE_HEADER_RE.match(header.strip())
    if match is None:
        return None
    parts = _WriteParts(content=remainder.strip("\n"))
    if match.group("fmt"):
        parts.format_type = canonical_format(match.group("fmt"))
    target = match.group("target")
    if target:
        rest = _take_section(" in " + target.strip(), parts)
        rest = _take_target(" " + rest.strip(), parts) if rest.strip() else rest
    return parts


def parse_write_body(body: str) -> _WriteParts:
    protected, code = _protect_code(body.strip())

    multiline = _parse_multiline(protected)
    if multiline is not None:
        multiline.content = _restore_code(multiline.content, code)
        return multiline

    parts = _WriteParts(content="")
    rest = protected
    if _URL_PREFIX_RE.match(rest):
        comment = _COMMENT_RE.search(rest)
        if comment is not None:
            parts.comment = strip_quotes(comment.group("comment").strip())
            rest = rest[: comment.start()]

    rest = _take_section(rest, parts)
    page_in_page = _PAGE_IN_PAGE_RE.search(rest)
    if page_in_page is not None:
        parts.section = parts.section or strip_quotes(page_in_page.group("section"))
        parts.target = clean_page_name(page_in_page.group("target"))
        rest = rest[: page_in_page.start()]

    rest = _take_trailing_format(rest, parts)
    rest = _take_target(rest, parts)
    rest = _take_trailing_format(rest, parts)
    rest = _take_leading_format(rest.strip(), parts)

    parts.content = _restore_code(strip_quotes(rest.strip()), code)
    return parts


def _parse_create(text: str) -> ActionDescriptor | None:
    match = _CREATE_IN_PARENT_RE.match(text) or _CREATE_RE.match(text)
    if match is None:
        return None
    title = strip_quotes(match.group("title"))
    if not title:
        return None
    parent = match.group("parent")
    return ActionDescriptor(
        action=Action.CREATE,
        primary_target=title,
        secondary_target=clean_page_name(parent) if parent else None,
    )


def _parse_edit(text: str) -> ActionDescriptor | None:
    match = _EDIT_QUOTED_RE.match(text) or _EDIT_RE.match(text)
    if match is None:
        return None
    target = match.group("target")
    return ActionDescriptor(
        action=Action.EDIT,
        primary_target=clean_page_name(target) if target else None,
        old_content=strip_quotes(match.group("old")),
        new_content=strip_quotes(match.group("new")),
    )


def _parse_move(text: str) -> ActionDescriptor | None:
    match = _MOVE_RE.match(text)
    if match is None:
        return None
    return ActionDescriptor(
        action=Action.MOVE,
        primary_target=clean_page_name(match.group("source")),
        secondary_target=clean_page_name(match.group("dest")),
        content=strip_quotes(match.group("content")),
    )


def _parse_delete(text: str) -> ActionDescriptor | None:
    match = _DELETE_RE.match(text)
    if match is None:
        return None
    target = match.group("target")
    return ActionDescriptor(
        action=Action.DELETE,
        primary_target=clean_page_name(target) if target else None,
        content=strip_quotes(match.group("content")),
    )


def _parse_read(text: str) -> ActionDescriptor | None:
    match = _READ_RE.match(text)
    if match is None:
        return None
    target = clean_page_name(match.group("target"))
    if not target:
        return None
    return ActionDescriptor(action=Action.READ, primary_target=target)


def _write_descriptor(body: str) -> ActionDescriptor:
    parts = parse_write_body(body)
    content = parts.content
    is_url = False
    url_match = _URL_PREFIX_RE.match(content)
    if url_match is not None and (parts.comment is not None or url_match.group(1) == content):
        content = url_match.group(1)
        is_url = True
    return ActionDescriptor(
        action=Action.WRITE,
        primary_target=parts.target,
        section_target=parts.section,
        content=content or None,
        format_type=parts.format_type,
        is_url=is_url,
        comment_text=parts.comment,
        placement=parts.placement,
    )


def _parse_write(text: str) -> ActionDescriptor | None:
    match = _WRITE_RE.match(text)
    if match is not None:
        return _write_descriptor(match.group("body"))
    if _URL_PREFIX_RE.match(text):
        return _write_descriptor(text)
    return None


def parse_command(text: str) -> ActionDescriptor:
    """Parse one command with regular-expression rules; unrecognised input yields `unknown`."""
    cleaned = clean_command(text)
    if not cleaned:
        return ActionDescriptor(action=Action.UNKNOWN)
    if _DEBUG_RE.match(cleaned):
        return ActionDescriptor(action=Action.DEBUG)

    for parser in (_parse_create, _parse_edit, _parse_move, _parse_delete, _parse_write, _parse_read):
        descriptor = parser(cleaned)
        if descriptor is not None:
            return descriptor
    return ActionDescriptor(action=Action.UNKNOWN, content=cleaned)
