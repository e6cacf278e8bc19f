"""Word lists shared by the rule-based parser and the splitter."""

from __future__ import annotations

import re

from notionagent.blocks.synthesizer import FORMAT_SYNONYMS


WRITE_VERBS = ("add", "write", "insert", "put", "append", "jot down", "note down", "log", "type")
COMMAND_VERBS = (
    *WRITE_VERBS,
    "create",
    "make",
    "edit",
    "change",
    "update",
    "modify",
    "replace",
    "delete",
    "remove",
    "move",
    "read",
    "show",
)

# Multi-word spellings first so alternation prefers the longest match.
FORMAT_PHRASES = tuple(
    sorted(
        {
            *FORMAT_SYNONYMS,
            "bullet list",
            "bulleted list",
            "bullet point",
            "bullet points",
            "numbered list",
            "ordered list",
            "to-do list",
            "todo list",
            "to do list",
            "to do",
            "check list",
            "task list",
            "code block",
            "heading 1",
            "heading 2",
            "heading 3",
            "block quote",
        },
        key=len,
        reverse=True,
    )
)

# Words that after "in"/"into" name a format rather than a page.
CONTAINER_FORMATS = frozenset(
    {
        "checklist",
        "check list",
        "todo",
        "todos",
        "to-do",
        "to do",
        "todo list",
        "to-do list",
        "to do list",
        "task list",
        "list",
        "bullet",
        "bullets",
        "bullet list",
        "bulleted list",
        "bullet points",
        "numbered list",
        "ordered list",
        "quote",
        "callout",
        "toggle",
        "code",
        "code block",
        "heading",
        "paragraph",
    }
)

_PHRASE_TO_FORMAT = {
    "bullet list": "bulleted_list_item",
    "bulleted list": "bulleted_list_item",
    "bullet point": "bulleted_list_item",
    "bullet points": "bulleted_list_item",
    "numbered list": "numbered_list_item",
    "ordered list": "numbered_list_item",
    "to-do list": "to_do",
    "todo list": "to_do",
    "to do list": "to_do",
    "to do": "to_do",
    "check list": "to_do",
    "task list": "to_do",
    "code block": "code",
    "heading 1": "heading_1",
    "heading 2": "heading_2",
    "heading 3": "heading_3",
    "block quote": "quote",
}

FORMAT_PATTERN = "|".join(re.escape(phrase) for phrase in FORMAT_PHRASES)
VERB_PATTERN = "|".join(re.escape(verb) for verb in sorted(COMMAND_VERBS, key=len, reverse=True))
WRITE_VERB_PATTERN = "|".join(re.escape(verb) for verb in sorted(WRITE_VERBS, key=len, reverse=True))


def canonical_format(phrase: str) -> str:
    """Canonical kind name for a format phrase as typed by the user."""
    key = " ".join(phrase.strip().lower().split())
    if key in _PHRASE_TO_FORMAT:
        return _PHRASE_TO_FORMAT[key]
    kind = FORMAT_SYNONYMS.get(key.replace(" ", "_"))
    return kind.value if kind is not None else key


def is_container_format(phrase: str) -> bool:
    key = " ".join(phrase.strip().lower().split())
    key = re.sub(r"^(?:a|an|the|my)\s+", "", key)
    return key in CONTAINER_FORMATS
