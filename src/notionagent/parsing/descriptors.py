"""Structured description of one user-intended operation."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class Action(str, Enum):
    CREATE = "create"
    WRITE = "write"
    EDIT = "edit"
    DELETE = "delete"
    MOVE = "move"
    READ = "read"
    DEBUG = "debug"
    UNKNOWN = "unknown"


_ACTION_ALIASES = {
    "add": Action.WRITE,
    "append": Action.WRITE,
    "insert": Action.WRITE,
    "update": Action.EDIT,
    "modify": Action.EDIT,
    "replace": Action.EDIT,
    "remove": Action.DELETE,
    "get": Action.READ,
    "show": Action.READ,
}

PLACEMENT_IN = "in"
PLACEMENT_BELOW = "below"

# camelCase wire name -> attribute name
_FIELD_NAMES = {
    "primaryTarget": "primary_target",
    "secondaryTarget": "secondary_target",
    "sectionTarget": "section_target",
    "content": "content",
    "oldContent": "old_content",
    "newContent": "new_content",
    "formatType": "format_type",
    "isMultiAction": "is_multi_action",
    "isUrl": "is_url",
    "commentText": "comment_text",
    "codeLanguage": "code_language",
    "placement": "placement",
}
_BOOL_FIELDS = {"is_multi_action", "is_url"}


def parse_action(value: object) -> Action:
    if isinstance(value, Action):
        return value
    key = str(value or "").strip().lower()
    try:
        return Action(key)
    except ValueError:
        return _ACTION_ALIASES.get(key, Action.UNKNOWN)


def _optional_text(value: object) -> str | None:
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _as_bool(value: object) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "on"}
    return bool(value)


@dataclass(frozen=True, slots=True)
class ActionDescriptor:
    action: Action
    primary_target: str | None = None
    section_target: str | None = None
    content: str | None = None
    old_content: str | None = None
    new_content: str | None = None
    format_type: str | None = None
    is_multi_action: bool = False
    is_url: bool = False
    comment_text: str | None = None
    secondary_target: str | None = None
    code_language: str | None = None
    placement: str = PLACEMENT_IN

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"action": self.action.value}
        for wire_name, attribute in _FIELD_NAMES.items():
            value = getattr(self, attribute)
            if value is None or (attribute in _BOOL_FIELDS and not value):
                continue
            if attribute == "placement" and value == PLACEMENT_IN:
                continue
            payload[wire_name] = value
        return payload

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ActionDescriptor":
        """Coerce a loosely typed mapping (camelCase or snake_case keys) into a descriptor."""
        values: dict[str, Any] = {}
        for wire_name, attribute in _FIELD_NAMES.items():
            raw = data.get(wire_name, data.get(attribute))
            if attribute in _BOOL_FIELDS:
                values[attribute] = _as_bool(raw)
            elif attribute == "placement":
                values[attribute] = PLACEMENT_BELOW if str(raw or "").strip().lower() == PLACEMENT_BELOW else PLACEMENT_IN
            else:
                values[attribute] = _optional_text(raw)
        if values["primary_target"] is None:
            values["primary_target"] = _optional_text(data.get("pageTitle") or data.get("page_title"))
        return cls(action=parse_action(data.get("action")), **values)


DESTRUCTIVE_ACTIONS = frozenset({Action.CREATE, Action.WRITE, Action.EDIT, Action.DELETE, Action.MOVE})
