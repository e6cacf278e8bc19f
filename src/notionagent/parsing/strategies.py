"""Ordered parse strategies: completion-assisted first when configured, rules always last."""

from __future__ import annotations

import logging
from typing import Any, Protocol, Sequence

from notionagent.llm.format_agent import JsonCompletion
from notionagent.parsing.descriptors import Action, ActionDescriptor
from notionagent.parsing.splitter import inherit_targets, split


logger = logging.getLogger(__name__)

PARSE_SYSTEM_PROMPT = """You turn requests for editing a Notion workspace into JSON commands.
Return {"commands": [...]} with one object per distinct action, in the order given.
Each command has:
- "action": one of create, write, edit, delete, move, read, unknown
- "primaryTarget": the page name, without the word "page"
- "sectionTarget": a section or heading inside the page, if named
- "secondaryTarget": destination page for move, parent page for create
- "content": text to write, delete or move
- "oldContent" / "newContent": for edit
- "formatType": one of paragraph, heading_1, heading_2, heading_3, bulleted_list_item,
  numbered_list_item, to_do, toggle, code, quote, callout, bookmark, divider
- "isUrl": true when content is a link, "commentText": text said about the link
A comma inside a normal sentence is part of one item; only split explicit lists.
Later commands without a page reuse the page of the previous command."""

PARSE_SCHEMA_HINT = '{"commands": [{"action": "...", "primaryTarget": "...", "content": "..."}]}'


class ParseStrategy(Protocol):
    name: str

    def try_parse(self, text: str) -> list[ActionDescriptor] | None: ...


def _command_objects(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        for key in ("commands", "actions"):
            value = payload.get(key)
            if isinstance(value, list):
                return value
        if "action" in payload:
            return [payload]
    return []


class RuleParseStrategy:
    name = "rules"

    def try_parse(self, text: str) -> list[ActionDescriptor] | None:
        return split(text)


class LlmParseStrategy:
    name = "completion"

    def __init__(self, completion: JsonCompletion) -> None:
        self._completion = completion

    def try_parse(self, text: str) -> list[ActionDescriptor] | None:
        try:
            payload = self._completion.complete_json(PARSE_SYSTEM_PROMPT, text, PARSE_SCHEMA_HINT)
        except Exception as exc:
            logger.warning("Completion parse failed, falling back to rules: %s", exc)
            return None

        descriptors = [
            ActionDescriptor.from_mapping(item) for item in _command_objects(payload) if isinstance(item, dict)
        ]
        if not descriptors:
            logger.info("Completion parse returned no commands, falling back to rules")
            return None
        if all(descriptor.action is Action.UNKNOWN for descriptor in descriptors):
            logger.info("Completion parse could not classify the request, falling back to rules")
            return None
        return inherit_targets(descriptors)


class CommandParser:
    """Try each strategy in order and return the first non-empty result."""

    def __init__(self, strategies: Sequence[ParseStrategy] | None = None) -> None:
        self._strategies = list(strategies) if strategies else [RuleParseStrategy()]

    @property
    def strategy_names(self) -> list[str]:
        return [strategy.name for strategy in self._strategies]

    def parse(self, text: str) -> list[ActionDescriptor]:
        for strategy in self._strategies:
            descriptors = strategy.try_parse(text)
            if descriptors:
                logger.debug("Parsed %r with %s strategy", text, strategy.name)
                return descriptors
        return [ActionDescriptor(action=Action.UNKNOWN, content=text.strip() or None)]
