"""Completion-assisted block formatting with a rule-based fallback."""

from __future__ import annotations

import logging
from typing import Any, Protocol

from notionagent.blocks.models import LIST_KINDS, to_payloads
from notionagent.blocks.synthesizer import normalize_format, synthesize
from notionagent.blocks.validator import validate_all


logger = logging.getLogger(__name__)

FORMAT_SYSTEM_PROMPT = """You convert text into Notion blocks.
Return a JSON object {"blocks": [...]} where every element is a Notion block object with
"object": "block", "type" and a body keyed by the type containing "rich_text".
Rules:
- Honour the requested format when one is given.
- Only split into several list items when the text is clearly a list (newlines, dashes,
  numbered items, or "a, b, and c"). A comma inside a normal sentence is one item.
- to_do blocks carry "checked": false.
- Code goes into a single code block with a "language" field.
- Toggle blocks put nested blocks in "children".
Do not add commentary."""


class JsonCompletion(Protocol):
    def complete_json(self, system_prompt: str, user_text: str, schema_hint: str | None = None) -> Any: ...


def _extract_blocks(payload: Any) -> list[Any]:
    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        blocks = payload.get("blocks")
        if isinstance(blocks, list):
            return blocks
        if payload.get("type"):
            return [payload]
    return []


class FormatAgent:
    """Ask the completion collaborator for blocks; any failure falls back to the rule synthesizer."""

    def __init__(self, completion: JsonCompletion | None = None) -> None:
        self._completion = completion

    @property
    def uses_completion(self) -> bool:
        return self._completion is not None

    def format(self, content: str, format_type: str | None = None, *, language: str | None = None) -> list[dict[str, Any]]:
        rule_blocks = validate_all(to_payloads(synthesize(content, format_type, language=language)))
        if self._completion is None:
            return rule_blocks

        request = f"Format: {format_type or 'auto'}\nContent:\n{content}"
        try:
            payload = self._completion.complete_json(FORMAT_SYSTEM_PROMPT, request, '{"blocks": [block, ...]}')
        except Exception as exc:
            logger.warning("Format agent completion failed, using rule-based blocks: %s", exc)
            return rule_blocks

        candidates = [block for block in _extract_blocks(payload) if isinstance(block, dict)]
        if not candidates:
            logger.info("Format agent returned no blocks, using rule-based blocks")
            return rule_blocks

        kind = normalize_format(format_type)
        if kind in LIST_KINDS and len(rule_blocks) == 1 and len(candidates) > 1:
            logger.info("Format agent split a single item into %s blocks, keeping one item", len(candidates))
            return rule_blocks

        return validate_all(candidates)
