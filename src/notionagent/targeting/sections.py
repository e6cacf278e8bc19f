"""Section view over a page's blocks and fuzzy section lookup."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Any, Mapping, Sequence

from notionagent.blocks.models import BlockKind, payload_text


SECTION_BOUNDARY_TYPES = frozenset(
    {
        BlockKind.HEADING_1.value,
        BlockKind.HEADING_2.value,
        BlockKind.HEADING_3.value,
        BlockKind.TOGGLE.value,
        BlockKind.CALLOUT.value,
    }
)
_HEADING_LEVELS = {
    BlockKind.HEADING_1.value: 1,
    BlockKind.HEADING_2.value: 2,
    BlockKind.HEADING_3.value: 3,
}
NON_HEADING_LEVEL = 4

SECTION_SYNONYMS: dict[str, tuple[str, ...]] = {
    "my day": ("today", "daily", "day", "my day", "today's tasks", "today's", "for today"),
    "tasks": ("to-do", "todo", "to do", "checklist", "task list", "task", "tasks", "to dos", "to-dos", "todos"),
    "tech": ("technology", "technical", "programming", "development", "dev", "tech tasks", "code", "tech task"),
    "design": ("ui", "ux", "interface", "layout", "design tasks", "mockup", "visual", "design task"),
}
TASK_TERMS = SECTION_SYNONYMS["tasks"]
DAY_TERMS = ("day", "daily", "today")

_WORD_RE = re.compile(r"[\w'-]+")


@dataclass(frozen=True, slots=True)
class SectionChild:
    index: int
    type: str
    text: str


@dataclass(frozen=True, slots=True)
class Section:
    """Consecutive blocks that follow a heading, toggle or callout boundary."""

    title: str
    start_index: int
    end_index: int
    level: int
    children: tuple[SectionChild, ...] = ()
    block_id: str | None = None
    last_block_id: str | None = None


@dataclass(frozen=True, slots=True)
class PageStructure:
    page_type: str
    primary_content_type: str


def build_sections(blocks: Sequence[Mapping[str, Any]]) -> list[Section]:
    starts = [index for index, block in enumerate(blocks) if block.get("type") in SECTION_BOUNDARY_TYPES]
    sections: list[Section] = []
    for position, start in enumerate(starts):
        end = starts[position + 1] - 1 if position + 1 < len(starts) else len(blocks) - 1
        header = blocks[start]
        block_type = str(header.get("type"))
        children = tuple(
            SectionChild(index=index, type=str(blocks[index].get("type", "")), text=payload_text(blocks[index]))
            for index in range(start + 1, end + 1)
        )
        last_id = blocks[end].get("id")
        sections.append(
            Section(
                title=payload_text(header).strip(),
                start_index=start,
                end_index=end,
                level=_HEADING_LEVELS.get(block_type, NON_HEADING_LEVEL),
                children=children,
                block_id=header.get("id"),
                last_block_id=str(last_id) if last_id is not None else None,
            )
        )
    return sections


def _contains_term(text: str, term: str) -> bool:
    return re.search(rf"(?<!\w){re.escape(term)}(?!\w)", text) is not None


def _words(text: str) -> list[str]:
    return [word for word in _WORD_RE.findall(text.lower()) if word]


def _overlap_score(query: str, title: str) -> int:
    title_words = _words(title)
    score = 0
    for word in _words(query):
        if word in title_words:
            score += 2
        elif any(word in title_word or title_word in word for title_word in title_words if len(title_word) > 2 and len(word) > 2):
            score += 1
    return score


def _best_by_overlap(sections: Sequence[Section], query: str) -> Section | None:
    best: Section | None = None
    best_key: tuple[int, int] | None = None
    for section in sections:
        score = _overlap_score(query, section.title)
        if score <= 0:
            continue
        key = (score, -abs(len(section.title) - len(query)))
        if best_key is None or key > best_key:
            best, best_key = section, key
    return best


def _synonym_match(sections: Sequence[Section], query: str) -> Section | None:
    for key, synonyms in SECTION_SYNONYMS.items():
        terms = (key, *synonyms)
        if not any(query == term or _contains_term(query, term) or _contains_term(term, query) for term in terms):
            continue
        matching = [section for section in sections if any(_contains_term(section.title.lower(), term) for term in terms)]
        if not matching:
            continue
        return _best_by_overlap(matching, query) or matching[0]
    return None


def locate(sections: Sequence[Section], query: str | None) -> Section | None:
    """Best section for the query, falling back to the first one; None means page end."""
    if not sections:
        return None
    needle = (query or "").strip().lower()
    if not needle:
        return sections[0]

    for section in sections:
        if section.title.lower() == needle:
            return section

    synonym = _synonym_match(sections, needle)
    if synonym is not None:
        return synonym

    for section in sections:
        title = section.title.lower()
        if title and (title in needle or needle in title):
            return section

    overlap = _best_by_overlap(sections, needle)
    if overlap is not None:
        return overlap

    if any(_contains_term(needle, term) for term in TASK_TERMS):
        for section in sections:
            if any(_contains_term(section.title.lower(), term) for term in DAY_TERMS):
                return section

    return sections[0]


def classify_page_structure(
    blocks: Sequence[Mapping[str, Any]],
    sections: Sequence[Section] | None = None,
) -> PageStructure:
    section_list = list(sections) if sections is not None else build_sections(blocks)
    counts: dict[str, int] = {}
    for block in blocks:
        block_type = str(block.get("type", ""))
        counts[block_type] = counts.get(block_type, 0) + 1

    todo_count = counts.get(BlockKind.TO_DO.value, 0)
    has_task_section = any(
        any(_contains_term(section.title.lower(), term) for term in TASK_TERMS) for section in section_list
    )
    if todo_count > 3 or has_task_section:
        return PageStructure(page_type="task_list", primary_content_type=BlockKind.TO_DO.value)

    if counts.get(BlockKind.BULLETED_LIST_ITEM.value, 0) > counts.get(BlockKind.PARAGRAPH.value, 0):
        return PageStructure(page_type="bullet_notes", primary_content_type=BlockKind.BULLETED_LIST_ITEM.value)

    return PageStructure(page_type="note_page", primary_content_type=BlockKind.PARAGRAPH.value)
