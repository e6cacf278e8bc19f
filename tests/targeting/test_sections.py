from __future__ import annotations

from typing import Any

from notionagent.targeting.sections import build_sections, classify_page_structure, locate


def _block(block_id: str, block_type: str, text: str = "") -> dict[str, Any]:
    return {"id": block_id, "type": block_type, block_type: {"rich_text": [{"type": "text", "text": {"content": text}}]}}


def _page() -> list[dict[str, Any]]:
    return [
        _block("intro", "paragraph", "Weekly overview"),
        _block("h-day", "heading_2", "My Day"),
        _block("t1", "to_do", "stretch"),
        _block("t2", "to_do", "read"),
        _block("h-tech", "heading_2", "Tech Tasks"),
        _block("t3", "to_do", "fix bug"),
        _block("h-ideas", "heading_3", "Project Ideas"),
        _block("i1", "bulleted_list_item", "garden robot"),
        _block("callout", "callout", "Reminders"),
    ]


def test_build_sections_uses_headings_toggles_and_callouts_as_boundaries() -> None:
    sections = build_sections(_page())

    assert [section.title for section in sections] == ["My Day", "Tech Tasks", "Project Ideas", "Reminders"]
    my_day = sections[0]
    assert (my_day.start_index, my_day.end_index, my_day.level) == (1, 3, 2)
    assert [child.text for child in my_day.children] == ["stretch", "read"]
    assert my_day.block_id == "h-day"
    assert my_day.last_block_id == "t2"
    assert sections[2].level == 3
    assert sections[3].level == 4
    assert sections[3].children == ()
    assert sections[3].last_block_id == "callout"


def test_build_sections_empty_page() -> None:
    assert build_sections([]) == []
    assert build_sections([_block("p", "paragraph", "only text")]) == []


def test_locate_empty_sections_returns_none() -> None:
    assert locate([], "My Day") is None


def test_locate_exact_title_is_case_insensitive() -> None:
    section = locate(build_sections(_page()), "project ideas")

    assert section is not None
    assert section.title == "Project Ideas"


def test_locate_synonym_maps_today_to_my_day() -> None:
    section = locate(build_sections(_page()), "today")

    assert section is not None
    assert section.title == "My Day"


def test_locate_synonym_maps_programming_to_tech() -> None:
    section = locate(build_sections(_page()), "programming")

    assert section is not None
    assert section.title == "Tech Tasks"


def test_locate_substring_containment() -> None:
    section = locate(build_sections(_page()), "the reminders list")

    assert section is not None
    assert section.title == "Reminders"


def test_locate_word_overlap_prefers_more_shared_words() -> None:
    sections = build_sections(
        [
            _block("a", "heading_1", "Reading Notes"),
            _block("b", "heading_1", "Meeting Notes Archive"),
        ]
    )

    section = locate(sections, "archive of notes")

    assert section is not None
    assert section.title == "Meeting Notes Archive"


def test_locate_task_vocabulary_falls_back_to_daily_section() -> None:
    sections = build_sections(
        [
            _block("a", "heading_1", "Backlog"),
            _block("b", "heading_1", "Daily Log"),
        ]
    )

    section = locate(sections, "to do")

    assert section is not None
    assert section.title == "Daily Log"


def test_locate_falls_back_to_first_section() -> None:
    section = locate(build_sections(_page()), "zzz unrelated")

    assert section is not None
    assert section.title == "My Day"


def test_classify_task_list_by_section_title() -> None:
    structure = classify_page_structure(_page())

    assert structure.page_type == "task_list"
    assert structure.primary_content_type == "to_do"


def test_classify_bullet_notes_and_note_page() -> None:
    bullets = [_block(str(i), "bulleted_list_item", f"point {i}") for i in range(3)]
    notes = [_block("p1", "paragraph", "text"), _block("p2", "paragraph", "more")]

    assert classify_page_structure(bullets).page_type == "bullet_notes"
    assert classify_page_structure(notes).page_type == "note_page"
    assert classify_page_structure([]).page_type == "note_page"
