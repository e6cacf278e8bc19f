from __future__ import annotations

import pytest

from notionagent.blocks.enumeration import has_explicit_cue, looks_like_items, split_list_items
from notionagent.blocks.languages import detect_language, extract_fenced_code, normalize_language


@pytest.mark.parametrize(
    ("tag", "expected"),
    [
        ("py", "python"),
        ("TS", "typescript"),
        ("sh", "bash"),
        ("cs", "c#"),
        ("yml", "yaml"),
        ("", "plain text"),
        (None, "plain text"),
        ("plain_text", "plain text"),
        ("haskell", "haskell"),
    ],
)
def test_normalize_language_aliases(tag: str | None, expected: str) -> None:
    assert normalize_language(tag) == expected


def test_extract_fenced_code_reads_tag_and_body() -> None:
    fenced = extract_fenced_code("before ```python\nx = 1\n``` after")

    assert fenced is not None
    assert fenced.language == "python"
    assert fenced.code == "x = 1"
    assert fenced.start == len("before ")


def test_extract_fenced_code_without_tag() -> None:
    fenced = extract_fenced_code("```\nSELECT 1\n```")

    assert fenced is not None
    assert fenced.language is None
    assert fenced.code == "SELECT 1"


def test_extract_fenced_code_returns_none_without_fence() -> None:
    assert extract_fenced_code("no code here") is None


@pytest.mark.parametrize(
    ("code", "expected"),
    [
        ("using System;\nConsole.WriteLine(\"hi\");", "c#"),
        ("public class Main { public static void main(String[] args) {} }", "java"),
        ("const x = 1;\nconsole.log(x);", "javascript"),
        ("interface User { name: string }\nconst u: User = { name: 'a' };", "typescript"),
        ("import os\nprint(os.getcwd())", "python"),
        ("<div>hello</div>", "html"),
        ("#include <stdio.h>\nint main() { return 0; }", "c++"),
        ("SELECT id FROM users WHERE active = 1", "sql"),
        ('{"name": "value"}', "json"),
        ("body { color: red; }", "css"),
        ("$ ls -la", "bash"),
        ("name: app\nversion: 2", "yaml"),
        ("hello world", "plain text"),
    ],
)
def test_detect_language_signatures(code: str, expected: str) -> None:
    assert detect_language(code) == expected


def test_explicit_cue_detection() -> None:
    assert has_explicit_cue("eggs, milk, and bread")
    assert has_explicit_cue("wake up, 2. stretch")
    assert not has_explicit_cue("eggs, milk, bread")


def test_looks_like_items_rejects_prose() -> None:
    assert looks_like_items(["item one", "item two"])
    assert not looks_like_items(["hey", "let's connect"])
    assert not looks_like_items(["I went to the store", "then home"])
    assert not looks_like_items(["only one"])


def test_split_list_items_keeps_prose_without_format_cue() -> None:
    assert split_list_items("item one, item two") == ["item one, item two"]
    assert split_list_items("item one, item two", format_cue=True) == ["item one", "item two"]


def test_split_list_items_empty_text() -> None:
    assert split_list_items("   ") == []
