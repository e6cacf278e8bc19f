"""Code language tags: alias normalization, fenced-code extraction, content heuristics."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import Callable

from notionagent.blocks.models import PLAIN_TEXT_LANGUAGE


LANGUAGE_ALIASES: dict[str, str] = {
    "js": "javascript",
    "javascript": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "typescript": "typescript",
    "tsx": "typescript",
    "py": "python",
    "python": "python",
    "python3": "python",
    "html": "html",
    "css": "css",
    "sass": "sass",
    "scss": "sass",
    "bash": "bash",
    "sh": "bash",
    "shell": "bash",
    "zsh": "bash",
    "powershell": "powershell",
    "ps": "powershell",
    "cmd": "batch",
    "batch": "batch",
    "java": "java",
    "c": "c",
    "cpp": "c++",
    "c++": "c++",
    "csharp": "c#",
    "c#": "c#",
    "cs": "c#",
    "go": "go",
    "ruby": "ruby",
    "rb": "ruby",
    "rust": "rust",
    "rs": "rust",
    "php": "php",
    "swift": "swift",
    "kotlin": "kotlin",
    "scala": "scala",
    "json": "json",
    "yaml": "yaml",
    "yml": "yaml",
    "xml": "xml",
    "sql": "sql",
    "markdown": "markdown",
    "md": "markdown",
}

FENCE_MARKER = "```"
_FENCE_RE = re.compile(r"```([\s\S]*?)```")
_TAG_RE = re.compile(r"([\w+#-]+)([ \t]*\n|[ \t]+)")


@dataclass(frozen=True, slots=True)
class FencedCode:
    language: str | None
    code: str
    start: int
    end: int


def normalize_language(tag: str | None) -> str:
    if tag is None:
        return PLAIN_TEXT_LANGUAGE
    cleaned = tag.strip().lower()
    if not cleaned or cleaned in {"plain", "text", "plaintext", "plain_text", PLAIN_TEXT_LANGUAGE}:
        return PLAIN_TEXT_LANGUAGE
    return LANGUAGE_ALIASES.get(cleaned, cleaned)


def has_fence(text: str) -> bool:
    return FENCE_MARKER in text


def extract_fenced_code(text: str) -> FencedCode | None:
    """Return the first fenced block; the tag counts when followed by a newline or is a known alias."""
    match = _FENCE_RE.search(text)
    if match is None:
        return None

    body = match.group(1)
    language: str | None = None
    tag_match = _TAG_RE.match(body)
    if tag_match is not None:
        tag = tag_match.group(1).lower()
        if "\n" in tag_match.group(2) or tag in LANGUAGE_ALIASES:
            language = LANGUAGE_ALIASES.get(tag, tag)
            body = body[tag_match.end():]
    elif body.strip().lower() in LANGUAGE_ALIASES and "\n" not in body.strip():
        # ```python``` with nothing inside
        language = LANGUAGE_ALIASES[body.strip().lower()]
        body = ""

    return FencedCode(language=language, code=body.strip("\n").rstrip(), start=match.start(), end=match.end())


def strip_fences(text: str) -> str:
    return re.sub(r"```[\w+#-]*", "", text).strip()


def _is_typescript(code: str) -> bool:
    return (
        "interface " in code
        or re.search(r":\s*(?:string|number|boolean|any)\b", code) is not None
        or "<T>" in code
    )


def _looks_like_script(code: str) -> bool:
    return (
        "function " in code
        or re.search(r"\b(?:const|let|var)\s+\w", code) is not None
        or "console.log" in code
        or re.search(r"\(\s*[\w\s,]*\)\s*=>", code) is not None
    )


def _looks_like_python(code: str) -> bool:
    return (
        "def " in code
        or re.search(r"^\s*(?:from\s+[\w.]+\s+)?import\s+[\w.]+", code, re.MULTILINE) is not None
        or "print(" in code
        or re.search(r":\s*\r?\n", code) is not None
        or re.search(r"^\s*#(?!include|!).*?\r?\n", code, re.MULTILINE) is not None
    )


def _looks_like_html(code: str) -> bool:
    return (
        re.search(r"<html>|<body>|<div>|<span>|<p>", code, re.IGNORECASE) is not None
        or re.search(r"<[a-z]+[^>]*>.*?</[a-z]+>", code, re.IGNORECASE | re.DOTALL) is not None
        or "<!DOCTYPE" in code
    )


def _looks_like_java(code: str) -> bool:
    return (
        "public class " in code
        or "public static void main" in code
        or re.search(r"\b\w+\s+\w+\s*=\s*new\s+\w+", code) is not None
        or "System.out.println" in code
    )


def _looks_like_csharp(code: str) -> bool:
    return (
        "using System" in code
        or re.search(r"\bnamespace\s+[\w.]+", code) is not None
        or "Console.WriteLine" in code
    )


def _looks_like_cpp(code: str) -> bool:
    return (
        re.search(r"#include\s+[<\"][\w./]+[>\"]", code) is not None
        or re.search(r"\bint\s+main\s*\(", code) is not None
        or re.search(r"\b(?:int|void|float|double|char)\s+\w+\s*\(", code) is not None
    )


def _looks_like_css(code: str) -> bool:
    return re.search(r"[\w\s.#-]+\s*\{[^{}]*[:;][^{}]*\}", code) is not None


def _looks_like_sql(code: str) -> bool:
    return (
        re.search(r"\bSELECT\s+|\bCREATE\s+TABLE\b|\bINSERT\s+INTO\b|\bDELETE\s+FROM\b", code, re.IGNORECASE)
        is not None
        or re.search(r"\bUPDATE\s+\w+\s+SET\b", code, re.IGNORECASE) is not None
        or re.search(r"\bFROM\s+\w+\s+WHERE\b", code, re.IGNORECASE) is not None
    )


def _looks_like_shell(code: str) -> bool:
    return (
        re.match(r"^\s*\$", code) is not None
        or re.match(r"^\s*#!/bin/(?:ba)?sh", code) is not None
        or re.search(r"^\s*(?:cd|ls|mkdir|rm|cp|mv|echo|cat|sudo|export)\b", code, re.MULTILINE) is not None
    )


def _looks_like_json(code: str) -> bool:
    return re.match(r"^\s*[\[{][\s\S]*[\]}]\s*$", code) is not None and '"' in code and ":" in code


def _looks_like_yaml(code: str) -> bool:
    return re.match(r"^\s*[\w-]+:\s*\S", code) is not None and "{" not in code and "}" not in code


def _has_braces_and_parens(code: str) -> bool:
    return all(symbol in code for symbol in "{}()")


# Ordered: the first matching signature wins.
_HEURISTICS: tuple[tuple[str, Callable[[str], bool]], ...] = (
    ("csharp", _looks_like_csharp),
    ("java", _looks_like_java),
    ("script", _looks_like_script),
    ("python", _looks_like_python),
    ("html", _looks_like_html),
    ("c++", _looks_like_cpp),
    ("sql", _looks_like_sql),
    ("json", _looks_like_json),
    ("css", _looks_like_css),
    ("bash", _looks_like_shell),
    ("yaml", _looks_like_yaml),
    ("script", _has_braces_and_parens),
)


def detect_language(code: str) -> str:
    """Guess a language tag from keyword and symbol signatures."""
    text = code.strip()
    if not text:
        return PLAIN_TEXT_LANGUAGE

    for name, predicate in _HEURISTICS:
        if not predicate(text):
            continue
        if name == "script":
            return "typescript" if _is_typescript(text) else "javascript"
        if name == "csharp":
            return "c#"
        return name
    return PLAIN_TEXT_LANGUAGE
