"""Fenced code samples embedded in posts."""

from __future__ import annotations

import re
from collections import Counter
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

_OPEN_FENCE = re.compile(r"^ {0,3}(?P<fence>`{3,}|~{3,})[ \t]*(?P<info>.*?)[ \t]*$")
_INLINE_CODE = re.compile(r"(`+)(?!`)(.+?)(?<!`)\1(?!`)")


@dataclass(frozen=True, slots=True)
class CodeSample:
    """A fenced code block.

    Attributes:
        language: First word of the info string, lowercased ("" when absent)
        code: Block contents without the fences
        line: 1-based line of the opening fence within the body

    """

    language: str
    code: str
    line: int


@dataclass(frozen=True, slots=True)
class _Fence:
    start: int
    end: int  # exclusive; len(lines) when unterminated
    language: str


def _is_closing(line: str, fence: str) -> bool:
    stripped = line.strip()
    if len(line) - len(line.lstrip(" ")) > 3 or not stripped:
        return False
    return set(stripped) == {fence[0]} and len(stripped) >= len(fence)


def _iter_fences(lines: list[str]) -> Iterator[_Fence]:
    index = 0
    while index < len(lines):
        match = _OPEN_FENCE.match(lines[index])
        if match is None or (match["fence"][0] == "`" and "`" in match["info"]):
            index += 1
            continue

        fence = match["fence"]
        info = match["info"].split()
        language = info[0].lower().lstrip("{.").rstrip("}") if info else ""

        close = index + 1
        while close < len(lines) and not _is_closing(lines[close], fence):
            close += 1

        yield _Fence(start=index, end=close, language=language)
        index = close + 1


def extract_code_samples(body: str) -> list[CodeSample]:
    """Return the fenced code blocks of ``body`` in document order.

    An unterminated fence runs to the end of the text.
    """
    lines = body.splitlines()
    return [
        CodeSample(
            language=fence.language,
            code="\n".join(lines[fence.start + 1 : fence.end]),
            line=fence.start + 1,
        )
        for fence in _iter_fences(lines)
    ]


def strip_code(body: str) -> str:
    """Blank out fenced blocks and inline code spans, preserving line numbers."""
    lines = body.splitlines()
    for fence in _iter_fences(lines):
        for index in range(fence.start, min(fence.end + 1, len(lines))):
            lines[index] = ""
    return "\n".join(_INLINE_CODE.sub("", line) for line in lines)


def language_counts(samples: Iterable[CodeSample]) -> Counter[str]:
    """Count samples per language."""
    return Counter(sample.language for sample in samples)


__all__ = ["CodeSample", "extract_code_samples", "language_counts", "strip_code"]
