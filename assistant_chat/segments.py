"""Split assistant replies into typed, renderable text segments.

Only three kinds of markup are recognised, in descending precedence:
fenced code blocks, inline code spans and ``**bold**`` emphasis. Anything
else, including unterminated or unmatched markers, is kept as plain text.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from functools import lru_cache
import re
from typing import ClassVar, Union

_FENCE_RE = re.compile(
    r"```(?:(?P<lang>[\w+#.-]+)[ \t]*\r?\n|[ \t]*\r?\n?)(?P<code>.*?)```",
    re.DOTALL,
)
_INLINE_CODE_RE = re.compile(r"`(?P<text>[^`\n]+)`")
_BOLD_RE = re.compile(r"\*\*(?P<text>.+?)\*\*", re.DOTALL)


@dataclass(frozen=True)
class PlainText:
    """Unformatted prose."""

    kind: ClassVar[str] = "plain"
    text: str


@dataclass(frozen=True)
class Bold:
    """Text wrapped in ``**`` markers."""

    kind: ClassVar[str] = "bold"
    text: str


@dataclass(frozen=True)
class InlineCode:
    """Text wrapped in single backticks on one line."""

    kind: ClassVar[str] = "inline_code"
    text: str


@dataclass(frozen=True)
class CodeBlock:
    """Fenced code with an optional language tag."""

    kind: ClassVar[str] = "code_block"
    code: str
    language: str | None = None

    @property
    def text(self) -> str:
        return self.code


Segment = Union[PlainText, Bold, InlineCode, CodeBlock]


def _split(
    text: str,
    pattern: re.Pattern[str],
    on_match: Callable[[re.Match[str]], Segment],
    on_gap: Callable[[str], list[Segment]],
) -> list[Segment]:
    """Cut *text* at every match of *pattern*, delegating the gaps."""
    segments: list[Segment] = []
    cursor = 0
    for match in pattern.finditer(text):
        start, end = match.span()
        if start > cursor:
            segments.extend(on_gap(text[cursor:start]))
        segments.append(on_match(match))
        cursor = end
    if cursor < len(text):
        segments.extend(on_gap(text[cursor:]))
    return segments


def _parse_emphasis(text: str) -> list[Segment]:
    return _split(
        text,
        _BOLD_RE,
        lambda match: Bold(match.group("text")),
        lambda gap: [PlainText(gap)],
    )


def _parse_inline(text: str) -> list[Segment]:
    return _split(
        text,
        _INLINE_CODE_RE,
        lambda match: InlineCode(match.group("text")),
        _parse_emphasis,
    )


def _code_block(match: re.Match[str]) -> Segment:
    return CodeBlock(code=match.group("code").strip(), language=match.group("lang"))


def parse(raw: str) -> list[Segment]:
    """Return the ordered segments of *raw*.

    Never raises: malformed markup degrades to :class:`PlainText`.
    """
    if not raw:
        return []
    return _split(raw, _FENCE_RE, _code_block, _parse_inline)


@lru_cache(maxsize=256)
def parse_cached(raw: str) -> tuple[Segment, ...]:
    """Memoised :func:`parse` keyed on content equality."""
    return tuple(parse(raw))


def literal_text(segments: Iterable[Segment]) -> str:
    """Concatenate the delimiter-stripped text of *segments* in order."""
    return "".join(segment.text for segment in segments)
