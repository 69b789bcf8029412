"""Turn message content into Rich renderables, one block per visual unit."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from rich.syntax import Syntax
from rich.text import Text

from .segments import CodeBlock, Segment, parse_cached

INLINE_STYLES: dict[str, str] = {
    "plain": "",
    "bold": "bold",
    "inline_code": "bold #e0af68 on #24283b",
}

Block = Text | CodeBlock


def inline_text(segments: Sequence[Segment]) -> Text:
    """Render a run of inline segments into one styled ``Text``."""
    text = Text()
    for segment in segments:
        text.append(segment.text, style=INLINE_STYLES[segment.kind])
    return text


def _prose_block(run: list[Segment]) -> Text | None:
    if not "".join(segment.text for segment in run).strip():
        return None
    text = inline_text(run)
    # Newlines around a fence belong to the fence, not to the prose.
    while text.plain.startswith("\n"):
        text = text[1:]
    text.rstrip()
    return text


def layout_blocks(content: str) -> list[Block]:
    """Group *content* into prose ``Text`` blocks and standalone code blocks.

    Consecutive inline segments share one block; whitespace-only prose
    between fences is dropped.
    """
    blocks: list[Block] = []
    run: list[Segment] = []
    for segment in parse_cached(content):
        if isinstance(segment, CodeBlock):
            prose = _prose_block(run)
            if prose is not None:
                blocks.append(prose)
            run = []
            blocks.append(segment)
        else:
            run.append(segment)
    prose = _prose_block(run)
    if prose is not None:
        blocks.append(prose)
    return blocks


def code_syntax(block: CodeBlock, theme: str = "monokai") -> Syntax:
    """Return a syntax-highlighted renderable for a fenced block."""
    return Syntax(
        block.code,
        block.language or "text",
        theme=theme,
        line_numbers=False,
        word_wrap=True,
    )


def header_text(label: str, timestamp: datetime | None = None) -> Text:
    """Return the bold author line shown above each message."""
    header = Text(label, style="bold")
    if timestamp is not None:
        header.append(f"  {timestamp.astimezone().strftime('%H:%M')}", style="dim italic")
    return header
