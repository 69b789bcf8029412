"""Tests for turning parsed segments into Rich renderables."""

from __future__ import annotations

from datetime import datetime, timezone
import re
import unittest

from rich.text import Text

from assistant_chat.rendering import (
    code_syntax,
    header_text,
    inline_text,
    layout_blocks,
)
from assistant_chat.segments import Bold, CodeBlock, InlineCode, PlainText


def _styled(text: Text, style: str) -> list[str]:
    return [text.plain[span.start : span.end] for span in text.spans if span.style == style]


class InlineTextTests(unittest.TestCase):
    def test_markers_removed_and_styles_applied(self) -> None:
        text = inline_text(
            [PlainText("Use "), InlineCode("pip"), PlainText(" "), Bold("now")]
        )
        self.assertEqual(text.plain, "Use pip now")
        self.assertEqual(_styled(text, "bold"), ["now"])
        self.assertEqual(len(text.spans), 2)


class LayoutBlocksTests(unittest.TestCase):
    def test_plain_message_is_one_block(self) -> None:
        blocks = layout_blocks("Just text")
        self.assertEqual(len(blocks), 1)
        self.assertIsInstance(blocks[0], Text)
        self.assertEqual(blocks[0].plain, "Just text")

    def test_code_fence_splits_prose(self) -> None:
        blocks = layout_blocks("Hi **there**\n```py\nx = 1\n```\nbye")
        self.assertEqual(len(blocks), 3)
        first, code, last = blocks
        assert isinstance(first, Text) and isinstance(last, Text)
        self.assertEqual(first.plain, "Hi there")
        self.assertEqual(_styled(first, "bold"), ["there"])
        self.assertEqual(code, CodeBlock(code="x = 1", language="py"))
        self.assertEqual(last.plain, "bye")

    def test_whitespace_between_fences_dropped(self) -> None:
        blocks = layout_blocks("```\na\n```\n\n```\nb\n```")
        self.assertEqual(
            blocks, [CodeBlock(code="a"), CodeBlock(code="b")]
        )

    def test_empty_content_has_no_blocks(self) -> None:
        self.assertEqual(layout_blocks(""), [])


class CodeSyntaxTests(unittest.TestCase):
    def test_keeps_code_verbatim(self) -> None:
        syntax = code_syntax(CodeBlock(code="print('hi')", language="python"))
        self.assertEqual(syntax.code, "print('hi')")

    def test_untagged_block_still_renders(self) -> None:
        syntax = code_syntax(CodeBlock(code="plain"), theme="ansi_dark")
        self.assertEqual(syntax.code, "plain")


class HeaderTextTests(unittest.TestCase):
    def test_label_only(self) -> None:
        self.assertEqual(header_text("Ada").plain, "Ada")

    def test_label_with_time(self) -> None:
        header = header_text("Ada", datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc))
        self.assertRegex(header.plain, re.compile(r"^Ada  \d{2}:\d{2}$"))


if __name__ == "__main__":
    unittest.main()
