"""Fenced code block widget with a copy-to-clipboard button."""

from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.containers import Horizontal, Vertical
from textual.message import Message
from textual.widgets import Button, Label, Static

from .. import segments
from ..rendering import code_syntax


class CodeBlock(Vertical):
    """Render a code segment with a language label and a copy button."""

    DEFAULT_CSS = """
    CodeBlock {
        height: auto;
        margin: 1 0;
        border: solid $panel;
        background: $surface-darken-1;
    }
    CodeBlock > #code-header {
        height: 1;
        padding: 0 1;
        background: $panel;
    }
    CodeBlock > #code-header > #lang-label {
        width: 1fr;
        color: $text-muted;
    }
    CodeBlock > #code-header > #copy-btn {
        width: auto;
        min-width: 6;
        height: 1;
        border: none;
        background: $panel;
        color: $text;
        padding: 0 1;
    }
    CodeBlock > #code-header > #copy-btn:hover {
        background: $accent;
        color: $text;
    }
    CodeBlock > #code-body {
        height: auto;
        padding: 0 1;
    }
    """

    class CopyRequested(Message):
        """Carries the block's code to whoever handles copying."""

        def __init__(self, code: str) -> None:
            super().__init__()
            self.code = code

    def __init__(
        self, block: segments.CodeBlock, theme: str = "monokai", **kwargs: Any
    ) -> None:
        super().__init__(**kwargs)
        self.block = block
        self.theme = theme

    def compose(self) -> ComposeResult:
        with Horizontal(id="code-header"):
            yield Label(self.block.language or "code", id="lang-label")
            yield Button("copy", id="copy-btn")
        yield Static(code_syntax(self.block, self.theme), id="code-body")

    def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "copy-btn":
            event.stop()
            self.post_message(self.CopyRequested(self.block.code))
