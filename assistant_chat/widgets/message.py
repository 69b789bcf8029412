"""Widget for one conversation message."""

from __future__ import annotations

from typing import Any

from rich.text import Text
from textual.app import ComposeResult
from textual.containers import Vertical
from textual.widgets import Static

from ..message_store import Message, Role
from ..rendering import header_text, layout_blocks
from .code_block import CodeBlock


class MessageBubble(Vertical):
    """Render one immutable message as a header plus prose and code blocks."""

    DEFAULT_CSS = """
    MessageBubble {
        height: auto;
    }
    MessageBubble > #header-block {
        padding: 0;
    }
    MessageBubble > .prose-segment {
        height: auto;
        padding: 0;
    }
    """

    def __init__(
        self,
        message: Message,
        label: str = "",
        show_timestamp: bool = True,
        code_theme: str = "monokai",
        **kwargs: Any,
    ) -> None:
        super().__init__(**kwargs)
        self.message = message
        self.label = label or self.default_label(message.role)
        self.show_timestamp = show_timestamp
        self.code_theme = code_theme
        self.add_class(f"role-{message.role.value}")

    @staticmethod
    def default_label(role: Role) -> str:
        return "You" if role is Role.USER else "Assistant"

    def header(self) -> Text:
        timestamp = self.message.created_at if self.show_timestamp else None
        return header_text(self.label, timestamp)

    def compose(self) -> ComposeResult:
        yield Static(self.header(), id="header-block")
        for block in layout_blocks(self.message.content):
            if isinstance(block, Text):
                yield Static(block, classes="prose-segment")
            else:
                yield CodeBlock(block, theme=self.code_theme)

    def on_code_block_copy_requested(self, event: CodeBlock.CopyRequested) -> None:
        """Copy the block's code and confirm with a toast."""
        event.stop()
        self.app.copy_to_clipboard(event.code)
        self.app.notify("Code copied to clipboard.", timeout=2)
