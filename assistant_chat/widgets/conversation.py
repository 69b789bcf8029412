"""Scrollable conversation view widget."""

from __future__ import annotations

from textual.containers import VerticalScroll

from ..message_store import Message
from .message import MessageBubble


class ConversationView(VerticalScroll):
    """A scrollable container that hosts message bubbles."""

    async def add_message(
        self,
        message: Message,
        label: str = "",
        show_timestamp: bool = True,
        code_theme: str = "monokai",
        accent: str | None = None,
    ) -> MessageBubble:
        """Create, mount, and scroll to a new message bubble."""
        bubble = MessageBubble(
            message,
            label=label,
            show_timestamp=show_timestamp,
            code_theme=code_theme,
        )
        bubble.add_class(f"message-{message.role.value}")
        if accent:
            bubble.styles.border_left = ("thick", accent)
        await self.mount(bubble)
        self.scroll_end(animate=True)
        return bubble

    @property
    def rendered_ids(self) -> list[int]:
        """Ids of the messages currently shown, in display order."""
        return [
            child.message.id for child in self.children if isinstance(child, MessageBubble)
        ]
