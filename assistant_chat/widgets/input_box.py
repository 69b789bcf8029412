"""Input row containing the message field and send button."""

from __future__ import annotations

from textual.containers import Horizontal
from textual.widgets import Button, Input


class InputBox(Horizontal):
    """Single-line composer with a send button."""

    def compose(self):  # type: ignore[override]
        yield Input(
            placeholder="Ask anything... (/help for commands)",
            id="message_input",
        )
        yield Button("Send", id="send_button", variant="success")

    def set_busy(self, busy: bool) -> None:
        """Disable sending while a reply is pending; typing stays enabled."""
        self.query_one("#send_button", Button).disabled = busy

    def take_text(self) -> str:
        """Return the composed text and clear the field."""
        field = self.query_one("#message_input", Input)
        value = field.value
        field.value = ""
        return value
