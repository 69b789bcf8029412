"""Status bar widget for conversation telemetry."""

from __future__ import annotations

from textual.app import ComposeResult
from textual.widgets import Label, Static

from ..state import ConversationState

_STATE_LABELS: dict[ConversationState, str] = {
    ConversationState.IDLE: "🟢 ready",
    ConversationState.AWAITING_RESPONSE: "🟡 waiting",
}


class StatusBar(Static):
    """One-line summary of the conversation and its backend.

    Layout:
        🟢 ready  |  Model: llama-3.3-70b-versatile  |  Messages: 4  |  You
    """

    DEFAULT_CSS = """
    StatusBar {
        layout: horizontal;
        height: auto;
    }
    StatusBar Label {
        margin-right: 1;
    }
    StatusBar #status_user {
        color: $text-muted;
    }
    """

    def compose(self) -> ComposeResult:
        yield Label(_STATE_LABELS[ConversationState.IDLE], id="status_state")
        yield Label("|", id="status_sep1")
        yield Label("Model: -", id="status_model")
        yield Label("|", id="status_sep2")
        yield Label("Messages: 0", id="status_messages")
        yield Label("|", id="status_sep3")
        yield Label("", id="status_user")

    def set_status(
        self,
        *,
        state: ConversationState,
        model: str,
        message_count: int,
        user: str,
        credential: bool = True,
    ) -> None:
        """Update all status segment labels."""
        state_text = _STATE_LABELS[state] if credential else "🔴 no api key"
        self.query_one("#status_state", Label).update(state_text)
        self.query_one("#status_model", Label).update(f"Model: {model}")
        self.query_one("#status_messages", Label).update(f"Messages: {message_count}")
        self.query_one("#status_user", Label).update(user)
