"""Activity bar showing a typing animation and keyboard shortcut hints."""

from __future__ import annotations

from typing import Any

from textual.app import ComposeResult
from textual.timer import Timer
from textual.widgets import Label, Static

_TYPING_FRAMES: tuple[str, ...] = ("●··", "·●·", "··●", "·●·")


class ActivityBar(Static):
    """Left: "assistant is typing" animation. Right: shortcut hints."""

    DEFAULT_CSS = """
    ActivityBar {
        layout: horizontal;
        height: 1;
        padding: 0 1;
    }
    ActivityBar #activity_left {
        width: 1fr;
        color: $text-muted;
    }
    ActivityBar #activity_right {
        width: auto;
        text-align: right;
    }
    """

    def __init__(self, shortcut_hints: str = "", **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self._shortcut_hints = shortcut_hints
        self._animation_timer: Timer | None = None
        self._frame_index = 0
        self._label = "Assistant is typing"

    @property
    def running(self) -> bool:
        return self._animation_timer is not None

    def compose(self) -> ComposeResult:
        yield Label("", id="activity_left")
        yield Label(self._shortcut_hints, id="activity_right")

    def start_activity(self, label: str = "Assistant is typing") -> None:
        """Begin the typing animation; repeated calls are ignored."""
        if self.running:
            return
        self._label = label
        self._frame_index = 0
        self._tick()
        self._animation_timer = self.set_interval(0.3, self._tick)

    def stop_activity(self) -> None:
        """Halt the timer and blank the typing indicator."""
        timer = self._animation_timer
        self._animation_timer = None
        if timer is not None:
            timer.stop()
        self.query_one("#activity_left", Label).update("")

    def _tick(self) -> None:
        frame = _TYPING_FRAMES[self._frame_index % len(_TYPING_FRAMES)]
        self._frame_index += 1
        self.query_one("#activity_left", Label).update(f"{self._label} {frame}")
