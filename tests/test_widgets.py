"""Unit tests for individual widget classes."""

from __future__ import annotations

import unittest

from assistant_chat import segments
from assistant_chat.message_store import Message, Role
from assistant_chat.state import ConversationState

try:
    from textual.app import App, ComposeResult
    from textual.widgets import Button, Input, Label, Static

    from assistant_chat.widgets.activity_bar import ActivityBar
    from assistant_chat.widgets.code_block import CodeBlock
    from assistant_chat.widgets.conversation import ConversationView
    from assistant_chat.widgets.input_box import InputBox
    from assistant_chat.widgets.message import MessageBubble
    from assistant_chat.widgets.status_bar import StatusBar
except ModuleNotFoundError:
    App = None  # type: ignore[assignment,misc]
    ActivityBar = None  # type: ignore[assignment,misc]
    CodeBlock = None  # type: ignore[assignment,misc]
    ConversationView = None  # type: ignore[assignment,misc]
    InputBox = None  # type: ignore[assignment,misc]
    MessageBubble = None  # type: ignore[assignment,misc]
    StatusBar = None  # type: ignore[assignment,misc]


def _message(role: Role, content: str, message_id: int = 1) -> Message:
    return Message(id=message_id, role=role, content=content)


@unittest.skipIf(MessageBubble is None, "textual is not installed")
class MessageBubbleTests(unittest.IsolatedAsyncioTestCase):
    """Validate MessageBubble labels, classes and block composition."""

    def test_role_class_applied(self) -> None:
        bubble = MessageBubble(_message(Role.ASSISTANT, "hi"))
        self.assertIn("role-assistant", bubble.classes)

    def test_default_labels(self) -> None:
        self.assertEqual(MessageBubble(_message(Role.USER, "hi")).label, "You")
        self.assertEqual(
            MessageBubble(_message(Role.ASSISTANT, "hi")).label, "Assistant"
        )

    def test_custom_label_used(self) -> None:
        bubble = MessageBubble(_message(Role.USER, "hi"), label="Ada")
        self.assertTrue(bubble.header().plain.startswith("Ada"))

    def test_header_without_timestamp(self) -> None:
        bubble = MessageBubble(
            _message(Role.USER, "hi"), label="Ada", show_timestamp=False
        )
        self.assertEqual(bubble.header().plain, "Ada")

    async def test_code_fences_become_code_block_widgets(self) -> None:
        message = _message(
            Role.ASSISTANT, "Try this:\n```python\nprint('hi')\n```\nDone."
        )

        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield MessageBubble(message, id="bubble")

        app = _TestApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            bubble = app.query_one("#bubble", MessageBubble)
            code_blocks = list(bubble.query(CodeBlock))
            prose = list(bubble.query(".prose-segment"))
            self.assertEqual(len(code_blocks), 1)
            self.assertEqual(
                code_blocks[0].block,
                segments.CodeBlock(code="print('hi')", language="python"),
            )
            self.assertEqual(len(prose), 2)


@unittest.skipIf(CodeBlock is None, "textual is not installed")
class CodeBlockWidgetTests(unittest.IsolatedAsyncioTestCase):
    """Validate CodeBlock widget composition and copy message."""

    def test_block_and_theme_stored(self) -> None:
        block = segments.CodeBlock(code="print('hi')", language="python")
        widget = CodeBlock(block, theme="ansi_dark")
        self.assertIs(widget.block, block)
        self.assertEqual(widget.theme, "ansi_dark")

    async def test_language_label_falls_back_to_code(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield CodeBlock(segments.CodeBlock(code="x"), id="cb")

        app = _TestApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            label = app.query_one("#lang-label", Label)
            self.assertIn("code", str(label.render()))

    async def test_copy_requested_message_posted(self) -> None:
        received: list[str] = []

        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield CodeBlock(
                    segments.CodeBlock(code="x = 1", language="python"), id="cb"
                )

            def on_code_block_copy_requested(
                self, event: CodeBlock.CopyRequested
            ) -> None:
                received.append(event.code)

        app = _TestApp()
        async with app.run_test() as pilot:
            await pilot.click("#copy-btn")
            await pilot.pause()
        self.assertEqual(received, ["x = 1"])


@unittest.skipIf(ConversationView is None, "textual is not installed")
class ConversationViewTests(unittest.IsolatedAsyncioTestCase):
    """Validate ConversationView message mounting behavior."""

    async def test_add_message_mounts_bubbles_in_order(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield ConversationView(id="conv")

        app = _TestApp()
        async with app.run_test() as pilot:
            view = app.query_one("#conv", ConversationView)
            first = await view.add_message(_message(Role.USER, "Hi", 1))
            second = await view.add_message(
                _message(Role.ASSISTANT, "Hello", 2), label="Bot", accent="#9ece6a"
            )
            await pilot.pause()

            self.assertIsInstance(first, MessageBubble)
            self.assertIn("message-user", first.classes)
            self.assertIn("message-assistant", second.classes)
            self.assertEqual(second.label, "Bot")
            self.assertEqual(second.styles.border_left[0], "thick")
            self.assertEqual(view.rendered_ids, [1, 2])

            await view.remove_children()
            self.assertEqual(view.rendered_ids, [])


@unittest.skipIf(InputBox is None, "textual is not installed")
class InputBoxTests(unittest.IsolatedAsyncioTestCase):
    """Validate the composer row."""

    async def test_take_text_returns_and_clears(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield InputBox()

        app = _TestApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            field = app.query_one("#message_input", Input)
            field.value = "draft"
            self.assertEqual(app.query_one(InputBox).take_text(), "draft")
            self.assertEqual(field.value, "")

    async def test_set_busy_disables_send_button_only(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield InputBox()

        app = _TestApp()
        async with app.run_test() as pilot:
            await pilot.pause()
            box = app.query_one(InputBox)
            box.set_busy(True)
            self.assertTrue(app.query_one("#send_button", Button).disabled)
            self.assertFalse(app.query_one("#message_input", Input).disabled)
            box.set_busy(False)
            self.assertFalse(app.query_one("#send_button", Button).disabled)


@unittest.skipIf(StatusBar is None, "textual is not installed")
class StatusBarTests(unittest.IsolatedAsyncioTestCase):
    """Validate StatusBar child labels and set_status logic."""

    def test_status_bar_is_static_subclass(self) -> None:
        self.assertTrue(issubclass(StatusBar, Static))

    async def test_set_status_updates_labels(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield StatusBar(id="sb")

        app = _TestApp()
        async with app.run_test() as pilot:
            bar = app.query_one("#sb", StatusBar)
            bar.set_status(
                state=ConversationState.AWAITING_RESPONSE,
                model="test-model",
                message_count=3,
                user="Ada",
            )
            await pilot.pause()
            self.assertIn("waiting", str(app.query_one("#status_state", Label).render()))
            self.assertIn(
                "test-model", str(app.query_one("#status_model", Label).render())
            )
            self.assertIn(
                "Messages: 3", str(app.query_one("#status_messages", Label).render())
            )
            self.assertIn("Ada", str(app.query_one("#status_user", Label).render()))

    async def test_missing_credential_shown(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield StatusBar(id="sb")

        app = _TestApp()
        async with app.run_test() as pilot:
            app.query_one("#sb", StatusBar).set_status(
                state=ConversationState.IDLE,
                model="m",
                message_count=0,
                user="You",
                credential=False,
            )
            await pilot.pause()
            self.assertIn(
                "no api key", str(app.query_one("#status_state", Label).render())
            )


@unittest.skipIf(ActivityBar is None, "textual is not installed")
class ActivityBarTests(unittest.IsolatedAsyncioTestCase):
    """Validate ActivityBar animation state changes."""

    def test_shortcut_hints_stored(self) -> None:
        bar = ActivityBar(shortcut_hints="/help commands")
        self.assertEqual(bar._shortcut_hints, "/help commands")
        self.assertFalse(bar.running)

    async def test_start_and_stop_toggle_running(self) -> None:
        class _TestApp(App[None]):
            def compose(self) -> ComposeResult:
                yield ActivityBar(shortcut_hints="hints", id="ab")

        app = _TestApp()
        async with app.run_test() as pilot:
            bar = app.query_one("#ab", ActivityBar)
            bar.start_activity()
            bar.start_activity()
            await pilot.pause()
            self.assertTrue(bar.running)
            self.assertIn(
                "Assistant is typing",
                str(app.query_one("#activity_left", Label).render()),
            )
            bar.stop_activity()
            await pilot.pause()
            self.assertFalse(bar.running)
            self.assertEqual(
                str(app.query_one("#activity_left", Label).render()).strip(), ""
            )


if __name__ == "__main__":
    unittest.main()
