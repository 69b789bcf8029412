"""Main Textual application for chatting with a hosted completion model."""

from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
import sys
from typing import Any

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Container
from textual.widgets import Button, Footer, Header, Input

from .client import CompletionClient
from .commands import SlashCommand, help_text, parse_slash_command
from .config import load_config, resolve_api_key
from .controller import (
    CompletionBackend,
    ControllerSettings,
    ConversationController,
    UserProfile,
)
from .logging_utils import configure_logging
from .message_store import Message, Role
from .screens import HelpScreen
from .state import ConversationState
from .widgets.activity_bar import ActivityBar
from .widgets.conversation import ConversationView
from .widgets.input_box import InputBox
from .widgets.status_bar import StatusBar

LOGGER = logging.getLogger(__name__)


class AssistantChatApp(App[None]):
    """Chat TUI backed by an OpenAI-compatible completion endpoint."""

    CSS = """
    Screen {
        layout: vertical;
        background: $background;
    }

    #app-root {
        layout: vertical;
        width: 100%;
        height: 1fr;
    }

    #conversation {
        height: 1fr;
        padding: 1;
    }

    InputBox {
        height: auto;
        padding: 0 1 1 1;
        border-top: solid $panel;
        background: $surface;
    }

    #message_input {
        width: 1fr;
    }

    #send_button {
        margin-left: 1;
        min-width: 10;
    }

    #status_bar {
        height: auto;
        padding: 0 1;
        border-top: solid $panel;
        background: $surface;
    }

    #activity_bar {
        height: 1;
        padding: 0 1;
        background: $surface;
    }

    MessageBubble {
        width: 85%;
        margin: 1 0;
        padding: 1 2;
        border: round $panel;
    }

    .message-user {
        background: $primary 20%;
    }

    .message-assistant {
        background: $surface;
    }
    """

    DEFAULT_ACTION_DESCRIPTIONS: dict[str, str] = {
        "send_message": "Send",
        "new_conversation": "New Chat",
        "quit": "Quit",
        "scroll_up": "Scroll Up",
        "scroll_down": "Scroll Down",
        "show_help": "Help",
        "copy_last_message": "Copy Last",
    }

    def __init__(
        self,
        config_path: Path | None = None,
        client: CompletionBackend | None = None,
        environ: dict[str, str] | None = None,
    ) -> None:
        self.config = load_config(config_path)
        configure_logging(self.config["logging"])
        LOGGER.info(
            "app.python",
            extra={
                "event": "app.python",
                "executable": sys.executable,
                "version": sys.version.split()[0],
            },
        )

        completion_cfg = self.config["completion"]
        api_key = resolve_api_key(
            self.config, dict(os.environ) if environ is None else environ
        )
        self.model = str(completion_cfg["model"])
        self._owned_client: CompletionClient | None = None
        if client is None:
            self._owned_client = CompletionClient.from_config(completion_cfg, api_key)
            client = self._owned_client

        user_cfg = self.config["user"]
        self.controller = ConversationController(
            client=client,
            settings=ControllerSettings.from_config(completion_cfg, api_key),
            user=UserProfile(
                display_name=str(user_cfg["display_name"]),
                avatar=str(user_cfg["avatar"]),
            ),
        )
        self._sync_lock = asyncio.Lock()
        self._binding_specs = self._binding_specs_from_config(self.config)
        super().__init__()
        self.title = str(self.config["app"]["title"])

    @classmethod
    def _binding_specs_from_config(
        cls, config: dict[str, dict[str, Any]]
    ) -> list[Binding]:
        keybinds = config.get("keybinds", {})
        bindings: list[Binding] = []
        for action_name, description in cls.DEFAULT_ACTION_DESCRIPTIONS.items():
            binding_key = keybinds.get(action_name)
            if isinstance(binding_key, str) and binding_key.strip():
                bindings.append(
                    Binding(
                        key=binding_key.strip(),
                        action=action_name,
                        description=description,
                        show=True,
                    )
                )
        return bindings

    def compose(self) -> ComposeResult:
        yield Header()
        with Container(id="app-root"):
            yield ConversationView(id="conversation")
            yield ActivityBar(shortcut_hints="/help commands", id="activity_bar")
            yield InputBox()
            yield StatusBar(id="status_bar")
        yield Footer()

    async def on_mount(self) -> None:
        for binding in self._binding_specs:
            self.bind(
                binding.key,
                binding.action,
                description=binding.description,
                show=binding.show,
            )
        self.controller.subscribe(self._on_conversation_changed)
        self._update_status_bar()
        self.query_one("#message_input", Input).focus()
        if not self.controller.settings.has_credential:
            self.sub_title = "No API key configured"

    async def on_unmount(self) -> None:
        """Stop listening and release network resources."""
        self.controller.unsubscribe(self._on_conversation_changed)
        await self.controller.aclose()
        if self._owned_client is not None:
            await self._owned_client.aclose()

    def _on_conversation_changed(self, _controller: ConversationController) -> None:
        self.call_later(self._sync_view)

    def _label_for(self, message: Message) -> str:
        if message.role is Role.ASSISTANT:
            return "Assistant"
        user = self.controller.user
        return f"{user.avatar} {user.display_name}" if user.avatar else user.display_name

    def _accent_for(self, message: Message) -> str:
        ui_cfg = self.config["ui"]
        if message.role is Role.USER:
            return str(ui_cfg["user_message_color"])
        return str(ui_cfg["assistant_message_color"])

    async def _sync_view(self) -> None:
        """Bring the rendered bubbles in line with the controller's messages."""
        async with self._sync_lock:
            conversation = self.query_one(ConversationView)
            messages = self.controller.messages
            rendered = conversation.rendered_ids
            if rendered != [message.id for message in messages[: len(rendered)]]:
                await conversation.remove_children()
                rendered = []
            ui_cfg = self.config["ui"]
            for message in messages[len(rendered) :]:
                await conversation.add_message(
                    message,
                    label=self._label_for(message),
                    show_timestamp=bool(ui_cfg["show_timestamps"]),
                    code_theme=str(ui_cfg["code_theme"]),
                    accent=self._accent_for(message),
                )

            busy = self.controller.status is ConversationState.AWAITING_RESPONSE
            self.query_one(InputBox).set_busy(busy)
            activity = self.query_one(ActivityBar)
            if busy:
                activity.start_activity()
            else:
                activity.stop_activity()
            self._update_status_bar()
            conversation.scroll_end(animate=False)

    def _update_status_bar(self) -> None:
        self.query_one(StatusBar).set_status(
            state=self.controller.status,
            model=self.model,
            message_count=len(self.controller.messages),
            user=self.controller.user.display_name,
            credential=self.controller.settings.has_credential,
        )

    async def on_input_submitted(self, event: Input.Submitted) -> None:
        if event.input.id == "message_input":
            await self.send_user_message()

    async def on_button_pressed(self, event: Button.Pressed) -> None:
        if event.button.id == "send_button":
            await self.send_user_message()

    async def action_send_message(self) -> None:
        await self.send_user_message()

    async def send_user_message(self) -> None:
        """Hand the composed text to the controller or run a slash command."""
        input_box = self.query_one(InputBox)
        if self.controller.status is ConversationState.AWAITING_RESPONSE:
            # Keep the draft; it can be sent once the reply arrives.
            self.notify("Waiting for the current reply.", timeout=2)
            return
        text = input_box.take_text()
        command = parse_slash_command(text)
        if command is not None:
            await self._run_command(command)
            return
        self.controller.send(text)

    async def _run_command(self, command: SlashCommand) -> None:
        name = command.name
        if name == "/new":
            await self.action_new_conversation()
            if command.args:
                self.controller.send(command.args)
        elif name == "/help":
            await self.action_show_help()
        elif name == "/copy":
            await self.action_copy_last_message()
        elif name == "/quit":
            await self.action_quit()

    async def action_new_conversation(self) -> None:
        self.controller.reset()

    async def action_show_help(self) -> None:
        pairs = [(binding.key, binding.description) for binding in self._binding_specs]
        await self.push_screen(HelpScreen(help_text(pairs)))

    async def action_copy_last_message(self) -> None:
        """Put the newest non-empty assistant reply on the clipboard."""
        for message in reversed(self.controller.messages):
            if message.role is Role.ASSISTANT and message.content.strip():
                self.copy_to_clipboard(message.content)
                self.notify("Copied latest assistant message.", timeout=2)
                return
        self.notify("No assistant message available to copy.", timeout=2)

    def action_scroll_up(self) -> None:
        self.query_one(ConversationView).scroll_relative(y=-5, animate=False)

    def action_scroll_down(self) -> None:
        self.query_one(ConversationView).scroll_relative(y=5, animate=False)

    async def action_quit(self) -> None:
        self.exit()
