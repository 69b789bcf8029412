"""Single-thread conversation controller with optimistic updates."""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from dataclasses import dataclass
import logging
from typing import Any, Protocol

from .config import DEFAULT_FAILURE_NOTICE, DEFAULT_UNAVAILABLE_NOTICE
from .exceptions import ConfigurationError
from .message_store import Message, MessageStore, Role
from .state import ConversationState, StateManager

LOGGER = logging.getLogger(__name__)


class CompletionBackend(Protocol):
    """Anything that turns an ordered role/content list into a reply."""

    async def complete(self, messages: list[dict[str, str]]) -> str: ...


@dataclass(frozen=True)
class UserProfile:
    """Current-user descriptor, used only for display."""

    display_name: str = "You"
    avatar: str = ""


@dataclass(frozen=True)
class ControllerSettings:
    """Read-only inputs the controller needs besides its client."""

    system_prompt: str
    has_credential: bool
    unavailable_notice: str = DEFAULT_UNAVAILABLE_NOTICE
    failure_notice: str = DEFAULT_FAILURE_NOTICE

    @classmethod
    def from_config(
        cls, completion_cfg: dict[str, Any], api_key: str
    ) -> ControllerSettings:
        return cls(
            system_prompt=str(completion_cfg["system_prompt"]),
            has_credential=bool(api_key.strip()),
            unavailable_notice=str(completion_cfg["unavailable_notice"]),
            failure_notice=str(completion_cfg["failure_notice"]),
        )


Listener = Callable[["ConversationController"], None]


class ConversationController:
    """Own one conversation: its messages, its request and its state.

    ``send`` appends the user message immediately and returns the request
    task without awaiting it; the reply (or a notice standing in for it)
    is appended when the task resolves. Failures never reach the caller.

    ``reset`` does not cancel an in-flight request. Each request remembers
    the generation it was started in and its result is dropped if a reset
    happened meanwhile.
    """

    def __init__(
        self,
        client: CompletionBackend,
        settings: ControllerSettings,
        user: UserProfile | None = None,
    ) -> None:
        self._client = client
        self.settings = settings
        self.user = user or UserProfile()
        self._store = MessageStore()
        self._state = StateManager()
        self._generation = 0
        self._pending: asyncio.Task[None] | None = None
        self._in_flight: set[asyncio.Task[None]] = set()
        self._listeners: list[Listener] = []

    @property
    def messages(self) -> tuple[Message, ...]:
        return self._store.messages

    @property
    def status(self) -> ConversationState:
        return self._state.state

    @property
    def pending_task(self) -> asyncio.Task[None] | None:
        """Return the request task of the current conversation, if any."""
        return self._pending

    def subscribe(self, listener: Listener) -> None:
        """Call *listener* with this controller after every change."""
        self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        try:
            self._listeners.remove(listener)
        except ValueError:
            pass

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:  # noqa: BLE001 - a broken view must not break the chat.
                LOGGER.error(
                    "chat.listener.failed",
                    extra={"event": "chat.listener.failed"},
                    exc_info=True,
                )

    def send(self, text: str) -> asyncio.Task[None] | None:
        """Submit *text* as the next user turn.

        Blank text, or a send while a reply is pending, is ignored and
        returns ``None``. Scheduling the request needs a running event loop;
        the missing-credential path does not.
        """
        normalized = text.strip()
        if not normalized:
            LOGGER.debug(
                "chat.send.ignored", extra={"event": "chat.send.ignored", "reason": "empty"}
            )
            return None
        if not self._state.can_send_message():
            LOGGER.debug(
                "chat.send.ignored",
                extra={"event": "chat.send.ignored", "reason": "awaiting_response"},
            )
            return None

        if not self.settings.has_credential:
            self._store.append(Role.USER, normalized)
            LOGGER.warning(
                "chat.request.unconfigured",
                extra={"event": "chat.request.unconfigured"},
            )
            self._store.append(Role.ASSISTANT, self.settings.unavailable_notice)
            self._notify()
            return None

        loop = asyncio.get_running_loop()
        self._store.append(Role.USER, normalized)
        request_messages = self._store.build_request_messages(self.settings.system_prompt)
        self._state.transition_to(ConversationState.AWAITING_RESPONSE)
        task = loop.create_task(self._complete(request_messages, self._generation))
        self._pending = task
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        self._notify()
        return task

    async def send_and_wait(self, text: str) -> Message | None:
        """Send *text*, wait for the outcome and return the last new message."""
        count_before = self._store.message_count
        task = self.send(text)
        if task is not None:
            await task
        if self._store.message_count <= count_before:
            return None
        return self._store.last

    async def _complete(
        self, request_messages: list[dict[str, str]], generation: int
    ) -> None:
        try:
            content = await self._client.complete(request_messages)
        except asyncio.CancelledError:
            if generation == self._generation:
                self._pending = None
                self._state.transition_to(ConversationState.IDLE)
                self._notify()
            raise
        except ConfigurationError as exc:
            LOGGER.warning(
                "chat.request.unconfigured",
                extra={"event": "chat.request.unconfigured", "error": str(exc)},
            )
            content = self.settings.unavailable_notice
        except Exception as exc:  # noqa: BLE001 - every failure becomes a notice.
            LOGGER.warning(
                "chat.request.failed",
                extra={
                    "event": "chat.request.failed",
                    "error_type": exc.__class__.__name__,
                    "error": str(exc),
                },
                exc_info=exc,
            )
            content = self.settings.failure_notice
        else:
            LOGGER.info(
                "chat.response.received",
                extra={"event": "chat.response.received", "chars": len(content)},
            )

        if generation != self._generation:
            LOGGER.info(
                "chat.response.stale",
                extra={
                    "event": "chat.response.stale",
                    "request_generation": generation,
                    "current_generation": self._generation,
                },
            )
            return

        self._store.append(Role.ASSISTANT, content)
        self._pending = None
        self._state.transition_to(ConversationState.IDLE)
        self._notify()

    def reset(self) -> None:
        """Clear the conversation and return to idle from any state."""
        self._generation += 1
        self._store.clear()
        self._pending = None
        self._state.transition_to(ConversationState.IDLE)
        LOGGER.info(
            "chat.conversation.reset",
            extra={"event": "chat.conversation.reset", "generation": self._generation},
        )
        self._notify()

    async def aclose(self) -> None:
        """Cancel every request still in flight and wait for them to finish."""
        tasks = [task for task in self._in_flight if not task.done()]
        for task in tasks:
            task.cancel()
        for task in tasks:
            try:
                await task
            except asyncio.CancelledError:
                pass
        self._in_flight.clear()
