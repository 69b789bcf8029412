"""Conversation request state machine."""

from __future__ import annotations

from enum import Enum
import logging

LOGGER = logging.getLogger(__name__)


class ConversationState(str, Enum):
    """Idle / awaiting-response state of a single conversation."""

    IDLE = "IDLE"
    AWAITING_RESPONSE = "AWAITING_RESPONSE"


class StateManager:
    """Own the current state and log every transition.

    All callers run on a single event loop, so transitions are plain
    attribute swaps with no locking.
    """

    def __init__(self) -> None:
        self._state = ConversationState.IDLE

    @property
    def state(self) -> ConversationState:
        return self._state

    def transition_to(self, new_state: ConversationState) -> ConversationState:
        """Set and return *new_state*, logging real changes."""
        previous = self._state
        self._state = new_state
        if previous is not new_state:
            LOGGER.info(
                "chat.state.transition",
                extra={
                    "event": "chat.state.transition",
                    "from_state": previous.value,
                    "to_state": new_state.value,
                },
            )
        return self._state

    def can_send_message(self) -> bool:
        """A new message may only be sent while idle."""
        return self._state is ConversationState.IDLE
