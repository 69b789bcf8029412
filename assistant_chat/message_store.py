"""Append-only message history and request payload construction."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
import itertools


class Role(str, Enum):
    """Author of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Message:
    """A single immutable conversation entry."""

    id: int
    role: Role
    content: str
    created_at: datetime = field(default_factory=_utcnow)

    def to_payload(self) -> dict[str, str]:
        return {"role": self.role.value, "content": self.content}


class MessageStore:
    """Keep conversation history in append order.

    Ids come from a counter that survives :meth:`clear`, so they stay unique
    and increasing for the lifetime of the store.
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._messages: list[Message] = []

    @property
    def messages(self) -> tuple[Message, ...]:
        """Return an immutable snapshot of all stored messages."""
        return tuple(self._messages)

    @property
    def message_count(self) -> int:
        """Return the number of stored messages."""
        return len(self._messages)

    @property
    def last(self) -> Message | None:
        return self._messages[-1] if self._messages else None

    def append(self, role: Role, content: str) -> Message:
        """Create a message, append it and return it."""
        message = Message(id=next(self._ids), role=Role(role), content=content)
        self._messages.append(message)
        return message

    def clear(self) -> None:
        """Drop every message in a single step."""
        self._messages = []

    def build_request_messages(self, system_prompt: str) -> list[dict[str, str]]:
        """Return the system preamble followed by the full history."""
        payload = [{"role": "system", "content": system_prompt}]
        payload.extend(message.to_payload() for message in self._messages)
        return payload
