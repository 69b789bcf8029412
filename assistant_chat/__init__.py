"""Top-level package for assistant-chat-tui."""

from __future__ import annotations

from importlib import import_module
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .app import AssistantChatApp
    from .client import CompletionClient
    from .config import ensure_config_dir, load_config, resolve_api_key
    from .controller import ControllerSettings, ConversationController, UserProfile
    from .exceptions import (
        AssistantChatError,
        ConfigValidationError,
        ConfigurationError,
        UpstreamConnectionError,
        UpstreamError,
        UpstreamResponseError,
        UpstreamStatusError,
    )
    from .message_store import Message, MessageStore, Role
    from .segments import Bold, CodeBlock, InlineCode, PlainText, parse
    from .state import ConversationState, StateManager

# Symbol -> submodule. Resolved lazily so the core imports without textual.
_EXPORTS: dict[str, str] = {
    "AssistantChatApp": "app",
    "CompletionClient": "client",
    "ensure_config_dir": "config",
    "load_config": "config",
    "resolve_api_key": "config",
    "ControllerSettings": "controller",
    "ConversationController": "controller",
    "UserProfile": "controller",
    "AssistantChatError": "exceptions",
    "ConfigValidationError": "exceptions",
    "ConfigurationError": "exceptions",
    "UpstreamConnectionError": "exceptions",
    "UpstreamError": "exceptions",
    "UpstreamResponseError": "exceptions",
    "UpstreamStatusError": "exceptions",
    "Message": "message_store",
    "MessageStore": "message_store",
    "Role": "message_store",
    "Bold": "segments",
    "CodeBlock": "segments",
    "InlineCode": "segments",
    "PlainText": "segments",
    "parse": "segments",
    "ConversationState": "state",
    "StateManager": "state",
}

__all__ = sorted(_EXPORTS)


def __getattr__(name: str) -> Any:
    """Lazily import symbols to keep optional UI dependencies optional at import time."""
    module_name = _EXPORTS.get(name)
    if module_name is None:
        raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
    return getattr(import_module(f".{module_name}", __name__), name)
