"""Domain exception hierarchy for the assistant chat application."""

from __future__ import annotations


class AssistantChatError(RuntimeError):
    """Base class for all domain-level chat errors."""


class ConfigurationError(AssistantChatError):
    """Raised when a required credential or setting is absent."""


class ConfigValidationError(AssistantChatError):
    """Raised when configuration cannot be validated safely."""


class UpstreamError(AssistantChatError):
    """Raised when the completion service request does not succeed."""


class UpstreamConnectionError(UpstreamError):
    """Raised when the completion endpoint cannot be reached."""


class UpstreamStatusError(UpstreamError):
    """Raised when the completion endpoint answers with a non-success status."""

    def __init__(self, message: str, status_code: int) -> None:
        super().__init__(message)
        self.status_code = status_code


class UpstreamResponseError(UpstreamError):
    """Raised when the completion body cannot be interpreted."""
