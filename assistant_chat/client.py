"""Async HTTP client for an OpenAI-compatible chat completion endpoint."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import httpx

from .exceptions import (
    ConfigurationError,
    UpstreamConnectionError,
    UpstreamError,
    UpstreamResponseError,
    UpstreamStatusError,
)

LOGGER = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = frozenset({429, 500, 502, 503, 504})


class CompletionClient:
    """Send the full conversation in one non-streaming request.

    The client owns its ``httpx.AsyncClient`` unless one is injected; an
    injected ``transport`` is handy for tests (``httpx.MockTransport``).
    """

    def __init__(
        self,
        endpoint: str,
        model: str,
        api_key: str = "",
        temperature: float = 0.7,
        max_tokens: int = 1024,
        top_p: float = 1.0,
        timeout: float = 60,
        retries: int = 0,
        retry_backoff_seconds: float = 0.5,
        http_client: httpx.AsyncClient | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.endpoint = endpoint
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.top_p = top_p
        self.retries = max(0, retries)
        self.retry_backoff_seconds = max(0.0, retry_backoff_seconds)
        self._api_key = api_key.strip()
        self._owns_http_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=timeout, transport=transport
        )

    @classmethod
    def from_config(
        cls, completion_cfg: dict[str, Any], api_key: str, **kwargs: Any
    ) -> CompletionClient:
        """Build a client from the ``[completion]`` config section."""
        return cls(
            endpoint=str(completion_cfg["endpoint"]),
            model=str(completion_cfg["model"]),
            api_key=api_key,
            temperature=float(completion_cfg["temperature"]),
            max_tokens=int(completion_cfg["max_tokens"]),
            top_p=float(completion_cfg["top_p"]),
            timeout=float(completion_cfg["timeout"]),
            retries=int(completion_cfg["retries"]),
            retry_backoff_seconds=float(completion_cfg["retry_backoff_seconds"]),
            **kwargs,
        )

    @property
    def has_credential(self) -> bool:
        return bool(self._api_key)

    def build_payload(self, messages: list[dict[str, str]]) -> dict[str, Any]:
        """Return the JSON request body for *messages*."""
        return {
            "model": self.model,
            "messages": [
                {"role": str(m["role"]), "content": str(m["content"])} for m in messages
            ],
            "temperature": self.temperature,
            "max_tokens": self.max_tokens,
            "top_p": self.top_p,
            "stream": False,
        }

    @staticmethod
    def _extract_completion(body: Any) -> str:
        """Pull ``choices[0].message.content`` out of a decoded response."""
        try:
            content = body["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise UpstreamResponseError(
                "Completion response has no choices[0].message.content."
            ) from exc
        if not isinstance(content, str):
            raise UpstreamResponseError("Completion content is not a string.")
        return content

    def _map_exception(self, exc: Exception) -> UpstreamError:
        if isinstance(exc, UpstreamError):
            return exc
        if isinstance(exc, httpx.TimeoutException):
            return UpstreamConnectionError(
                f"Timed out waiting for completion endpoint {self.endpoint}."
            )
        if isinstance(exc, httpx.TransportError):
            return UpstreamConnectionError(
                f"Unable to reach completion endpoint {self.endpoint}: {exc}"
            )
        return UpstreamError(f"Completion request failed: {exc}")

    async def _post_once(self, payload: dict[str, Any]) -> str:
        response = await self._http.post(
            self.endpoint,
            json=payload,
            headers={"Authorization": f"Bearer {self._api_key}"},
        )
        if not response.is_success:
            raise UpstreamStatusError(
                f"Completion endpoint returned HTTP {response.status_code}.",
                status_code=response.status_code,
            )
        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamResponseError("Completion response is not valid JSON.") from exc
        return self._extract_completion(body)

    @staticmethod
    def _is_retryable(exc: UpstreamError) -> bool:
        if isinstance(exc, UpstreamConnectionError):
            return True
        if isinstance(exc, UpstreamStatusError):
            return exc.status_code in _RETRYABLE_STATUS_CODES
        return False

    async def complete(self, messages: list[dict[str, str]]) -> str:
        """Return the completion text for the ordered *messages*.

        Raises :class:`ConfigurationError` before any I/O when no API key is
        set, and an :class:`UpstreamError` subclass for every other failure.
        """
        if not self.has_credential:
            raise ConfigurationError("No API key configured for the completion service.")

        payload = self.build_payload(messages)
        LOGGER.info(
            "chat.request.start",
            extra={
                "event": "chat.request.start",
                "model": self.model,
                "message_count": len(payload["messages"]),
            },
        )
        for attempt in range(self.retries + 1):
            try:
                return await self._post_once(payload)
            except asyncio.CancelledError:
                LOGGER.info(
                    "chat.request.cancelled", extra={"event": "chat.request.cancelled"}
                )
                raise
            except Exception as exc:  # noqa: BLE001 - transport can fail in many ways.
                mapped_exc = self._map_exception(exc)
                if attempt >= self.retries or not self._is_retryable(mapped_exc):
                    if mapped_exc is exc:
                        raise
                    raise mapped_exc from exc
                LOGGER.warning(
                    "chat.request.retry",
                    extra={
                        "event": "chat.request.retry",
                        "attempt": attempt + 1,
                        "error_type": mapped_exc.__class__.__name__,
                    },
                )
                await asyncio.sleep(self.retry_backoff_seconds * (attempt + 1))
        raise UpstreamError("Completion request was not attempted.")

    async def aclose(self) -> None:
        """Close the underlying HTTP client when this instance created it."""
        if self._owns_http_client:
            await self._http.aclose()
