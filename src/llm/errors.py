"""Exception hierarchy for the LLM provider layer.

Four failure kinds surface to callers:
- ConfigurationError: no usable backend at construction or switch time
- UpstreamError: backend reachable but failed, or transport failed
- UnsupportedOperationError: capability gate rejected the request
- MalformedResponseError: backend answered but output could not be parsed

Catch ``LLMError`` to handle any of them.
"""

from __future__ import annotations

from typing import Any


class LLMError(Exception):
    """Base exception for all provider-layer errors."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class ConfigurationError(LLMError):
    """Raised when no usable backend is configured."""


class UpstreamError(LLMError):
    """Raised when a backend call fails or returns an error status."""

    def __init__(
        self,
        message: str,
        *,
        backend: str,
        model: str | None = None,
        endpoint: str | None = None,
        status_code: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.backend = backend
        self.model = model
        self.endpoint = endpoint
        self.status_code = status_code


class UnsupportedOperationError(LLMError):
    """Raised before any network call when the active backend/model lacks a capability."""

    def __init__(
        self,
        message: str,
        *,
        backend: str,
        model: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.backend = backend
        self.model = model


class MalformedResponseError(LLMError):
    """Raised when backend output fails normalization or JSON parsing."""

    def __init__(
        self,
        message: str,
        *,
        raw_text: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message, details=details)
        self.raw_text = raw_text
