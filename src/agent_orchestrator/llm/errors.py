"""Errors raised at the reasoning boundary."""

from __future__ import annotations

from typing import Any, Optional


class ProviderError(Exception):
    """Base exception for reasoning provider failures.

    Covers authentication, rate limiting, transport and malformed
    responses. Agents let it propagate; the manager's dispatcher turns it
    into a failed task.
    """

    def __init__(
        self,
        message: str,
        provider: Optional[str] = None,
        status_code: Optional[int] = None,
        response: Optional[Any] = None,
    ):
        super().__init__(message)
        self.provider = provider
        self.status_code = status_code
        self.response = response


class AuthenticationError(ProviderError):
    """Exception raised for authentication failures."""
    pass


class RateLimitError(ProviderError):
    """Exception raised when rate limited by the provider."""
    pass


class TransportError(ProviderError):
    """Exception raised when the provider could not be reached."""
    pass


class MalformedResponseError(ProviderError):
    """Exception raised when the provider returned an unusable response."""
    pass
