"""Domain error types — the chat error taxonomy."""

from __future__ import annotations


class ChatError(Exception):
    """Base class for every error the chat subsystem surfaces."""


class AuthMissingError(ChatError):
    """Raised when no credential is present."""

    def __init__(self, message: str = 'No authentication token found') -> None:
        super().__init__(message)


class AuthExpiredError(ChatError):
    """Raised when the credential is malformed, expired, or rejected by the server (401)."""

    def __init__(self, message: str = 'JWT token is invalid or expired. Please log in again.') -> None:
        super().__init__(message)


class RateLimitedError(ChatError):
    """Raised on HTTP 429. retry_after_seconds is None when the server omits it."""

    def __init__(self, message: str = 'Rate limit exceeded', retry_after_seconds: int | None = None) -> None:
        super().__init__(message)
        self.retry_after_seconds = retry_after_seconds


class TransientError(ChatError):
    """Network failure or any non-2xx response other than 401/429."""


class InputInvalidError(ChatError):
    """Raised for empty or whitespace-only input; never reaches the network."""

    def __init__(self, message: str = 'Message must not be empty') -> None:
        super().__init__(message)


class TransportError(Exception):
    """Raised by transport adapters when the request never produced a response."""
