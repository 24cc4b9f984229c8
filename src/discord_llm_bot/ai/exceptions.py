"""Custom exceptions for Discord LLM Bot."""

from __future__ import annotations


class BotError(Exception):
    """Base exception for bot errors."""

    pass


class TransportFailure(BotError):
    """Raised when the completion backend cannot be reached or times out."""

    pass


class BackendFailure(BotError):
    """Raised when the completion backend answers with an error or an unusable payload."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message
            status_code: HTTP status code, if the backend answered at all
        """
        self.status_code = status_code
        super().__init__(message)


class CompletionFailure(BotError):
    """Raised when every attempt to obtain a completion has failed."""

    def __init__(self, message: str, attempts: int, last_error: str | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message
            attempts: Number of attempts made
            last_error: Message of the last observed failure
        """
        self.attempts = attempts
        self.last_error = last_error
        super().__init__(message)


class LookupFailure(BotError):
    """Raised when the message store cannot be queried."""

    pass


class DeliveryFailure(BotError):
    """Raised when a message cannot be posted or edited."""

    pass


class DiscordAPIError(BotError):
    """Raised when the Discord REST API answers with a non-success status."""

    def __init__(self, message: str, status_code: int, code: int | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message
            status_code: HTTP status code
            code: Discord JSON error code, when present
        """
        self.status_code = status_code
        self.code = code
        super().__init__(message)
