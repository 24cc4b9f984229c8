"""Completion backend access.

Key components:
- CompletionClient: OpenAI-compatible chat completion client
- run_with_retries: bounded retry loop with a per-attempt timeout
- Exceptions describing transport, backend and exhaustion failures
"""

from .completion import CompletionClient, StatusObserver
from .exceptions import (
    BackendFailure,
    BotError,
    CompletionFailure,
    DeliveryFailure,
    DiscordAPIError,
    LookupFailure,
    TransportFailure,
)
from .retry import ATTEMPT_TIMEOUT, MAX_ATTEMPTS, RetryState, run_with_retries

__all__ = [
    "CompletionClient",
    "StatusObserver",
    "BackendFailure",
    "BotError",
    "CompletionFailure",
    "DeliveryFailure",
    "DiscordAPIError",
    "LookupFailure",
    "TransportFailure",
    "ATTEMPT_TIMEOUT",
    "MAX_ATTEMPTS",
    "RetryState",
    "run_with_retries",
]
