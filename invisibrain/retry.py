# invisibrain/retry.py - ACTIVELY USED
# Retry classification and exponential backoff used by the request queue

"""
Retry policy for backend calls.

The policy is stateless: it only answers whether a failure is worth
retrying and how long to wait before the next attempt.
"""

from typing import Tuple

from .exceptions import (
    TransientBackendError,
    FatalBackendError,
    QuotaExceededError,
    NoContentError,
)

RETRYABLE_STATUS_CODES = (429, 500, 503)
RETRYABLE_MARKERS = ("429", "500", "503", "RATE_LIMIT")


class RetryPolicy:
    """Exponential backoff policy: 2s, 4s, 8s... with a fixed retry ceiling."""

    def __init__(self, max_retries: int = 3, base_delay_ms: int = 2000):
        """
        Initialize the retry policy.

        Args:
            max_retries: Retries allowed beyond the first attempt
            base_delay_ms: Delay before the first retry
        """
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1

    def is_retryable(self, error: BaseException) -> bool:
        """
        Decide whether a failed attempt should be retried.

        Args:
            error: The exception raised by the attempt

        Returns:
            True for 429/500/503 and rate-limit signals, False otherwise
        """
        if isinstance(error, TransientBackendError):
            return True
        if isinstance(error, (FatalBackendError, QuotaExceededError, NoContentError)):
            return False

        code = getattr(error, "code", None)
        if isinstance(code, int) and code in RETRYABLE_STATUS_CODES:
            return True

        message = str(error)
        return any(marker in message for marker in RETRYABLE_MARKERS)

    def backoff_delay(self, attempt_index: int) -> float:
        """
        Delay before retrying after the given failed attempt.

        Args:
            attempt_index: Zero-based index of the retry (0 -> 2s, 1 -> 4s, 2 -> 8s)

        Returns:
            Delay in seconds
        """
        return (2 ** attempt_index) * self.base_delay_ms / 1000.0

    def schedule(self) -> Tuple[float, ...]:
        """Full sequence of backoff delays the policy allows."""
        return tuple(self.backoff_delay(i) for i in range(self.max_retries))
