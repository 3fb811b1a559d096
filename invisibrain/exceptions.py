# invisibrain/exceptions.py - ACTIVELY USED
# Error taxonomy shared by the queue, the backend adapter and the service

"""
Exception classes for the assistant service.

Every error raised by this package derives from AssistantError, so the
application shell can catch everything the core raises with one clause.
Backend errors carry the HTTP-style status code reported by the API, and
always mention it in their message so it can be found by simple substring
inspection.
"""

from typing import Optional


class AssistantError(Exception):
    """Base exception for all assistant errors."""

    pass


class QuotaExceededError(AssistantError):
    """
    Raised when a request would push the daily token counter past its budget.

    Attributes:
        requested: Estimated token cost of the rejected request
        used: Tokens already consumed in the current window
        budget: Configured daily ceiling
    """

    def __init__(self, message: str, requested: int = 0, used: int = 0, budget: int = 0):
        super().__init__(message)
        self.requested = requested
        self.used = used
        self.budget = budget


class NoContentError(AssistantError):
    """Raised when an operation is invoked with nothing to act on."""

    pass


class ServiceNotConfiguredError(AssistantError):
    """Raised when the service is requested without an API key."""

    pass


class BackendError(AssistantError):
    """
    Base class for failures reported by the generative backend.

    Attributes:
        status_code: HTTP-style status code, if the backend reported one
    """

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class TransientBackendError(BackendError):
    """Backend failure worth retrying (429, 500, 503 or a rate-limit signal)."""

    pass


class FatalBackendError(BackendError):
    """Backend failure that must not be retried (auth, bad request, policy block)."""

    pass


class RequestTimeoutError(FatalBackendError):
    """Raised when a single backend attempt exceeds the configured timeout."""

    def __init__(self, message: str, timeout: float):
        super().__init__(message)
        self.timeout = timeout
