# invisibrain/rate_limiter.py - ACTIVELY USED
# Used by the request queue to space outbound calls and enforce the daily token budget

"""
Rate Limiter module for API request throttling.

This module provides the admission gate every outbound request passes
through: a minimum spacing between call starts, and a daily token budget
that resets once a rolling 24 hour window has elapsed.
"""

import time
import math
import asyncio
import logging
from typing import Dict, Any, Callable, Awaitable, Optional
from datetime import datetime

from .exceptions import QuotaExceededError

logger = logging.getLogger(__name__)

DAY_SECONDS = 86400.0


def estimate_tokens(text: str) -> int:
    """
    Estimate the token cost of a serialized payload.

    This is a fixed heuristic (4 characters is about 1 token), not an exact
    count. Quota exhaustion timing depends on it, so keep it approximate.

    Args:
        text: Serialized request payload

    Returns:
        Estimated token count, rounded up
    """
    return math.ceil(len(text) / 4)


class RateGate:
    """
    Admission control for outbound API calls.

    Tracks the start time of the most recent call and a running token
    counter for the current daily window. Only admit() and
    check_daily_budget() mutate this state.
    """

    def __init__(
        self,
        min_interval_ms: int = 6000,
        max_daily_tokens: int = 4000000,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], float] = time.time,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the rate gate.

        Args:
            min_interval_ms: Minimum spacing between call starts (6000ms = 10 RPM)
            max_daily_tokens: Daily token ceiling
            clock: Monotonic clock used for request spacing
            wall_clock: Wall clock used for the daily window
            sleep: Coroutine used to wait out the spacing interval
        """
        self.min_interval_ms = min_interval_ms
        self.min_request_interval = min_interval_ms / 1000.0
        self.max_daily_tokens = max_daily_tokens

        self._clock = clock
        self._wall_clock = wall_clock
        self._sleep = sleep

        # None until the first call is admitted
        self.last_request_time: Optional[float] = None

        self.daily_tokens_used = 0
        self.window_started_at = wall_clock()

        logger.info(
            f"Rate gate initialized with {self.min_request_interval:.2f}s between requests, "
            f"{max_daily_tokens} tokens/day"
        )

    def seconds_until_next_slot(self) -> float:
        """Return how long admit() would currently have to wait."""
        if self.last_request_time is None:
            return 0.0
        elapsed = self._clock() - self.last_request_time
        return max(0.0, self.min_request_interval - elapsed)

    async def admit(self, estimated_cost: int = 0) -> float:
        """
        Wait until the minimum interval since the last call start has elapsed.

        Call exactly once, immediately before sending a request.

        Args:
            estimated_cost: Token estimate of the request (logged only)

        Returns:
            Time waited in seconds
        """
        wait_time = self.seconds_until_next_slot()
        if wait_time > 0:
            logger.info(f"Rate limit: waiting {wait_time:.2f}s before next request (~{estimated_cost} tokens)")
            await self._sleep(wait_time)

        self.last_request_time = self._clock()
        return wait_time

    def _reset_window_if_needed(self) -> None:
        now = self._wall_clock()
        if now - self.window_started_at >= DAY_SECONDS:
            logger.info(f"Resetting daily token count (was {self.daily_tokens_used})")
            self.daily_tokens_used = 0
            self.window_started_at = now

    def check_daily_budget(self, estimated_cost: int) -> None:
        """
        Charge a request against the daily budget.

        Args:
            estimated_cost: Token estimate of the request

        Raises:
            QuotaExceededError: If the charge would exceed the daily budget
        """
        self._reset_window_if_needed()

        if self.daily_tokens_used + estimated_cost > self.max_daily_tokens:
            logger.warning(
                f"Daily token limit reached: {self.daily_tokens_used} used, "
                f"{estimated_cost} requested, {self.max_daily_tokens} allowed"
            )
            raise QuotaExceededError(
                "Daily token limit reached",
                requested=estimated_cost,
                used=self.daily_tokens_used,
                budget=self.max_daily_tokens,
            )

        self.daily_tokens_used += estimated_cost

    def get_quota_status(self) -> Dict[str, Any]:
        """
        Get current quota status.

        Returns:
            Dictionary with current quota information
        """
        now = self._wall_clock()
        reset_in = max(0.0, DAY_SECONDS - (now - self.window_started_at))
        wait_time = self.seconds_until_next_slot()

        return {
            "day": {
                "limit": self.max_daily_tokens,
                "used": self.daily_tokens_used,
                "remaining": max(0, self.max_daily_tokens - self.daily_tokens_used),
                "reset_in": reset_in,
                "window_started_at": datetime.fromtimestamp(self.window_started_at).isoformat(),
            },
            "status": {
                "can_request": wait_time == 0,
                "wait_time": wait_time,
                "min_interval": self.min_request_interval,
            },
        }
