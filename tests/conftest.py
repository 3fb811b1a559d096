"""Shared fixtures: a scriptable stub backend and an instant, recording sleep."""

import asyncio
import time
from typing import Any, Callable, List, Optional

import pytest

from invisibrain.request_queue import ImagePart


def echo(payload: Any) -> str:
    if isinstance(payload, str):
        return f"echo:{payload}"
    texts = [part for part in payload if not isinstance(part, ImagePart)]
    images = [part for part in payload if isinstance(part, ImagePart)]
    return f"echo:{len(texts)} text, {len(images)} image"


class StubBackend:
    """Backend double recording payloads, call start times and concurrency."""

    def __init__(self, responder: Optional[Callable[[Any], str]] = None, delay: float = 0.0):
        self.responder = responder or echo
        self.delay = delay
        self.calls: List[Any] = []
        self.started_at: List[float] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def invoke(self, payload: Any) -> str:
        self.calls.append(payload)
        self.started_at.append(time.monotonic())
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay:
                await asyncio.sleep(self.delay)
            return self.responder(payload)
        finally:
            self.in_flight -= 1


class Flaky:
    """Responder that raises the given errors in order, then echoes."""

    def __init__(self, *errors: Exception):
        self.errors = list(errors)

    def __call__(self, payload: Any) -> str:
        if self.errors:
            raise self.errors.pop(0)
        return echo(payload)


class RecordingSleep:
    """Sleep replacement that records requested delays without waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)
        await asyncio.sleep(0)


class FakeClock:
    """Manually advanced clock whose sleep moves time forward."""

    def __init__(self, start: float = 1000.0):
        self.now = start
        self.sleeps: List[float] = []

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def backend():
    return StubBackend()


@pytest.fixture
def recording_sleep():
    return RecordingSleep()


@pytest.fixture
def fast_config():
    return {
        "rate_limit": {"min_interval_ms": 0, "max_daily_tokens": 4000000},
        "retry": {"max_retries": 3, "base_delay_ms": 2000},
        "history": {"max_history_length": 20},
    }
