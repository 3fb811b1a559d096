# invisibrain/request_queue.py - ACTIVELY USED
# Single-flight FIFO queue that every backend call goes through

"""
Request Queue module for serializing backend calls.

All outbound requests are processed one at a time, in arrival order, by a
single drain task. Each request waits on the rate gate, is charged against
the daily budget on every attempt, and is retried according to the retry
policy. Every enqueued request's future is settled exactly once.
"""

import json
import asyncio
import logging
from collections import deque
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Dict, List, Optional, Union

from .exceptions import RequestTimeoutError
from .rate_limiter import RateGate, estimate_tokens
from .retry import RetryPolicy

logger = logging.getLogger(__name__)


class RequestKind(Enum):
    TEXT = "text"
    MULTIMODAL = "multimodal"


class QueueState(Enum):
    IDLE = "idle"
    DRAINING = "draining"


@dataclass
class ImagePart:
    """An already-captured image, base64 encoded."""

    data: str
    mime_type: str = "image/png"

    def to_dict(self) -> Dict[str, Any]:
        return {"inline_data": {"mime_type": self.mime_type, "data": self.data}}


Part = Union[str, ImagePart]
Payload = Union[str, List[Part]]


@dataclass
class PendingRequest:
    """
    One caller's in-flight ask.

    The completion future is attached by RequestQueue.enqueue and is
    resolved or rejected exactly once.
    """

    kind: RequestKind
    payload: Payload
    completion: Optional["asyncio.Future[str]"] = field(default=None, repr=False)

    @classmethod
    def text(cls, prompt: str) -> "PendingRequest":
        return cls(RequestKind.TEXT, prompt)

    @classmethod
    def multimodal(cls, parts: List[Part]) -> "PendingRequest":
        return cls(RequestKind.MULTIMODAL, list(parts))

    def serialize(self) -> str:
        """Serialized form of the payload, used for token estimation."""
        if isinstance(self.payload, str):
            return self.payload
        return json.dumps(
            [part.to_dict() if isinstance(part, ImagePart) else {"text": part} for part in self.payload]
        )


Invoker = Callable[[Payload], Awaitable[str]]


class RequestQueue:
    """
    Ordered, single-flight admission queue for backend calls.

    States:
        IDLE: nothing queued and no drain task running
        DRAINING: the drain task is active (zero or more items queued)

    A failed request never stops the drain task; it only rejects that
    request's future.
    """

    def __init__(
        self,
        invoke: Invoker,
        rate_gate: Optional[RateGate] = None,
        retry_policy: Optional[RetryPolicy] = None,
        request_timeout: Optional[float] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        """
        Initialize the request queue.

        Args:
            invoke: Coroutine function sending one payload to the backend
            rate_gate: Admission gate (a default RateGate if omitted)
            retry_policy: Retry policy (a default RetryPolicy if omitted)
            request_timeout: Per-attempt timeout in seconds, None for no timeout
            sleep: Coroutine used to wait out backoff delays
        """
        self._invoke = invoke
        self.rate_gate = rate_gate or RateGate()
        self.retry_policy = retry_policy or RetryPolicy()
        self.request_timeout = request_timeout
        self._sleep = sleep

        self._pending: Deque[PendingRequest] = deque()
        self._draining = False
        self._drain_task: Optional["asyncio.Task[None]"] = None

        # Counters
        self.api_calls = 0
        self.retries = 0
        self.completed_requests = 0
        self.failed_requests = 0

    @property
    def state(self) -> QueueState:
        return QueueState.DRAINING if self._draining else QueueState.IDLE

    def __len__(self) -> int:
        return len(self._pending)

    def enqueue(self, request: PendingRequest) -> "asyncio.Future[str]":
        """
        Append a request to the tail of the queue.

        Must be called from a running event loop. Starts the drain task if
        the queue is idle; otherwise the request just waits its turn.

        Args:
            request: A request that has not been enqueued before

        Returns:
            Future resolved with the response text or rejected with the error
        """
        if request.completion is not None:
            raise ValueError("Request has already been enqueued")

        loop = asyncio.get_running_loop()
        request.completion = loop.create_future()
        self._pending.append(request)
        logger.debug(f"Enqueued {request.kind.value} request ({len(self._pending)} pending)")

        if not self._draining:
            self._draining = True
            self._drain_task = loop.create_task(self._drain())

        return request.completion

    async def submit_text(self, prompt: str) -> str:
        """Enqueue a text-only prompt and wait for its result."""
        return await self.enqueue(PendingRequest.text(prompt))

    async def submit_multimodal(self, parts: List[Part]) -> str:
        """Enqueue a multimodal payload and wait for its result."""
        return await self.enqueue(PendingRequest.multimodal(parts))

    async def wait_idle(self) -> None:
        """Wait until the drain task has settled every queued request."""
        if self._drain_task is not None and not self._drain_task.done():
            await self._drain_task

    async def aclose(self) -> None:
        """Stop the drain task and cancel every request still waiting."""
        if self._drain_task is not None and not self._drain_task.done():
            self._drain_task.cancel()
            try:
                await self._drain_task
            except asyncio.CancelledError:
                pass
        while self._pending:
            request = self._pending.popleft()
            if not request.completion.done():
                request.completion.cancel()

    async def _drain(self) -> None:
        try:
            while self._pending:
                request = self._pending.popleft()
                try:
                    cost = estimate_tokens(request.serialize())
                    await self.rate_gate.admit(cost)
                    result = await self._execute(request, cost)
                except asyncio.CancelledError:
                    if not request.completion.done():
                        request.completion.cancel()
                    raise
                except Exception as e:
                    self.failed_requests += 1
                    if not request.completion.done():
                        request.completion.set_exception(e)
                else:
                    self.completed_requests += 1
                    if not request.completion.done():
                        request.completion.set_result(result)
        finally:
            self._draining = False

    async def _execute(self, request: PendingRequest, cost: int) -> str:
        """
        Run one request to a terminal outcome.

        The daily budget is re-validated before every attempt. Once retries
        are exhausted, the last error is raised unchanged.
        """
        attempt = 0
        while True:
            self.rate_gate.check_daily_budget(cost)
            try:
                logger.info(f"Making API request (attempt {attempt + 1}/{self.retry_policy.max_attempts})")
                return await self._invoke_once(request)
            except Exception as e:
                logger.error(f"Request error (attempt {attempt + 1}): {e}")
                if attempt >= self.retry_policy.max_retries or not self.retry_policy.is_retryable(e):
                    raise
                delay = self.retry_policy.backoff_delay(attempt)
                logger.info(f"Retrying in {delay:.1f}s...")
                self.retries += 1
                await self._sleep(delay)
                attempt += 1

    async def _invoke_once(self, request: PendingRequest) -> str:
        self.api_calls += 1
        if self.request_timeout is None:
            return await self._invoke(request.payload)
        try:
            return await asyncio.wait_for(self._invoke(request.payload), self.request_timeout)
        except asyncio.TimeoutError:
            raise RequestTimeoutError(
                f"Backend call timed out after {self.request_timeout}s", timeout=self.request_timeout
            ) from None
