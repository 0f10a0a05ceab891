"""Bounded-concurrency task queue with rate limiting and retry/backoff."""

from __future__ import annotations

import asyncio
import logging
import random
import time
from collections import deque
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, TypeVar

from crawlbase_mcp.errors import RetryDecision, classify

# Configure logging
logger = logging.getLogger(__name__)

T = TypeVar("T")

# Jitter is drawn from [0, JITTER_RATIO * exponential_delay)
JITTER_RATIO = 0.1


@dataclass(frozen=True)
class QueueConfig:
    """Admission and retry settings for a TaskRetryQueue.

    Attributes:
        max_concurrency: Maximum number of tasks executing at once
        window_ms: Length of the rolling rate-limit window in milliseconds
        max_admissions_per_window: Maximum task starts within any window
        max_retries: Retries after the first attempt (attempts = max_retries + 1)
        base_delay_ms: Backoff delay before the first retry in milliseconds
    """

    max_concurrency: int = 20
    window_ms: int = 1000
    max_admissions_per_window: int = 20
    max_retries: int = 3
    base_delay_ms: int = 1000

    def __post_init__(self) -> None:
        for name in ("max_concurrency", "window_ms", "max_admissions_per_window", "base_delay_ms"):
            value = getattr(self, name)
            if not _is_int(value) or value < 1:
                raise ValueError(f"{name} must be a positive integer, got {value!r}")

        if not _is_int(self.max_retries) or self.max_retries < 0:
            raise ValueError(f"max_retries must be a non-negative integer, got {self.max_retries!r}")


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


@dataclass
class Attempt:
    """One execution try of a queued task."""

    ordinal: int
    succeeded: bool
    error: Exception | None = None


class TaskRetryQueue:
    """Run async tasks under a concurrency cap and a rolling rate limit.

    Each admitted task is retried with exponential backoff plus jitter while
    its failures classify as retryable. A task keeps its concurrency slot
    for its whole retry lifetime, including the time spent backing off.

    Tasks are admitted in submission order. Completion order is not
    guaranteed: a task that succeeds at once can finish before an earlier
    one that is still backing off.
    """

    def __init__(self, config: QueueConfig | None = None) -> None:
        """Initialize the queue.

        Args:
            config: Admission and retry settings (default: QueueConfig())
        """
        self.config = config or QueueConfig()

        self._slots = asyncio.Semaphore(self.config.max_concurrency)
        self._admission_lock = asyncio.Lock()
        self._admissions: deque[float] = deque()
        self._waiting = 0
        self._running = 0
        self._tasks: set[asyncio.Task[Any]] = set()

        logger.debug(
            f"TaskRetryQueue initialized (concurrency={self.config.max_concurrency}, "
            f"rate={self.config.max_admissions_per_window}/{self.config.window_ms}ms, "
            f"max_retries={self.config.max_retries}, base_delay={self.config.base_delay_ms}ms)"
        )

    @property
    def size(self) -> int:
        """Number of submitted tasks still waiting for admission."""
        return self._waiting

    @property
    def pending(self) -> int:
        """Number of admitted tasks that have not reached a final outcome."""
        return self._running

    def submit(self, task: Callable[[], Awaitable[T]]) -> asyncio.Task[T]:
        """Schedule a task for execution under the queue's admission policy.

        Must be called from a running event loop.

        Args:
            task: Zero-argument callable returning an awaitable

        Returns:
            An asyncio.Task resolving to the task's value, or raising the
            error of its final attempt

        Raises:
            TypeError: If task is not callable
        """
        if not callable(task):
            raise TypeError(f"task must be callable, got {type(task).__name__}")

        future = asyncio.get_running_loop().create_task(self._run(task))
        self._tasks.add(future)
        future.add_done_callback(self._tasks.discard)
        return future

    async def add(self, task: Callable[[], Awaitable[T]]) -> T:
        """Submit a task and wait for its final outcome."""
        return await self.submit(task)

    async def drain(self) -> None:
        """Wait until every submitted task has reached a final outcome.

        Task errors are left to the callers holding the futures.
        """
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    def stats(self) -> dict[str, int]:
        """Snapshot of queue occupancy and configuration."""
        return {
            "waiting": self._waiting,
            "running": self._running,
            "max_concurrency": self.config.max_concurrency,
            "window_ms": self.config.window_ms,
            "max_admissions_per_window": self.config.max_admissions_per_window,
            "max_retries": self.config.max_retries,
            "base_delay_ms": self.config.base_delay_ms,
        }

    def calculate_delay(self, attempt: int) -> float:
        """Calculate the backoff delay after a failed attempt.

        Args:
            attempt: 0-based ordinal of the attempt that just failed

        Returns:
            Delay in milliseconds: base_delay_ms * 2**attempt plus jitter in
            [0, 10%) of that value
        """
        exponential_delay = self.config.base_delay_ms * (2**attempt)
        jitter = random.random() * JITTER_RATIO * exponential_delay
        return exponential_delay + jitter

    async def _run(self, task: Callable[[], Awaitable[T]]) -> T:
        self._waiting += 1
        try:
            await self._admit()
        finally:
            self._waiting -= 1

        self._running += 1
        try:
            return await self._execute_with_retry(task)
        finally:
            self._running -= 1
            self._slots.release()

    async def _admit(self) -> None:
        """Block until a concurrency slot and a rate-limit slot are both free.

        The admission lock is fair, so waiters are admitted in the order they
        arrived. On return the caller owns one concurrency slot.
        """
        async with self._admission_lock:
            await self._slots.acquire()
            try:
                await self._wait_for_window()
            except BaseException:
                self._slots.release()
                raise
            self._admissions.append(time.monotonic())

    async def _wait_for_window(self) -> None:
        window = self.config.window_ms / 1000

        while True:
            now = time.monotonic()
            while self._admissions and now - self._admissions[0] >= window:
                self._admissions.popleft()

            if len(self._admissions) < self.config.max_admissions_per_window:
                return

            wait = self._admissions[0] + window - now
            logger.debug(f"Rate limit reached, delaying admission by {wait * 1000:.0f}ms")
            await asyncio.sleep(wait)

    async def _execute_with_retry(self, task: Callable[[], Awaitable[T]]) -> T:
        max_attempts = self.config.max_retries + 1
        history: list[Attempt] = []
        attempt = 0

        while True:
            logger.debug(f"Executing attempt {attempt + 1}/{max_attempts}")
            try:
                result = await task()
            except Exception as e:
                history.append(Attempt(ordinal=attempt, succeeded=False, error=e))
                logger.debug(f"Attempt {attempt + 1}/{max_attempts} failed: {e!r}")

                if attempt >= self.config.max_retries:
                    logger.debug(f"Max retries reached, giving up: {_format_history(history)}")
                    raise

                if classify(e) is RetryDecision.FAIL:
                    logger.debug(f"Error not retryable, failing immediately: {_format_history(history)}")
                    raise

                delay_ms = self.calculate_delay(attempt)
                logger.debug(f"Retrying after {delay_ms:.0f}ms (next attempt {attempt + 2}/{max_attempts})")
                await self._sleep(delay_ms / 1000)
                attempt += 1
                continue

            history.append(Attempt(ordinal=attempt, succeeded=True))
            if len(history) > 1:
                logger.debug(f"Task succeeded after retries: {_format_history(history)}")
            return result

    async def _sleep(self, seconds: float) -> None:
        await asyncio.sleep(seconds)


def _format_history(history: list[Attempt]) -> str:
    return ", ".join(
        f"#{a.ordinal + 1} ok" if a.succeeded else f"#{a.ordinal + 1} {type(a.error).__name__}" for a in history
    )
