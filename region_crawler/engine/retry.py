"""Bounded retry with backoff around asynchronous operations."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol, TypeVar

import structlog

from .errors import PipelineCancelled

T = TypeVar("T")

SleepFunc = Callable[[float], Awaitable[Any]]


class RetryPolicy(Protocol):
    """Decide whether and when a failed attempt is retried."""

    max_attempts: int

    def should_retry(self, error: BaseException) -> bool:
        """Return True when ``error`` may be retried."""

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number ``attempt`` (1-based)."""


@dataclass(frozen=True, slots=True)
class RetryEveryError:
    """Retry on any exception with base-2 exponential backoff.

    Failed attempt ``i`` is followed by a wait of ``base ** i * unit`` seconds,
    so the default policy waits 2 then 4 units before its third attempt.
    """

    max_attempts: int = 3
    base: float = 2.0
    unit: float = 1.0

    def should_retry(self, error: BaseException) -> bool:
        return True

    def delay_for(self, attempt: int) -> float:
        return (self.base**attempt) * self.unit


@dataclass(frozen=True, slots=True)
class RetryOnErrors:
    """Retry only the listed exception types with a linear delay."""

    errors: tuple[type[BaseException], ...] = (OSError,)
    max_attempts: int = 3
    step: float = 0.5

    def should_retry(self, error: BaseException) -> bool:
        return isinstance(error, self.errors)

    def delay_for(self, attempt: int) -> float:
        return self.step * attempt


class RetryExecutor:
    """Run an async operation until it succeeds or the policy gives up.

    The error of the final attempt propagates unmodified. When a cancel event is
    supplied and set, no further attempt is scheduled or started.
    """

    def __init__(
        self,
        policy: RetryPolicy | None = None,
        *,
        sleep: SleepFunc | None = None,
        cancel_event: asyncio.Event | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.policy = policy or RetryEveryError()
        self._sleep = sleep or asyncio.sleep
        self.cancel_event = cancel_event
        self.logger = logger or structlog.get_logger("region_crawler.retry")

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        *,
        max_attempts: int | None = None,
        context: dict[str, Any] | None = None,
    ) -> T:
        attempts = max_attempts if max_attempts is not None else self.policy.max_attempts
        if attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        attempt = 1
        while True:
            try:
                return await operation()
            except PipelineCancelled:
                raise
            except Exception as exc:  # noqa: BLE001
                if attempt >= attempts or not self.policy.should_retry(exc):
                    raise
                if self._cancelled():
                    raise PipelineCancelled("Cancelled before retry") from exc
                delay = self.policy.delay_for(attempt)
                self.logger.warning(
                    "retry_scheduled",
                    attempt=attempt,
                    max_attempts=attempts,
                    delay=delay,
                    error=str(exc),
                    error_type=type(exc).__name__,
                    **(context or {}),
                )
                await self._sleep(delay)
                if self._cancelled():
                    raise PipelineCancelled("Cancelled during retry backoff") from exc
                attempt += 1

    def _cancelled(self) -> bool:
        return self.cancel_event is not None and self.cancel_event.is_set()


__all__ = ["RetryEveryError", "RetryExecutor", "RetryOnErrors", "RetryPolicy"]
