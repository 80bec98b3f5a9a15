"""Retry strategies for remote transform calls.

Retry behaviour is split in two:
- A RetryStrategy decides *whether* to retry a failure and *how long* to wait.
- A RetryExecutor runs an operation, consulting the strategy after each failure.

The default ExponentialBackoffStrategy waits ``delay``, then
``delay * backoff_factor``, and so on, each sleep capped at ``max_delay``.
Jitter is opt-in. Other strategies (circuit breaking, server-suggested
waits) plug in by subclassing RetryStrategy without touching the runner.

Example usage:
    from neurolint.execution.retry_strategy import RetryPolicy, with_retry

    policy = RetryPolicy(max_attempts=3, delay=0.1, backoff_factor=2)
    response = await with_retry(lambda: backend.transform(request), policy)
"""

from __future__ import annotations

import asyncio
import random
from abc import ABC, abstractmethod
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, TypeVar

from neurolint.core.constants import RETRYABLE_STATUS_CODES
from neurolint.core.errors import is_retryable_error
from neurolint.core.logging import get_logger

if TYPE_CHECKING:
    from neurolint.core.config import RetryConfig

_logger = get_logger("retry_strategy")

T = TypeVar("T")

RetryCondition = Callable[[BaseException], bool]
"""Predicate deciding whether a failure is worth another attempt."""

RetryObserver = Callable[[BaseException, int], None]
"""Called with (error, attempt_number) before each backoff sleep."""

SleepFn = Callable[[float], Awaitable[None]]


@dataclass
class RetryPolicy:
    """Per-call-site retry settings. Stateless between invocations.

    Attributes:
        max_attempts: Total attempts, the first call included.
        delay: Sleep before the second attempt (seconds).
        backoff_factor: Multiplier applied to the delay after each retry.
        max_delay: Ceiling for a single sleep (seconds).
        retry_condition: Failure predicate; defaults to is_retryable_error.
        on_retry: Optional observer invoked before each sleep.
        jitter: Scale each sleep by a random factor in [0.5, 1.5).
    """

    max_attempts: int = 3
    delay: float = 1.0
    backoff_factor: float = 2.0
    max_delay: float = 10.0
    retry_condition: RetryCondition = is_retryable_error
    on_retry: RetryObserver | None = None
    jitter: bool = False

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")
        if self.delay < 0 or self.max_delay < 0:
            raise ValueError("delay and max_delay must be >= 0")
        if self.backoff_factor < 1:
            raise ValueError(f"backoff_factor must be >= 1, got {self.backoff_factor}")

    @classmethod
    def from_config(
        cls,
        config: RetryConfig,
        on_retry: RetryObserver | None = None,
    ) -> RetryPolicy:
        """Build a policy from the ``retry`` configuration section."""
        statuses = RETRYABLE_STATUS_CODES
        if not config.retry_on_server_error:
            statuses = statuses - {500}

        def condition(error: BaseException) -> bool:
            return is_retryable_error(error, statuses)

        return cls(
            max_attempts=config.max_attempts,
            delay=config.delay_seconds,
            backoff_factor=config.backoff_factor,
            max_delay=config.max_delay_seconds,
            retry_condition=condition,
            on_retry=on_retry,
            jitter=config.jitter,
        )


class RetryStrategy(ABC):
    """Decides whether and when a failed operation is attempted again."""

    @abstractmethod
    def should_retry(self, error: BaseException, attempt: int) -> bool:
        """Whether to make another attempt after ``attempt`` failed.

        Args:
            error: The failure raised by the attempt.
            attempt: 1-indexed number of the attempt that failed.
        """
        ...

    @abstractmethod
    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt ``attempt`` before the next one."""
        ...


class ExponentialBackoffStrategy(RetryStrategy):
    """Exponential backoff driven by a RetryPolicy."""

    def __init__(self, policy: RetryPolicy | None = None) -> None:
        self.policy = policy or RetryPolicy()

    def should_retry(self, error: BaseException, attempt: int) -> bool:
        if attempt >= self.policy.max_attempts:
            return False
        return bool(self.policy.retry_condition(error))

    def delay_for(self, attempt: int) -> float:
        policy = self.policy
        current = policy.delay * (policy.backoff_factor ** (attempt - 1))
        delay = min(current, policy.max_delay)
        if policy.jitter:
            delay = min(delay * random.uniform(0.5, 1.5), policy.max_delay)
        return delay


class RetryExecutor:
    """Runs an async operation under a RetryStrategy.

    The final error is re-raised unchanged, so callers can inspect its
    type and attributes exactly as if no retry had happened.
    """

    def __init__(
        self,
        strategy: RetryStrategy | None = None,
        on_retry: RetryObserver | None = None,
        sleep: SleepFn = asyncio.sleep,
    ) -> None:
        self.strategy = strategy or ExponentialBackoffStrategy()
        self.on_retry = on_retry
        self._sleep = sleep

    async def run(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Execute ``operation``, retrying failures the strategy accepts.

        Raises:
            Exception: The last failure, once attempts are exhausted or the
                failure is not retryable.
        """
        attempt = 0
        while True:
            attempt += 1
            try:
                return await operation()
            except Exception as error:
                if not self.strategy.should_retry(error, attempt):
                    if attempt > 1:
                        _logger.warning(
                            "retry.exhausted",
                            attempts=attempt,
                            error_type=type(error).__name__,
                            error=str(error),
                        )
                    raise

                delay = self.strategy.delay_for(attempt)
                _logger.info(
                    "retry.scheduled",
                    attempt=attempt,
                    delay_seconds=round(delay, 3),
                    error_type=type(error).__name__,
                    error=str(error),
                )
                if self.on_retry is not None:
                    self.on_retry(error, attempt)
                await self._sleep(delay)


async def with_retry(
    operation: Callable[[], Awaitable[T]],
    policy: RetryPolicy | None = None,
    *,
    sleep: SleepFn = asyncio.sleep,
) -> T:
    """Run ``operation`` with exponential backoff per ``policy``."""
    policy = policy or RetryPolicy()
    executor = RetryExecutor(
        ExponentialBackoffStrategy(policy),
        on_retry=policy.on_retry,
        sleep=sleep,
    )
    return await executor.run(operation)


__all__ = [
    "ExponentialBackoffStrategy",
    "RetryCondition",
    "RetryExecutor",
    "RetryObserver",
    "RetryPolicy",
    "RetryStrategy",
    "with_retry",
]
