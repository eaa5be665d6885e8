"""Bounded exponential backoff for establishing the IPC connection.

The player process is usually told to start a few milliseconds before its
IPC listener accepts connections, so the first dials are expected to fail.
"""

from __future__ import annotations

import asyncio
import logging
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Generic, TypeVar

from tunez.domain.shared.exceptions import ReconnectExhaustedError
from tunez.domain.shared.messages import LogTemplates

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class BackoffPolicy:
    """Delay schedule: ``min(base * 2**attempt, max)`` plus up to ``jitter_ratio`` of it."""

    base_delay: float = 0.05
    max_delay: float = 0.5
    max_attempts: int = 10
    jitter_ratio: float = 0.2

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        if self.base_delay < 0 or self.max_delay < 0:
            raise ValueError("delays cannot be negative")
        if not 0.0 <= self.jitter_ratio <= 1.0:
            raise ValueError("jitter_ratio must be within [0, 1]")

    def base_delay_for(self, attempt: int) -> float:
        """Delay after the zero-based ``attempt`` failed, before jitter."""
        return min(self.base_delay * (2**attempt), self.max_delay)

    def delay_for(self, attempt: int, rng: random.Random) -> float:
        delay = self.base_delay_for(attempt)
        return delay + delay * self.jitter_ratio * rng.random()


class Reconnector(Generic[T]):
    """Retries ``dial`` under a ``BackoffPolicy``.

    Only ``OSError`` counts as a retryable dial failure. Cancellation of the
    calling task interrupts the schedule immediately, including while sleeping.
    """

    def __init__(
        self,
        dial: Callable[[], Awaitable[T]],
        policy: BackoffPolicy | None = None,
        *,
        sleep: Callable[[float], Awaitable[object]] = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self._dial = dial
        self._policy = policy or BackoffPolicy()
        self._sleep = sleep
        self._rng = rng or random.Random()

    async def connect(self) -> T:
        """Dial until it succeeds or the attempt budget is spent.

        Raises:
            ReconnectExhaustedError: After ``max_attempts`` failed dials,
                chained from the last failure.
        """
        errors: list[OSError] = []
        attempts = self._policy.max_attempts

        for attempt in range(attempts):
            try:
                result = await self._dial()
            except OSError as e:
                errors.append(e)
            else:
                logger.debug(LogTemplates.IPC_CONNECTED, attempt + 1)
                return result

            # No wait after the final attempt.
            if attempt < attempts - 1:
                delay = self._policy.delay_for(attempt, self._rng)
                logger.debug(LogTemplates.IPC_RETRYING, attempt + 1, attempts, errors[-1], delay)
                await self._sleep(delay)

        logger.error(LogTemplates.IPC_EXHAUSTED, attempts, errors[-1])
        raise ReconnectExhaustedError(attempts, errors) from errors[-1]
