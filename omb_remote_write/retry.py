"""Retry strategies for the remote-write upload."""
from __future__ import annotations

import logging
import random
import time
from typing import Callable, TypeVar

from omb_remote_write.errors import TransmitError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """Runs an upload attempt function according to some strategy."""

    def run(self, attempt: Callable[[], T]) -> T:
        raise NotImplementedError


class SingleAttempt(RetryPolicy):
    """Exactly one attempt; any failure propagates."""

    def run(self, attempt: Callable[[], T]) -> T:
        return attempt()


class ExponentialBackoff(RetryPolicy):
    """
    Retries recoverable transmit errors with capped exponential backoff.

    Non-recoverable errors (4xx responses) are raised immediately. Delays are
    ``base_delay_s * 2 ** (n - 1)`` capped at ``max_delay_s`` plus up to 10%
    jitter.
    """

    def __init__(
        self,
        max_attempts: int = 3,
        base_delay_s: float = 0.5,
        max_delay_s: float = 5.0,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.max_attempts = max_attempts
        self.base_delay_s = base_delay_s
        self.max_delay_s = max_delay_s
        self.sleep = sleep

    def delay_for(self, attempt: int) -> float:
        delay = min(self.base_delay_s * (2 ** (attempt - 1)), self.max_delay_s)
        return delay + random.uniform(0, delay * 0.1)

    def run(self, attempt: Callable[[], T]) -> T:
        for n in range(1, self.max_attempts + 1):
            try:
                return attempt()
            except TransmitError as e:
                if not e.recoverable or n == self.max_attempts:
                    raise
                delay = self.delay_for(n)
                logger.warning(
                    "Upload failed (attempt %d/%d): %s; retrying in %.2fs",
                    n, self.max_attempts, e, delay,
                )
                self.sleep(delay)


def policy_for(retries: int) -> RetryPolicy:
    """Pick the policy for a number of extra attempts; 0 means single attempt."""
    if retries <= 0:
        return SingleAttempt()
    return ExponentialBackoff(max_attempts=retries + 1)
