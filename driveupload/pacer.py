"""Process-wide pacing and retry for outbound upload calls.

A single ``Pacer`` is meant to be shared by every upload in the process. It
spaces calls out by a sleep interval that grows on every retryable failure and
decays back towards the minimum on success, so that concurrent uploads back
off together when the server pushes back.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from typing import Protocol, TypeVar

from driveupload.const import (
    DEFAULT_LOW_LEVEL_RETRIES,
    DEFAULT_PACER_MAX_SLEEP,
    DEFAULT_PACER_MIN_SLEEP,
)
from driveupload.exceptions import RetriesExhaustedError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryCaller(Protocol):
    """Anything that can invoke a callable under a retry policy."""

    def call(
        self, fn: Callable[[], T], should_retry: Callable[[Exception], bool]
    ) -> T:
        """Invoke ``fn`` until it succeeds or the error is not retryable."""
        ...


class Pacer:
    """Shared rate limiter with exponential backoff on retryable errors."""

    def __init__(
        self,
        min_sleep: float = DEFAULT_PACER_MIN_SLEEP,
        max_sleep: float = DEFAULT_PACER_MAX_SLEEP,
        decay_constant: int = 2,
        attack_constant: int = 1,
        retries: int = DEFAULT_LOW_LEVEL_RETRIES,
        sleep: Callable[[float], None] = time.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialise the pacer.

        Args:
            min_sleep: Minimum spacing between calls, in seconds.
            max_sleep: Upper bound on the spacing, in seconds.
            decay_constant: How fast the spacing shrinks after a success.
            attack_constant: How fast the spacing grows after a failure.
            retries: Total number of attempts per call.
            sleep: Function used to wait. Replaced by a no-op in tests.
            clock: Monotonic clock used to schedule calls.
        """
        if retries < 1:
            raise ValueError(f"retries must be at least 1, got {retries}")
        if min_sleep < 0 or max_sleep < min_sleep:
            raise ValueError(
                f"invalid sleep bounds: min_sleep={min_sleep}, max_sleep={max_sleep}"
            )
        self.min_sleep = min_sleep
        self.max_sleep = max_sleep
        self.decay_constant = decay_constant
        self.attack_constant = attack_constant
        self.retries = retries
        self._sleep = sleep
        self._clock = clock

        self._sleep_time = min_sleep
        self._next_call = 0.0
        self._lock = threading.Lock()

    @property
    def sleep_time(self) -> float:
        """Current spacing between calls, in seconds."""
        with self._lock:
            return self._sleep_time

    def _begin_call(self) -> None:
        """Reserve the next call slot and wait for it."""
        with self._lock:
            now = self._clock()
            wait = self._next_call - now
            self._next_call = max(now, self._next_call) + self._sleep_time
        if wait > 0:
            self._sleep(wait)

    def _end_call(self, retry: bool) -> None:
        """Adjust the spacing according to the outcome of the last call."""
        with self._lock:
            if retry:
                if self.attack_constant == 0:
                    new_sleep = self.max_sleep
                else:
                    factor = 1 << self.attack_constant
                    new_sleep = self._sleep_time * factor / (factor - 1)
            else:
                factor = 1 << self.decay_constant
                new_sleep = self._sleep_time * (factor - 1) / factor
            self._sleep_time = min(max(new_sleep, self.min_sleep), self.max_sleep)

    def call(
        self, fn: Callable[[], T], should_retry: Callable[[Exception], bool]
    ) -> T:
        """Invoke ``fn`` with pacing, retrying errors ``should_retry`` accepts.

        Args:
            fn: Zero-argument callable performing one attempt.
            should_retry: Predicate deciding whether an error is transient.

        Returns:
            The value returned by the first successful attempt.

        Raises:
            RetriesExhaustedError: If every attempt failed with a retryable error.
            Exception: The first non-retryable error raised by ``fn``.
        """
        attempt = 0
        while True:
            attempt += 1
            self._begin_call()
            try:
                result = fn()
            except Exception as exc:
                retry = should_retry(exc)
                self._end_call(retry)
                if not retry:
                    raise
                if attempt >= self.retries:
                    logger.error("All %d attempts failed: %s", self.retries, exc)
                    raise RetriesExhaustedError(self.retries, exc) from exc
                logger.warning(
                    "Attempt %d/%d failed, retrying: %s", attempt, self.retries, exc
                )
                continue
            self._end_call(False)
            return result
