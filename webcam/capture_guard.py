"""Backoff for consecutive failed frame grabs."""
from __future__ import annotations

import logging
import time
from collections.abc import Callable

logger = logging.getLogger(__name__)


class CaptureLostError(RuntimeError):
    """Raised once the camera has failed too many reads in a row."""


class CaptureFailureGuard:
    """Sleeps after each failed read and gives up after ``max_failures`` in a row."""

    def __init__(
        self,
        *,
        max_failures: int = 50,
        retry_delay_s: float = 0.1,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.max_failures = max_failures
        self.retry_delay_s = retry_delay_s
        self._sleep = sleep
        self.failures = 0

    def record_failure(self) -> None:
        self.failures += 1
        if self.failures >= self.max_failures:
            raise CaptureLostError(f"camera read failed {self.failures} times in a row")
        if self.failures == 1:
            logger.warning("Frame grab failed; retrying every %.2fs", self.retry_delay_s)
        self._sleep(self.retry_delay_s)

    def record_success(self) -> None:
        if self.failures:
            logger.info("Frame grab recovered after %d failures", self.failures)
        self.failures = 0


__all__ = ["CaptureFailureGuard", "CaptureLostError"]
