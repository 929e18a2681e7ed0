"""
Request throttle for the redirect auditor.

Audited URLs are processed one at a time against the same storefront. The
throttle enforces:
- A minimum delay between the start of consecutive URLs
- Adaptive exponential backoff after 429/503 responses, reset by any other
  status
"""

import asyncio
import time
from typing import Awaitable, Callable, Optional

from .config import MIN_REQUEST_DELAY_SECONDS, ThrottleConfig


BACKOFF_STATUS_CODES = (429, 503)


class RequestThrottle:
    """Spaces requests out and backs off when the server pushes back."""

    def __init__(
        self,
        config: Optional[ThrottleConfig] = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the throttle.

        Args:
            config: Throttle configuration (request delay, backoff policy)
            sleep: Coroutine used to wait
            clock: Monotonic clock in seconds
        """
        self._config = config or ThrottleConfig()
        self._sleep = sleep
        self._clock = clock
        self._last_request: Optional[float] = None
        self._consecutive_errors = 0

    @property
    def consecutive_errors(self) -> int:
        return self._consecutive_errors

    @property
    def base_delay(self) -> float:
        """Configured delay, never below the politeness floor."""
        return max(self._config.request_delay_seconds, MIN_REQUEST_DELAY_SECONDS)

    def current_delay(self) -> float:
        """
        Delay required between two requests right now.

        delay = base_delay * (backoff_base ^ consecutive_errors), capped at
        max_delay_seconds (the cap never drops it below base_delay).
        """
        delay = self.base_delay * (self._config.backoff_base ** self._consecutive_errors)
        return max(self.base_delay, min(delay, self._config.max_delay_seconds))

    def calculate_wait(self) -> float:
        """Seconds still to wait before the next request may start."""
        if self._last_request is None:
            return 0.0
        elapsed = self._clock() - self._last_request
        return max(0.0, self.current_delay() - elapsed)

    async def wait(self) -> float:
        """
        Wait until the next request may start, then mark it as started.

        Returns:
            The number of seconds waited
        """
        wait_seconds = self.calculate_wait()
        if wait_seconds > 0:
            await self._sleep(wait_seconds)
        self.mark_request()
        return wait_seconds

    def mark_request(self) -> None:
        """Record that a request started now."""
        self._last_request = self._clock()

    def record_status(self, status_code: Optional[int]) -> None:
        """
        Feed a response status back into the backoff policy.

        Args:
            status_code: HTTP status of the first hop (None when unknown)
        """
        if status_code in BACKOFF_STATUS_CODES:
            self._consecutive_errors += 1
        elif status_code is not None:
            self._consecutive_errors = 0
