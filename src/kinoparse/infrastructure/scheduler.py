"""
Navigation scheduler.

kinopoisk shows a captcha to clients that load pages too quickly, so
every navigation is issued after a fixed delay. At most one delayed
navigation is pending at a time: arming a new one cancels the previous
one, which keeps a stale timer from firing into the next record after a
record is abandoned mid-flight.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Callable, Optional

logger = logging.getLogger(__name__)


@dataclass
class RateLimitConfig:
    """Configuration for navigation delays."""
    # Delay before the search page of each record (seconds)
    search_delay: float = 20.0

    # Delay before each following page of the same record (seconds)
    page_delay: float = 12.5

    # Random extra delay added on top, uniform in [0, jitter]
    jitter: float = 0.0


@dataclass
class SchedulerMetrics:
    """Scheduler counters."""
    total_scheduled: int
    total_fired: int
    total_cancelled: int
    total_delay: float
    pending: bool


class NavigationScheduler:
    """
    Single-slot cancellable delayed dispatch on an asyncio event loop.

    Callbacks run on the loop that armed them, so they can mutate scraper
    state without locking.
    """

    def __init__(
        self,
        config: RateLimitConfig | None = None,
        loop: asyncio.AbstractEventLoop | None = None,
    ):
        """
        Initialize scheduler.

        Args:
            config: Delay configuration
            loop: Event loop to schedule on (default: the running loop)
        """
        self.config = config or RateLimitConfig()
        self._loop = loop
        self._handle: Optional[asyncio.TimerHandle] = None

        # Statistics
        self._total_scheduled = 0
        self._total_fired = 0
        self._total_cancelled = 0
        self._total_delay = 0.0

    def bind(self, loop: asyncio.AbstractEventLoop) -> None:
        """Attach the scheduler to an event loop."""
        self._loop = loop

    def schedule(self, delay: float, callback: Callable[..., Any], *args: Any) -> float:
        """
        Run ``callback(*args)`` after ``delay`` seconds, replacing any pending call.

        Returns:
            Actual delay armed (seconds), jitter included
        """
        self.cancel()

        if self.config.jitter > 0:
            delay += random.uniform(0, self.config.jitter)

        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(delay, self._fire, callback, args)

        self._total_scheduled += 1
        self._total_delay += delay
        logger.debug(f"Navigation scheduled in {delay:.1f}s")
        return delay

    def schedule_search(self, callback: Callable[..., Any], *args: Any) -> float:
        """Schedule the first navigation of a record."""
        return self.schedule(self.config.search_delay, callback, *args)

    def schedule_page(self, callback: Callable[..., Any], *args: Any) -> float:
        """Schedule a follow-up navigation of the same record."""
        return self.schedule(self.config.page_delay, callback, *args)

    def cancel(self) -> bool:
        """
        Cancel the pending call, if any.

        Returns:
            True if a pending call was cancelled
        """
        if self._handle is None:
            return False

        self._handle.cancel()
        self._handle = None
        self._total_cancelled += 1
        logger.debug("Pending navigation cancelled")
        return True

    def _fire(self, callback: Callable[..., Any], args: tuple) -> None:
        self._handle = None
        self._total_fired += 1
        callback(*args)

    @property
    def pending(self) -> bool:
        """Whether a delayed call is armed and has not fired yet."""
        return self._handle is not None

    def get_metrics(self) -> SchedulerMetrics:
        """
        Get current scheduler metrics.

        Returns:
            SchedulerMetrics snapshot
        """
        return SchedulerMetrics(
            total_scheduled=self._total_scheduled,
            total_fired=self._total_fired,
            total_cancelled=self._total_cancelled,
            total_delay=self._total_delay,
            pending=self.pending,
        )

    def reset(self) -> None:
        """Cancel any pending call and clear statistics."""
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None
        self._total_scheduled = 0
        self._total_fired = 0
        self._total_cancelled = 0
        self._total_delay = 0.0
