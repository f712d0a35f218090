# RsyncPilot Scheduler
# Single recurring timer that re-triggers synchronization

import logging
import threading
from collections.abc import Callable
from enum import Enum
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class ScheduleState(str, Enum):
    """Scheduler state."""

    IDLE = "idle"
    ACTIVE = "active"


class Timer(Protocol):
    """What the scheduler needs from a timer."""

    def start(self) -> None: ...

    def cancel(self) -> None: ...


class RecurringTimer(threading.Thread):
    """
    Call a function every ``interval`` seconds until cancelled.

    The first call happens one interval after ``start``. Exceptions from
    the function are logged and do not stop the timer.
    """

    def __init__(self, interval: float, function: Callable[[], Any]):
        super().__init__(name=f"rsyncpilot-timer-{interval:g}s", daemon=True)
        self.interval = interval
        self.function = function
        self._finished = threading.Event()

    def cancel(self) -> None:
        """Stop future firings; a firing already in progress completes."""
        self._finished.set()

    @property
    def cancelled(self) -> bool:
        return self._finished.is_set()

    def run(self) -> None:
        while not self._wait_interval():
            try:
                self.function()
            except Exception:
                logger.exception("Scheduled sync trigger raised")

    def _wait_interval(self) -> bool:
        """Wait one interval; True if cancelled meanwhile."""
        # Event.wait overflows above TIMEOUT_MAX, so long intervals wait in slices
        remaining = self.interval
        while remaining > threading.TIMEOUT_MAX:
            if self._finished.wait(threading.TIMEOUT_MAX):
                return True
            remaining -= threading.TIMEOUT_MAX
        return self._finished.wait(remaining)


class Scheduler:
    """
    Owns at most one recurring timer.

    ``schedule_sync`` and ``cancel`` must be called from the controlling
    thread only; timer threads never touch the scheduler state.
    """

    def __init__(
        self,
        trigger: Callable[[], Any],
        timer_factory: Callable[[float, Callable[[], Any]], Timer] = RecurringTimer,
    ):
        """
        Initialize scheduler.

        Args:
            trigger: Called on every firing.
            timer_factory: Builds a timer from (interval_seconds, function).
        """
        self._trigger = trigger
        self._timer_factory = timer_factory
        self._timer: Optional[Timer] = None
        self._interval_minutes = 0

    @property
    def state(self) -> ScheduleState:
        return ScheduleState.ACTIVE if self._timer is not None else ScheduleState.IDLE

    @property
    def is_active(self) -> bool:
        return self._timer is not None

    @property
    def interval_minutes(self) -> int:
        """Interval of the live timer, 0 when idle."""
        return self._interval_minutes

    def schedule_sync(self, minutes: int) -> ScheduleState:
        """
        Replace the schedule with one firing every ``minutes``.

        Non-positive values cancel the schedule.
        """
        self.cancel()
        if minutes <= 0:
            return self.state

        timer = self._timer_factory(minutes * 60, self._trigger)
        timer.start()
        self._timer = timer
        self._interval_minutes = minutes
        logger.info("Scheduled sync every %d minute(s)", minutes)
        return self.state

    def cancel(self) -> None:
        """Cancel the live timer if any. Safe to call when idle."""
        if self._timer is None:
            return
        self._timer.cancel()
        self._timer = None
        self._interval_minutes = 0
        logger.info("Sync schedule cancelled")
