"""
Session Auto-Lock

DESIGN DECISION: One state machine, one deadline.
Every activity event moves a single monotonic deadline to now + window.
The state is a pure function of how much time is left before that
deadline:

    remaining > warning        -> UNLOCKED_ACTIVE
    0 < remaining <= warning   -> WARNING (countdown = ceil(remaining))
    remaining <= 0             -> LOCKED

AutoLockTimer never schedules anything itself; `poll()` is called by
AutoLockScheduler on the asyncio loop (or directly by tests with a fake
clock). The scheduler keeps at most one pending handle.
"""

import asyncio
import math
import time
from enum import Enum
from typing import Callable, Optional

from committee_manager.audit import get_logger


logger = get_logger(__name__)


class LockState(str, Enum):
    UNLOCKED_ACTIVE = "unlocked_active"
    WARNING = "warning"
    LOCKED = "locked"


class AutoLockTimer:
    """
    Inactivity state machine.

    Args:
        window_seconds: Inactivity before locking
        warning_seconds: Length of the visible countdown before locking
        clock: Monotonic clock in seconds (injectable for tests)
        on_warning: Called with the countdown when the Warning state is entered
        on_lock: Called once when the timer locks by itself
    """

    def __init__(
        self,
        window_seconds: float = 600,
        warning_seconds: float = 60,
        clock: Callable[[], float] = time.monotonic,
        on_warning: Optional[Callable[[int], None]] = None,
        on_lock: Optional[Callable[[], None]] = None,
    ):
        if warning_seconds >= window_seconds:
            raise ValueError("warning_seconds must be shorter than window_seconds")

        self.window_seconds = window_seconds
        self.warning_seconds = warning_seconds
        self.on_warning = on_warning
        self.on_lock = on_lock

        self._clock = clock
        self._deadline = clock() + window_seconds
        self.state = LockState.UNLOCKED_ACTIVE
        self.countdown: Optional[int] = None

    @property
    def is_locked(self) -> bool:
        return self.state == LockState.LOCKED

    def time_remaining(self) -> float:
        """Seconds until the lock; zero once locked."""
        if self.is_locked:
            return 0.0
        return max(self._deadline - self._clock(), 0.0)

    def record_activity(self) -> None:
        """Push the deadline out by a full window. Ignored while locked."""
        if self.is_locked:
            return
        self._deadline = self._clock() + self.window_seconds
        self.state = LockState.UNLOCKED_ACTIVE
        self.countdown = None

    def poll(self) -> LockState:
        """Recompute the state from the time left before the deadline."""
        if self.is_locked:
            return self.state

        remaining = self._deadline - self._clock()
        if remaining <= 0:
            self.lock()
            if self.on_lock:
                self.on_lock()
        elif remaining <= self.warning_seconds:
            entering = self.state != LockState.WARNING
            self.state = LockState.WARNING
            self.countdown = math.ceil(remaining)
            if entering and self.on_warning:
                self.on_warning(self.countdown)
        else:
            self.state = LockState.UNLOCKED_ACTIVE
            self.countdown = None
        return self.state

    def lock(self) -> None:
        self.state = LockState.LOCKED
        self.countdown = None

    def start(self) -> None:
        """Restart from Active with a fresh window, e.g. after an explicit unlock."""
        self._deadline = self._clock() + self.window_seconds
        self.state = LockState.UNLOCKED_ACTIVE
        self.countdown = None

    def next_poll_delay(self) -> Optional[float]:
        """
        Seconds until the state or the countdown can next change.

        None once locked.
        """
        if self.is_locked:
            return None
        remaining = self._deadline - self._clock()
        if remaining <= 0:
            return 0.0
        if remaining > self.warning_seconds:
            return remaining - self.warning_seconds
        # time until ceil(remaining) drops by one
        return min(remaining - math.ceil(remaining) + 1, remaining)


class AutoLockScheduler:
    """
    Drives an AutoLockTimer from the running asyncio loop.

    Exactly one `call_later` handle exists at a time; it is cancelled
    before a new one is scheduled.
    """

    def __init__(self, timer: AutoLockTimer):
        self.timer = timer
        self._handle: Optional[asyncio.TimerHandle] = None

    @property
    def is_scheduled(self) -> bool:
        return self._handle is not None

    def start(self) -> None:
        """Restart the timer and begin polling. Must run inside the event loop."""
        self.timer.start()
        self._reschedule()

    def record_activity(self) -> None:
        self.timer.record_activity()
        if not self.timer.is_locked:
            self._reschedule()

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _reschedule(self) -> None:
        self.cancel()
        delay = self.timer.next_poll_delay()
        if delay is None:
            return
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(delay, self._tick)

    def _tick(self) -> None:
        self._handle = None
        state = self.timer.poll()
        if state == LockState.LOCKED:
            logger.info("session_auto_locked")
            return
        self._reschedule()
