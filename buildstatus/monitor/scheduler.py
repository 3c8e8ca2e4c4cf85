"""Recurring poll timer.

The next tick is armed only after the current sweep returns, so a slow
sweep stretches the cycle instead of overlapping with the next one.
"""

from __future__ import annotations

import functools
import logging
import threading
from collections.abc import Callable
from typing import Protocol

from buildstatus.config.settings import DEFAULT_CHECK_INTERVAL_SECONDS

logger = logging.getLogger(__name__)


class Timer(Protocol):
    """The subset of threading.Timer the scheduler relies on."""

    daemon: bool

    def start(self) -> None: ...

    def cancel(self) -> None: ...


TimerFactory = Callable[[float, Callable[[], None]], Timer]


class PollScheduler:
    """Runs ``sweep`` every ``interval`` seconds, measured from sweep completion.

    Testability:
        Pass a custom ``timer_factory`` to capture armed timers and fire
        ticks by hand instead of waiting on real threads.

    Attributes:
        interval: Seconds between the end of one sweep and the next tick
    """

    def __init__(
        self,
        sweep: Callable[[], None],
        interval: float = DEFAULT_CHECK_INTERVAL_SECONDS,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        self.interval = interval
        self._sweep = sweep
        self._timer_factory = timer_factory
        self._timer: Timer | None = None
        self._running = False
        # Bumped on every start; ticks from an earlier run never re-arm
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Arm the first tick. Calling start on a running scheduler is a no-op."""
        with self._lock:
            if self._running:
                return
            self._running = True
            self._generation += 1
            self._arm()
        logger.info("Poll scheduler started (interval %ss)", self.interval)

    def stop(self) -> None:
        """Cancel the pending tick. A sweep already in progress runs to completion."""
        with self._lock:
            self._running = False
            if self._timer is not None:
                self._timer.cancel()
                self._timer = None
        logger.info("Poll scheduler stopped")

    def tick(self, generation: int | None = None) -> None:
        """Run one sweep, then reschedule if still running.

        Args:
            generation: Run the tick was armed by. A tick from a run that has
                since been stopped (and possibly restarted) does not re-arm.
        """
        try:
            self._sweep()
        except Exception:
            logger.exception("Poll sweep failed")
        finally:
            with self._lock:
                current = generation is None or generation == self._generation
                if self._running and current:
                    self._arm()

    def _arm(self) -> None:
        timer = self._timer_factory(
            self.interval, functools.partial(self.tick, self._generation)
        )
        timer.daemon = True
        self._timer = timer
        timer.start()


__all__ = ["PollScheduler", "Timer", "TimerFactory"]
