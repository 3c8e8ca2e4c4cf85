"""Tests for buildstatus.monitor.scheduler module."""

from unittest.mock import MagicMock

import pytest

from buildstatus.monitor.scheduler import PollScheduler


class FakeTimer:
    """Records arming instead of starting a thread."""

    def __init__(self, interval, function):
        self.interval = interval
        self.function = function
        self.daemon = False
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True


@pytest.fixture
def timers():
    return []


@pytest.fixture
def timer_factory(timers):
    def _factory(interval, function):
        timer = FakeTimer(interval, function)
        timers.append(timer)
        return timer

    return _factory


class TestPollScheduler:
    """Tests for PollScheduler."""

    def test_start_arms_first_tick(self, timers, timer_factory):
        """start arms a daemon timer for the configured interval."""
        scheduler = PollScheduler(MagicMock(), interval=300, timer_factory=timer_factory)

        scheduler.start()

        assert scheduler.is_running
        (timer,) = timers
        assert timer.interval == 300
        assert timer.started
        assert timer.daemon

    def test_start_twice_is_noop(self, timers, timer_factory):
        """A running scheduler does not arm a second timer."""
        scheduler = PollScheduler(MagicMock(), timer_factory=timer_factory)

        scheduler.start()
        scheduler.start()

        assert len(timers) == 1

    def test_tick_sweeps_then_reschedules(self, timers, timer_factory):
        """The next timer is armed after the sweep completes."""
        order = []
        sweep = MagicMock(side_effect=lambda: order.append(("sweep", len(timers))))
        scheduler = PollScheduler(sweep, interval=60, timer_factory=timer_factory)
        scheduler.start()

        timers[0].function()

        sweep.assert_called_once()
        assert order == [("sweep", 1)]
        assert len(timers) == 2
        assert timers[1].interval == 60

    def test_tick_survives_sweep_failure(self, timers, timer_factory):
        """An exception from the sweep is logged and the timer re-armed."""
        sweep = MagicMock(side_effect=RuntimeError("boom"))
        scheduler = PollScheduler(sweep, timer_factory=timer_factory)
        scheduler.start()

        timers[0].function()

        assert len(timers) == 2

    def test_stop_cancels_pending_timer(self, timers, timer_factory):
        """stop cancels the armed timer."""
        scheduler = PollScheduler(MagicMock(), timer_factory=timer_factory)
        scheduler.start()

        scheduler.stop()

        assert timers[0].cancelled
        assert not scheduler.is_running

    def test_restart_during_sweep_keeps_single_timer(self, timers, timer_factory):
        """stop + start while a sweep runs leaves exactly one live timer chain."""
        sweeps = []

        def sweep():
            sweeps.append(None)
            if len(sweeps) == 1:
                scheduler.stop()
                scheduler.start()

        scheduler = PollScheduler(sweep, timer_factory=timer_factory)
        scheduler.start()

        timers[0].function()

        assert len(timers) == 2
        assert not timers[1].cancelled

        # The restarted chain keeps rescheduling itself
        timers[1].function()

        assert len(timers) == 3

    def test_tick_after_stop_does_not_rearm(self, timers, timer_factory):
        """A sweep finishing after stop does not schedule another tick."""
        scheduler = PollScheduler(MagicMock(), timer_factory=timer_factory)
        scheduler.start()
        scheduler.stop()

        timers[0].function()

        assert len(timers) == 1
