"""Tests for buildstatus.monitor.context module.

Tests cover:
- Registering files (pending insert, immediate poll, missing token)
- Sweeps (refresh, pruning closed/unresolvable roots, re-registration)
- Per-project error isolation
"""

from __future__ import annotations

import logging
from pathlib import Path
from unittest.mock import MagicMock

import httpx
import pytest

from buildstatus.config.settings import Settings
from buildstatus.monitor.context import MonitorContext
from buildstatus.utils.errors import MissingTokenError, RemoteError

APP = Path("/work/app")
LIB = Path("/work/lib")


class FakeProjects:
    """Resolver stand-in: maps root → descriptor for any path under it."""

    def __init__(self, descriptors):
        self.descriptors = {d.root_path: d for d in descriptors}

    def __call__(self, filename, default_token=None):
        path = Path(filename)
        for root, descriptor in self.descriptors.items():
            if path.is_relative_to(root):
                return descriptor
        return None


@pytest.fixture
def open_files():
    return [APP / "src" / "main.py", LIB / "lib.py"]


@pytest.fixture
def client():
    client = MagicMock()
    client.fetch_status.return_value = "passed"
    return client


@pytest.fixture
def projects(make_descriptor):
    return FakeProjects([make_descriptor(APP), make_descriptor(LIB, repo="lib")])


@pytest.fixture
def context(open_files, client, projects):
    return MonitorContext(
        lambda: open_files,
        client,
        resolver=projects,
        timer_factory=MagicMock(),
    )


class TestWatchFile:
    """Tests for MonitorContext.watch_file."""

    def test_registers_and_polls_immediately(self, context, client):
        """A new root is inserted and polled out of band."""
        descriptor = context.watch_file(APP / "src" / "main.py")

        assert descriptor.root_path == APP
        assert context.status_for(APP) == "passed"
        client.fetch_status.assert_called_once_with(descriptor)

    def test_second_file_in_same_root_does_not_repoll(self, context, client):
        """Roots already monitored are not polled again on open."""
        context.watch_file(APP / "src" / "main.py")
        context.watch_file(APP / "README.md")

        assert client.fetch_status.call_count == 1

    def test_pending_until_first_successful_poll(self, context, client):
        """A failed first poll leaves the root registered as pending."""
        client.fetch_status.side_effect = RemoteError("down", status_code=503)

        context.watch_file(APP / "src" / "main.py")

        assert context.snapshot() == {APP: None}

    def test_not_a_project_returns_none(self, context, client):
        """Files outside projects are ignored silently."""
        assert context.watch_file("/tmp/scratch.txt") is None
        assert context.snapshot() == {}
        client.fetch_status.assert_not_called()

    def test_missing_token_refuses_to_monitor(self, open_files, client, make_descriptor):
        """A project without a token raises and is not registered."""
        context = MonitorContext(
            lambda: open_files,
            client,
            resolver=FakeProjects([make_descriptor(APP, api_token=None)]),
            timer_factory=MagicMock(),
        )

        with pytest.raises(MissingTokenError):
            context.watch_file(APP / "src" / "main.py")

        assert context.snapshot() == {}

    def test_on_change_called_for_new_status(self, open_files, client, projects):
        """on_change fires when a stored status changes."""
        on_change = MagicMock()
        context = MonitorContext(
            lambda: open_files,
            client,
            resolver=projects,
            on_change=on_change,
            timer_factory=MagicMock(),
        )

        context.watch_file(APP / "src" / "main.py")
        context.sweep()

        on_change.assert_called_once_with(APP, "passed")


class TestSweep:
    """Tests for MonitorContext.sweep."""

    def test_refreshes_every_root(self, context, client):
        """Each registered root gets a fresh status."""
        context.watch_file(APP / "src" / "main.py")
        context.watch_file(LIB / "lib.py")
        client.fetch_status.side_effect = ["running", "failed"]

        context.sweep()

        assert context.snapshot() == {APP: "running", LIB: "failed"}

    def test_prunes_root_without_open_files(self, context, open_files):
        """Closing the last file under a root removes it on the next sweep."""
        context.watch_file(APP / "src" / "main.py")
        context.watch_file(LIB / "lib.py")

        open_files.remove(APP / "src" / "main.py")
        context.sweep()

        assert APP not in context.registry
        assert LIB in context.registry

    def test_prefix_is_path_based(self, context, open_files, make_descriptor):
        """A sibling directory sharing a name prefix does not keep a root alive."""
        context.watch_file(APP / "src" / "main.py")
        open_files[:] = [Path("/work/app-old/main.py")]

        context.sweep()

        assert APP not in context.registry

    def test_reopen_registers_as_pending(self, context, open_files, client):
        """Reopening a file under a pruned root re-inserts it as pending."""
        context.watch_file(APP / "src" / "main.py")
        open_files.clear()
        context.sweep()
        assert APP not in context.registry

        client.fetch_status.side_effect = RemoteError("down", status_code=502)
        open_files.append(APP / "src" / "main.py")
        context.watch_file(APP / "src" / "main.py")

        assert context.snapshot() == {APP: None}

    def test_prunes_root_that_no_longer_resolves(self, context, projects):
        """A root whose marker or remote vanished is removed."""
        context.watch_file(APP / "src" / "main.py")
        del projects.descriptors[APP]

        context.sweep()

        assert APP not in context.registry

    def test_on_remove_called_when_pruned(self, open_files, client, projects):
        """on_remove fires for pruned roots."""
        on_remove = MagicMock()
        context = MonitorContext(
            lambda: open_files,
            client,
            resolver=projects,
            on_remove=on_remove,
            timer_factory=MagicMock(),
        )
        context.watch_file(APP / "src" / "main.py")
        open_files.clear()

        context.sweep()

        on_remove.assert_called_once_with(APP)

    def test_error_keeps_previous_status(self, context, client):
        """A failing fetch leaves the cached status and does not raise."""
        context.watch_file(APP / "src" / "main.py")
        context.watch_file(LIB / "lib.py")
        client.fetch_status.side_effect = [RemoteError("HTTP 500", status_code=500), "failed"]

        context.sweep()

        assert context.snapshot() == {APP: "passed", LIB: "failed"}

    def test_unexpected_error_does_not_skip_other_roots(self, context, client, caplog):
        """A non-BuildStatusError from one root still lets later roots refresh."""
        context.watch_file(APP / "src" / "main.py")
        context.watch_file(LIB / "lib.py")
        client.fetch_status.side_effect = [ValueError("boom"), "failed"]

        with caplog.at_level(logging.ERROR, logger="buildstatus"):
            context.sweep()

        assert context.snapshot() == {APP: "passed", LIB: "failed"}
        assert "Unexpected error refreshing /work/app" in caplog.text

    def test_failing_on_change_does_not_skip_other_roots(self, open_files, client, projects):
        """An exception raised by the host's on_change callback is contained."""
        on_change = MagicMock(side_effect=[None, None, RuntimeError("host bug"), None])
        context = MonitorContext(
            lambda: open_files,
            client,
            resolver=projects,
            on_change=on_change,
            timer_factory=MagicMock(),
        )
        context.watch_file(APP / "src" / "main.py")
        context.watch_file(LIB / "lib.py")
        client.fetch_status.side_effect = ["failed", "failed"]

        context.sweep()

        assert context.snapshot() == {APP: "failed", LIB: "failed"}
        assert on_change.call_count == 4

    def test_non_200_is_logged_not_raised(
        self, open_files, projects, make_status_client, caplog
    ):
        """A real non-200 response during a sweep is logged and swallowed."""
        responses = iter(
            [
                httpx.Response(200, json=[{"outcome": "success"}]),
                httpx.Response(500, json={"message": "Internal error"}),
            ]
        )
        context = MonitorContext(
            lambda: open_files,
            make_status_client(lambda request: next(responses)),
            resolver=projects,
            timer_factory=MagicMock(),
        )
        context.watch_file(APP / "src" / "main.py")

        with caplog.at_level(logging.WARNING, logger="buildstatus"):
            context.sweep()

        assert context.status_for(APP) == "passed"
        assert "HTTP 500" in caplog.text


class TestUnwatchRoot:
    """Tests for MonitorContext.unwatch_root."""

    def test_removes_entry(self, context):
        """Unwatching removes the entry outright."""
        context.watch_file(APP / "src" / "main.py")

        context.unwatch_root(APP)

        assert context.snapshot() == {}

    def test_unknown_root_is_noop(self, context):
        """Unwatching an unknown root does nothing."""
        context.unwatch_root(APP)

        assert context.snapshot() == {}


class TestLifecycle:
    """Tests for scheduler wiring."""

    def test_from_settings(self, open_files):
        """Settings configure interval, timeout and default token."""
        settings = Settings(api_token="global", check_interval=42, timeout_seconds=3.0)

        context = MonitorContext.from_settings(
            settings, lambda: open_files, timer_factory=MagicMock()
        )

        assert context.scheduler.interval == 42
        assert context.client.timeout_seconds == 3.0
        assert context.default_token == "global"

    def test_context_manager_starts_and_stops(self, open_files, client, projects):
        """Entering starts the scheduler, leaving stops it."""
        timer = MagicMock()
        context = MonitorContext(
            lambda: open_files,
            client,
            resolver=projects,
            timer_factory=MagicMock(return_value=timer),
        )

        with context:
            assert context.scheduler.is_running
            timer.start.assert_called_once()

        assert not context.scheduler.is_running
        timer.cancel.assert_called_once()
