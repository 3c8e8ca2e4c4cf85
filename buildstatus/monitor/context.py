"""Monitoring context owned by the host application.

MonitorContext bundles the status registry, the poll scheduler and the
status client. The host creates one, tells it which files it watches, and
reads statuses back from it; nothing here is process-global.

Example:
    context = MonitorContext.from_settings(settings, open_files=editor.open_paths)
    context.watch_file("/work/app/src/main.py")
    context.start()
    ...
    context.stop()
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable, Iterable
from pathlib import Path

from buildstatus.config.settings import DEFAULT_CHECK_INTERVAL_SECONDS, Settings
from buildstatus.integrations.circleci import StatusClient
from buildstatus.integrations.project import ProjectDescriptor, resolve_project
from buildstatus.monitor.registry import StatusRegistry
from buildstatus.monitor.scheduler import PollScheduler, TimerFactory
from buildstatus.utils.errors import BuildStatusError, MissingTokenError

logger = logging.getLogger(__name__)

OpenFilesProvider = Callable[[], Iterable[Path | str]]
ProjectResolver = Callable[[Path | str, str | None], ProjectDescriptor | None]
StatusCallback = Callable[[Path, str | None], None]


class MonitorContext:
    """Registry, scheduler and client for one host application.

    Polling failures are logged per project and never stop the scheduler;
    the previously stored status stays in place until a later poll succeeds.

    Attributes:
        registry: Root → status mapping
        scheduler: Timer driving periodic sweeps
        client: CircleCI status client
        default_token: Global API token used when a repo has no override
    """

    def __init__(
        self,
        open_files: OpenFilesProvider,
        client: StatusClient | None = None,
        *,
        check_interval: float = DEFAULT_CHECK_INTERVAL_SECONDS,
        default_token: str | None = None,
        on_change: StatusCallback | None = None,
        on_remove: Callable[[Path], None] | None = None,
        resolver: ProjectResolver = resolve_project,
        timer_factory: TimerFactory = threading.Timer,
    ) -> None:
        """Initialize the context.

        Args:
            open_files: Returns the paths of the files the host currently has open
            client: Status client (a default StatusClient if not provided)
            check_interval: Seconds between sweeps
            default_token: Global API token
            on_change: Called with (root, status) when a root's status changes
            on_remove: Called with root when a root is pruned or unwatched
            resolver: Project lookup, injectable for tests
            timer_factory: Timer constructor, injectable for tests
        """
        self.registry = StatusRegistry()
        self.client = client or StatusClient()
        self.default_token = default_token
        self.scheduler = PollScheduler(self.sweep, check_interval, timer_factory)
        self._open_files = open_files
        self._on_change = on_change
        self._on_remove = on_remove
        self._resolver = resolver
        # Serialises sweeps with out-of-band polls
        self._poll_lock = threading.RLock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        open_files: OpenFilesProvider,
        **kwargs: object,
    ) -> MonitorContext:
        """Build a context from loaded configuration."""
        client = StatusClient(timeout_seconds=settings.timeout_seconds)
        return cls(
            open_files,
            client,
            check_interval=settings.check_interval,
            default_token=settings.default_token,
            **kwargs,  # type: ignore[arg-type]
        )

    def __enter__(self) -> MonitorContext:
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()

    def start(self) -> None:
        self.scheduler.start()

    def stop(self) -> None:
        self.scheduler.stop()

    def watch_file(self, filename: Path | str) -> ProjectDescriptor | None:
        """Start monitoring the project a file belongs to.

        A newly registered root is polled immediately; roots already being
        monitored are left alone.

        Args:
            filename: File the host just opened

        Returns:
            The resolved project, or None if the file is not in a CircleCI project

        Raises:
            MissingTokenError: If the project resolves but has no API token
        """
        descriptor = self._resolver(filename, self.default_token)
        if descriptor is None:
            return None
        if not descriptor.api_token:
            raise MissingTokenError(str(descriptor.root_path))

        if self.registry.register(descriptor.root_path):
            logger.info("Monitoring %s (%s)", descriptor.root_path, descriptor.slug)
            self.poll(descriptor)
        return descriptor

    def unwatch_root(self, root: Path | str) -> None:
        """Stop monitoring a root outright."""
        root = Path(root)
        if self.registry.unregister(root):
            logger.info("Stopped monitoring %s", root)
            self._notify_remove(root)

    def status_for(self, root: Path | str) -> str | None:
        """Current normalized status of a root (None when pending or unknown)."""
        return self.registry.get(Path(root))

    def snapshot(self) -> dict[Path, str | None]:
        """Copy of all monitored roots and their statuses."""
        return self.registry.snapshot()

    def poll(self, descriptor: ProjectDescriptor) -> None:
        """Fetch and store one project's status, logging any failure."""
        with self._poll_lock:
            try:
                status = self.client.fetch_status(descriptor)
            except BuildStatusError as e:
                logger.warning("Could not refresh %s: %s", descriptor.root_path, e)
                return
            if self.registry.update(descriptor.root_path, status):
                logger.info("%s is now %s", descriptor.slug, status)
                if self._on_change is not None:
                    self._on_change(descriptor.root_path, status)

    def sweep(self) -> None:
        """Refresh every registered root, pruning the ones no longer in use.

        A root is kept when it still resolves to the same project root and
        at least one open file lies under it.
        """
        with self._poll_lock:
            open_paths = [Path(p).expanduser().absolute() for p in self._open_files()]
            for root in self.registry.roots():
                descriptor = self._resolver(root, self.default_token)
                in_use = any(path.is_relative_to(root) for path in open_paths)
                if descriptor is None or descriptor.root_path != root or not in_use:
                    self.registry.unregister(root)
                    logger.info("Pruned %s", root)
                    self._notify_remove(root)
                    continue
                try:
                    self.poll(descriptor)
                except Exception:
                    # One root failing never skips the rest of the sweep
                    logger.exception("Unexpected error refreshing %s", root)

    def _notify_remove(self, root: Path) -> None:
        if self._on_remove is not None:
            self._on_remove(root)


__all__ = ["MonitorContext", "OpenFilesProvider", "ProjectResolver", "StatusCallback"]
