"""In-memory status registry keyed by project root.

Each entry moves through ``pending (None) -> status -> removed``. A root is
registered when monitoring starts for it, updated by every poll, and removed
once no open file lies under it.
"""

from __future__ import annotations

import threading
from pathlib import Path


class StatusRegistry:
    """Thread-safe mapping of project root → normalized status.

    ``None`` as a value means the root is registered but has not been
    polled successfully yet.
    """

    def __init__(self) -> None:
        self._entries: dict[Path, str | None] = {}
        self._lock = threading.Lock()

    def __contains__(self, root: object) -> bool:
        with self._lock:
            return root in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def register(self, root: Path) -> bool:
        """Insert ``root`` as pending.

        Returns:
            True if the root was newly inserted, False if already present
        """
        with self._lock:
            if root in self._entries:
                return False
            self._entries[root] = None
            return True

    def unregister(self, root: Path) -> bool:
        """Remove ``root``. Returns True if it was present."""
        with self._lock:
            return self._entries.pop(root, _MISSING) is not _MISSING

    def update(self, root: Path, status: str) -> bool:
        """Store a new status for a registered root.

        Updates for roots that were removed in the meantime are dropped.

        Returns:
            True if the stored value changed
        """
        with self._lock:
            if root not in self._entries:
                return False
            previous = self._entries[root]
            self._entries[root] = status
            return previous != status

    def get(self, root: Path) -> str | None:
        """Current status for ``root`` (None when pending or unregistered)."""
        with self._lock:
            return self._entries.get(root)

    def roots(self) -> list[Path]:
        """Snapshot of registered roots."""
        with self._lock:
            return list(self._entries)

    def snapshot(self) -> dict[Path, str | None]:
        """Copy of all entries."""
        with self._lock:
            return dict(self._entries)


_MISSING = object()


__all__ = ["StatusRegistry"]
