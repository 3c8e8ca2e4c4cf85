"""Git operations for BUILDSTATUS.

This module provides the read-only git queries the project locator needs:
marker-file discovery, the current branch, the branch's tracking remote URL
and arbitrary config values.
"""

from __future__ import annotations

import subprocess
from pathlib import Path

from buildstatus.utils.errors import GitOperationError
from buildstatus.utils.logging import log_command

# Per-repository override for the CircleCI API token
TOKEN_CONFIG_KEY = "build-status.api-token"


def find_project_root(path: Path | str, marker_filename: str) -> Path | None:
    """Find the nearest directory containing a marker file.

    Traverses from ``path`` (inclusive) upward until:
    - ``marker_filename`` exists in the current directory (returns it)
    - The filesystem root is reached (returns None)

    Args:
        path: Directory to start from
        marker_filename: File name, or relative path such as ".circleci/config.yml"

    Returns:
        Path to the project root, or None if no ancestor has the marker
    """
    current = Path(path).absolute()
    while True:
        if (current / marker_filename).exists():
            return current

        parent = current.parent
        if parent == current:  # Reached filesystem root
            return None
        current = parent


def _run_git(root: Path, *args: str) -> subprocess.CompletedProcess[str]:
    """Run a git command inside ``root`` and log it.

    Raises:
        GitOperationError: If git is missing or exits non-zero
    """
    command = ["git", "-C", str(root), *args]
    display = "git " + " ".join(args)
    try:
        result = subprocess.run(
            command,
            capture_output=True,
            text=True,
            check=True,
        )
    except FileNotFoundError as e:
        raise GitOperationError("git executable not found") from e
    except subprocess.CalledProcessError as e:
        log_command(display, e.returncode)
        stderr = (e.stderr or "").strip()
        raise GitOperationError(f"'{display}' failed in {root}: {stderr or e.returncode}") from e
    log_command(display, result.returncode)
    return result


def current_branch(root: Path) -> str:
    """Get the symbolic name of HEAD.

    Args:
        root: Directory inside the checkout

    Returns:
        Short branch name (e.g. "main")

    Raises:
        GitOperationError: If not a git checkout or HEAD is detached
    """
    result = _run_git(root, "symbolic-ref", "--short", "HEAD")
    return result.stdout.strip()


def config_value(root: Path, key: str) -> str | None:
    """Read a git config value.

    Args:
        root: Directory inside the checkout
        key: Config key (e.g. "remote.origin.url")

    Returns:
        The value, or None if the key is unset

    Raises:
        GitOperationError: If git is not installed
    """
    try:
        result = subprocess.run(
            ["git", "-C", str(root), "config", "--get", key],
            capture_output=True,
            text=True,
        )
    except FileNotFoundError as e:
        raise GitOperationError("git executable not found") from e
    log_command(f"git config --get {key}", result.returncode)
    if result.returncode != 0:
        return None
    value = result.stdout.strip()
    return value or None


def remote_url(root: Path, branch: str) -> str:
    """Get the URL of the remote the branch tracks.

    Args:
        root: Directory inside the checkout
        branch: Local branch name

    Returns:
        The remote URL

    Raises:
        GitOperationError: If the branch has no tracking remote or the remote has no URL
    """
    remote_name = config_value(root, f"branch.{branch}.remote")
    if remote_name is None:
        raise GitOperationError(f"Branch '{branch}' has no tracking remote in {root}")
    url = config_value(root, f"remote.{remote_name}.url")
    if url is None:
        raise GitOperationError(f"Remote '{remote_name}' has no URL in {root}")
    return url


def api_token(root: Path) -> str | None:
    """Get the per-repository API token override, if configured."""
    return config_value(root, TOKEN_CONFIG_KEY)


__all__ = [
    "TOKEN_CONFIG_KEY",
    "find_project_root",
    "current_branch",
    "config_value",
    "remote_url",
    "api_token",
]
