"""CircleCI project discovery.

A file belongs to a CircleCI project when one of its ancestor directories
holds a CircleCI marker file and that directory's git checkout tracks a
GitHub or Bitbucket remote. Descriptors are rebuilt from the filesystem and
git config on every lookup and never cached.
"""

from __future__ import annotations

import logging
import webbrowser
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from buildstatus import CI_SERVICE
from buildstatus.integrations.git import api_token, current_branch, find_project_root, remote_url
from buildstatus.integrations.remote import VcsHost, parse_remote
from buildstatus.utils.errors import GitOperationError, NotAProjectError

logger = logging.getLogger(__name__)

# Checked in order; the nearest directory holding any of them wins
MARKER_FILES: tuple[str, ...] = (".circleci/config.yml", "circle.yml")

CIRCLECI_WEB_URL = "https://circleci.com"


@dataclass(frozen=True)
class ProjectDescriptor:
    """Everything needed to query and display one CircleCI project.

    Attributes:
        root_path: Directory containing the marker file
        vcs_host: Hosting service of the tracked remote
        owner: Repository owner (user or organisation)
        repo: Repository name
        branch: Checked-out branch
        api_token: CircleCI token, per-repo override or global default
        ci_service: Always "circleci"
    """

    root_path: Path
    vcs_host: VcsHost
    owner: str
    repo: str
    branch: str
    api_token: str | None = field(default=None, repr=False)
    ci_service: str = CI_SERVICE

    @property
    def web_url(self) -> str:
        """Project page on the CircleCI website."""
        return f"{CIRCLECI_WEB_URL}/{self.vcs_host.web_code}/{self.owner}/{self.repo}"

    @property
    def slug(self) -> str:
        """Human-readable ``owner/repo@branch`` identifier."""
        return f"{self.owner}/{self.repo}@{self.branch}"


def find_marker_root(path: Path | str) -> Path | None:
    """Return the nearest ancestor of ``path`` holding any CircleCI marker file."""
    roots = [root for marker in MARKER_FILES if (root := find_project_root(path, marker))]
    if not roots:
        return None
    return max(roots, key=lambda root: len(root.parts))


def resolve_project(
    filename: Path | str,
    default_token: str | None = None,
) -> ProjectDescriptor | None:
    """Build the project descriptor for a file.

    Git failures (not a checkout, detached HEAD, no tracking remote) are
    logged and reported as "no project".

    Args:
        filename: Any file or directory inside the project
        default_token: Global token used when the repo has no override

    Returns:
        ProjectDescriptor, or None if the file is not in a recognised project
    """
    path = Path(filename).expanduser().absolute()
    start = path if path.is_dir() else path.parent

    root = find_marker_root(start)
    if root is None:
        return None

    try:
        branch = current_branch(root)
        url = remote_url(root, branch)
        token = api_token(root) or default_token
    except GitOperationError as e:
        logger.debug("Ignoring %s: %s", root, e)
        return None

    remote = parse_remote(url)
    if remote is None:
        logger.debug("Ignoring %s: unsupported remote %s", root, url)
        return None

    return ProjectDescriptor(
        root_path=root,
        vcs_host=remote.host,
        owner=remote.owner,
        repo=remote.repo,
        branch=branch,
        api_token=token,
    )


def require_project(
    filename: Path | str,
    default_token: str | None = None,
) -> ProjectDescriptor:
    """Like resolve_project, but raise when the file is not in a project.

    Raises:
        NotAProjectError: If no project could be resolved
    """
    descriptor = resolve_project(filename, default_token)
    if descriptor is None:
        raise NotAProjectError(str(filename))
    return descriptor


def open_web_page(
    descriptor: ProjectDescriptor,
    opener: Callable[[str], object] = webbrowser.open,
) -> str:
    """Open the project's CircleCI page in a browser.

    Args:
        descriptor: Project to open
        opener: Browser launcher, injectable for tests

    Returns:
        The URL that was opened
    """
    url = descriptor.web_url
    logger.info("Opening %s", url)
    opener(url)
    return url


__all__ = [
    "MARKER_FILES",
    "CIRCLECI_WEB_URL",
    "ProjectDescriptor",
    "find_marker_root",
    "resolve_project",
    "require_project",
    "open_web_page",
]
