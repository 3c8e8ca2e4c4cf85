"""Git remote URL parsing.

Recognises GitHub and Bitbucket remotes in both SSH and HTTPS forms:

    git@github.com:owner/repo.git
    ssh://git@bitbucket.org:7999/owner/repo.git
    https://github.com/owner/repo
    https://user@bitbucket.org/owner/repo.git/
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum


class VcsHost(Enum):
    """Hosting services CircleCI can build from.

    The value is the code CircleCI's v1.1 API uses in project paths.
    """

    GITHUB = "github"
    BITBUCKET = "bitbucket"

    @property
    def web_code(self) -> str:
        """Short code used in CircleCI web URLs (``gh`` / ``bb``)."""
        return _WEB_CODES[self]

    @classmethod
    def from_hostname(cls, hostname: str) -> VcsHost:
        """Map a remote hostname to its hosting service.

        Raises:
            ValueError: If the hostname is not a supported host
        """
        hostname = hostname.lower()
        if hostname == "github.com":
            return cls.GITHUB
        if hostname in ("bitbucket.org", "bitbucket.com"):
            return cls.BITBUCKET
        raise ValueError(f"Unsupported git host: {hostname}")


_WEB_CODES: dict[VcsHost, str] = {
    VcsHost.GITHUB: "gh",
    VcsHost.BITBUCKET: "bb",
}

# The host must be the URL authority: after an optional scheme and user, so
# lookalike domains (notgithub.com, github.com.example.org) and hosts buried
# in another server's path (evil.example.com/github.com/...) are rejected.
_REMOTE_PATTERN = re.compile(
    r"^(?:[a-z][a-z0-9+.-]*://)?(?:[^@/]+@)?(?P<host>github\.com|bitbucket\.(?:org|com))"
    r"(?::\d+)?[:/]"
    r"(?P<owner>[^/:]+)/(?P<repo>[^/]+?)"
    r"(?:\.git)?/?$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class RemoteInfo:
    """Hosting coordinates extracted from a git remote URL."""

    host: VcsHost
    owner: str
    repo: str


def parse_remote(url: str) -> RemoteInfo | None:
    """Extract (host, owner, repo) from a git remote URL.

    Args:
        url: Remote URL as stored in ``remote.<name>.url``

    Returns:
        RemoteInfo, or None if the URL does not point at a supported host
    """
    match = _REMOTE_PATTERN.match(url.strip())
    if not match:
        return None
    return RemoteInfo(
        host=VcsHost.from_hostname(match.group("host")),
        owner=match.group("owner"),
        repo=match.group("repo"),
    )


__all__ = [
    "VcsHost",
    "RemoteInfo",
    "parse_remote",
]
