"""External integrations for BUILDSTATUS.

This package contains:
- git: Read-only git queries (branch, tracking remote, config values)
- remote: GitHub/Bitbucket remote URL parsing
- project: CircleCI project discovery and web page action
- circleci: CircleCI REST API status client
"""

from buildstatus.integrations.circleci import (
    STATUS_MAPPING,
    StatusClient,
    fetch_status,
    normalize_status,
)
from buildstatus.integrations.git import (
    current_branch,
    find_project_root,
    remote_url,
)
from buildstatus.integrations.project import (
    MARKER_FILES,
    ProjectDescriptor,
    open_web_page,
    require_project,
    resolve_project,
)
from buildstatus.integrations.remote import RemoteInfo, VcsHost, parse_remote

__all__ = [
    # Git
    "find_project_root",
    "current_branch",
    "remote_url",
    # Remote
    "VcsHost",
    "RemoteInfo",
    "parse_remote",
    # Project
    "MARKER_FILES",
    "ProjectDescriptor",
    "resolve_project",
    "require_project",
    "open_web_page",
    # CircleCI
    "STATUS_MAPPING",
    "StatusClient",
    "fetch_status",
    "normalize_status",
]
