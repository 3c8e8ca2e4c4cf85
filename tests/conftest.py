"""Shared pytest fixtures for BUILDSTATUS tests."""

from collections.abc import Callable
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest

from buildstatus.integrations.circleci import StatusClient
from buildstatus.integrations.project import ProjectDescriptor
from buildstatus.integrations.remote import VcsHost


@pytest.fixture
def mock_subprocess():
    """Mock subprocess.run for git commands."""
    with patch("subprocess.run") as mock:
        mock.return_value = MagicMock(
            returncode=0,
            stdout="",
            stderr="",
        )
        yield mock


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """Create a CircleCI project with a nested source file."""
    root = tmp_path / "app"
    (root / ".circleci").mkdir(parents=True)
    (root / ".circleci" / "config.yml").write_text("version: 2.1\n")
    (root / "src").mkdir()
    (root / "src" / "main.py").write_text("print('hello')\n")
    return root


@pytest.fixture
def make_descriptor() -> Callable[..., ProjectDescriptor]:
    """Factory for ProjectDescriptor instances with sensible defaults."""

    def _make(root: Path | str = "/work/app", **overrides) -> ProjectDescriptor:
        values = {
            "root_path": Path(root),
            "vcs_host": VcsHost.GITHUB,
            "owner": "acme",
            "repo": "app",
            "branch": "main",
            "api_token": "secret-token",
        }
        values.update(overrides)
        return ProjectDescriptor(**values)

    return _make


@pytest.fixture
def make_status_client() -> Callable[..., StatusClient]:
    """Factory for a StatusClient backed by an httpx.MockTransport handler."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]) -> StatusClient:
        http_client = httpx.Client(transport=httpx.MockTransport(handler))
        return StatusClient(timeout_seconds=5.0, http_client=http_client)

    return _make
