"""CircleCI REST API v1.1 status client.

This module fetches the most recent build of a project branch and maps
CircleCI's status vocabulary to the normalized statuses the indicator
understands. Strings without a mapping pass through unchanged so that new
CircleCI states are displayed raw instead of failing.

API endpoint:
    GET https://circleci.com/api/v1.1/project/<vcs>/<owner>/<repo>/tree/<branch>
        ?limit=1&circle-token=<token>
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import quote

import httpx

from buildstatus.config.settings import DEFAULT_TIMEOUT_SECONDS
from buildstatus.integrations.project import ProjectDescriptor
from buildstatus.utils.errors import MalformedResponseError, RemoteError

logger = logging.getLogger(__name__)

API_URL = "https://circleci.com/api/v1.1"

# Maximum length for error response body in exception messages
MAX_ERROR_BODY_LENGTH = 200

# CircleCI value → normalized status. No key may also appear as a value,
# so that normalizing twice gives the same result.
STATUS_MAPPING: dict[str, str] = {
    "success": "passed",
    "fixed": "passed",
    "scheduled": "queued",
    "not_running": "queued",
}


def normalize_status(raw: str) -> str:
    """Translate a CircleCI status/outcome string.

    Unmapped strings (including already-normalized ones) are returned as-is.
    """
    return STATUS_MAPPING.get(raw, raw)


def build_status_url(descriptor: ProjectDescriptor) -> str:
    """Build the v1.1 "recent builds for branch" URL, without query parameters."""
    branch = quote(descriptor.branch, safe="")
    return (
        f"{API_URL}/project/{descriptor.vcs_host.value}/"
        f"{descriptor.owner}/{descriptor.repo}/tree/{branch}"
    )


def extract_status(payload: Any) -> str:
    """Pick the raw status of the most recent build from a response payload.

    ``outcome`` is preferred; ``status`` covers builds still in progress,
    which have no outcome yet.

    Raises:
        MalformedResponseError: If the payload is not a non-empty list of build objects
    """
    if not isinstance(payload, list):
        raise MalformedResponseError(f"Expected a list of builds, got {type(payload).__name__}")
    if not payload:
        raise MalformedResponseError("No builds found for this branch")

    build = payload[0]
    if not isinstance(build, dict):
        raise MalformedResponseError(f"Expected a build object, got {type(build).__name__}")

    for key in ("outcome", "status"):
        value = build.get(key)
        if isinstance(value, str) and value:
            return value
    raise MalformedResponseError("Build record has neither 'outcome' nor 'status'")


class StatusClient:
    """Fetches normalized build statuses from CircleCI.

    HTTP Client Injection:
        An ``http_client`` may be passed for connection reuse or testing.
        Without one, each request opens (and closes) its own client.

    Attributes:
        timeout_seconds: Timeout applied to each request
    """

    def __init__(
        self,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
        http_client: httpx.Client | None = None,
    ) -> None:
        self.timeout_seconds = timeout_seconds
        self._http_client = http_client

    def fetch_status(self, descriptor: ProjectDescriptor) -> str:
        """Fetch the normalized status of the descriptor's latest build.

        Args:
            descriptor: Project to query

        Returns:
            Normalized status ("passed", "failed", "running", "queued", or a raw CircleCI string)

        Raises:
            RemoteError: On non-2xx responses and transport failures
            MalformedResponseError: If the response body cannot be interpreted
        """
        url = build_status_url(descriptor)
        params = {"limit": "1"}
        if descriptor.api_token:
            params["circle-token"] = descriptor.api_token
        headers = {"Accept": "application/json"}

        logger.debug("GET %s?limit=1 for %s", url, descriptor.root_path)
        try:
            if self._http_client is not None:
                response = self._http_client.get(
                    url, params=params, headers=headers, timeout=self.timeout_seconds
                )
            else:
                with httpx.Client(timeout=httpx.Timeout(self.timeout_seconds)) as client:
                    response = client.get(url, params=params, headers=headers)
        except httpx.TimeoutException as e:
            raise RemoteError(
                f"CircleCI request for {descriptor.slug} timed out after {self.timeout_seconds}s"
            ) from e
        except httpx.HTTPError as e:
            raise RemoteError(f"CircleCI request for {descriptor.slug} failed: {e}") from e

        if not response.is_success:
            body = response.text[:MAX_ERROR_BODY_LENGTH]
            raise RemoteError(
                f"CircleCI returned HTTP {response.status_code} for {descriptor.slug}: {body}",
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise MalformedResponseError(
                f"CircleCI returned invalid JSON for {descriptor.slug}"
            ) from e

        status = normalize_status(extract_status(payload))
        logger.debug("Status for %s: %s", descriptor.slug, status)
        return status


def fetch_status(
    descriptor: ProjectDescriptor,
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    http_client: httpx.Client | None = None,
) -> str:
    """Fetch the normalized status of a project's latest build.

    Convenience wrapper around StatusClient.fetch_status.
    """
    return StatusClient(timeout_seconds, http_client).fetch_status(descriptor)


__all__ = [
    "API_URL",
    "STATUS_MAPPING",
    "StatusClient",
    "build_status_url",
    "extract_status",
    "fetch_status",
    "normalize_status",
]
