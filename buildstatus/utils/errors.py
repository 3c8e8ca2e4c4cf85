"""Custom exceptions and exit codes for BUILDSTATUS.

This module defines the exit codes and exception hierarchy used throughout
the application. Resolution failures surface to the user through these
exceptions; polling failures are caught per project by the scheduler.
"""

from enum import IntEnum
from typing import ClassVar


class ExitCode(IntEnum):
    """Exit codes used by the command-line interface."""

    SUCCESS = 0
    GENERAL_ERROR = 1
    NOT_A_PROJECT = 2
    MISSING_TOKEN = 3
    REMOTE_ERROR = 4
    GIT_ERROR = 5
    USER_CANCELLED = 130


class BuildStatusError(Exception):
    """Base exception for BUILDSTATUS errors.

    Each exception type has an associated exit code for proper error reporting.

    Attributes:
        exit_code: The exit code to use when this exception causes program termination
        message: The error message
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.GENERAL_ERROR

    def __init__(self, message: str, exit_code: ExitCode | None = None) -> None:
        """Initialize the exception.

        Args:
            message: Error message describing what went wrong
            exit_code: Optional override for the default exit code
        """
        super().__init__(message)
        self._exit_code = exit_code

    @property
    def exit_code(self) -> ExitCode:
        """Get the exit code for this exception.

        Returns:
            The instance exit code if set, otherwise the class default exit code.
        """
        if self._exit_code is not None:
            return self._exit_code
        return self.__class__._default_exit_code


class NotAProjectError(BuildStatusError):
    """The path does not belong to a recognised CI project.

    Raised when:
    - No marker file exists in the path or any of its ancestors
    - The git remote does not point at a supported host
    - Git could not report a branch or tracking remote

    Attributes:
        path: The path that was looked up
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.NOT_A_PROJECT

    def __init__(self, path: str, message: str | None = None) -> None:
        self.path = path
        super().__init__(message or f"Not a CircleCI project: {path}")


class MissingTokenError(BuildStatusError):
    """A project was resolved but no API token is configured for it."""

    _default_exit_code: ClassVar[ExitCode] = ExitCode.MISSING_TOKEN

    def __init__(self, root: str, message: str | None = None) -> None:
        self.root = root
        if message is None:
            message = (
                f"No CircleCI API token configured for {root}. "
                "Set BUILD_STATUS_API_TOKEN or run "
                "'git config build-status.api-token <token>' in the project."
            )
        super().__init__(message)


class RemoteError(BuildStatusError):
    """The CI provider answered with an error, or could not be reached.

    Attributes:
        status_code: HTTP status code, or None for transport failures
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.REMOTE_ERROR

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class MalformedResponseError(RemoteError):
    """The CI provider response could not be interpreted."""

    def __init__(self, message: str) -> None:
        super().__init__(message, status_code=None)


class GitOperationError(BuildStatusError):
    """Git operation failed.

    Raised when:
    - Not in a git repository
    - HEAD is detached
    - The branch has no tracking remote
    """

    _default_exit_code: ClassVar[ExitCode] = ExitCode.GIT_ERROR


class ConfigValidationError(BuildStatusError):
    """A configuration value could not be parsed or is out of range."""


__all__ = [
    "ExitCode",
    "BuildStatusError",
    "NotAProjectError",
    "MissingTokenError",
    "RemoteError",
    "MalformedResponseError",
    "GitOperationError",
    "ConfigValidationError",
]
