"""Utility modules for BUILDSTATUS.

This package contains:
- console: Rich-based terminal output utilities
- errors: Custom exceptions and exit codes
- logging: Logging configuration
"""

from buildstatus.utils.console import (
    console,
    print_error,
    print_header,
    print_info,
    print_warning,
)
from buildstatus.utils.errors import (
    BuildStatusError,
    ConfigValidationError,
    ExitCode,
    GitOperationError,
    MalformedResponseError,
    MissingTokenError,
    NotAProjectError,
    RemoteError,
)
from buildstatus.utils.logging import log_command, log_message, setup_logging

__all__ = [
    # Console
    "console",
    "print_error",
    "print_warning",
    "print_info",
    "print_header",
    # Errors
    "ExitCode",
    "BuildStatusError",
    "NotAProjectError",
    "MissingTokenError",
    "RemoteError",
    "MalformedResponseError",
    "GitOperationError",
    "ConfigValidationError",
    # Logging
    "setup_logging",
    "log_message",
    "log_command",
]
