"""Logging configuration for BUILDSTATUS.

This module provides logging controlled by environment variables. Modules
log through ``logging.getLogger(__name__)``; records propagate to the
``buildstatus`` logger configured here.

Environment Variables:
    BUILD_STATUS_LOG: Set to "true" to enable logging (default: "false")
    BUILD_STATUS_LOG_FILE: Path to log file (default: ~/.buildstatus.log)
"""

import logging
import os
from pathlib import Path

# Environment variable configuration
LOG_ENABLED = os.environ.get("BUILD_STATUS_LOG", "false").lower() == "true"
LOG_FILE = Path(os.environ.get("BUILD_STATUS_LOG_FILE", str(Path.home() / ".buildstatus.log")))

# Package logger; module loggers propagate to it
LOGGER_NAME = "buildstatus"


def setup_logging() -> logging.Logger:
    """Configure logging based on environment variables.

    Creates a logger that writes to the configured log file when
    BUILD_STATUS_LOG is set to "true". Otherwise, uses a NullHandler
    to suppress all log output.

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(LOGGER_NAME)

    # Calling again replaces the handlers instead of stacking them
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if LOG_ENABLED:
        LOG_FILE.parent.mkdir(parents=True, exist_ok=True)

        handler = logging.FileHandler(LOG_FILE)
        handler.setFormatter(
            logging.Formatter(
                "[%(asctime)s] %(levelname)s %(name)s: %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(handler)
        logger.setLevel(logging.DEBUG)
    else:
        logger.addHandler(logging.NullHandler())

    return logger


def log_message(message: str) -> None:
    """Log a message if logging is enabled.

    Args:
        message: Message to log
    """
    logging.getLogger(LOGGER_NAME).info(message)


def log_command(command: str, exit_code: int = 0) -> None:
    """Log command execution with exit code.

    Used to track git invocations for debugging purposes.

    Args:
        command: The command that was executed
        exit_code: The exit code returned by the command
    """
    logging.getLogger(LOGGER_NAME).info(f"COMMAND: {command} | EXIT_CODE: {exit_code}")


__all__ = [
    "LOG_ENABLED",
    "LOG_FILE",
    "setup_logging",
    "LOGGER_NAME",
    "log_message",
    "log_command",
]
