"""Configuration management for BUILDSTATUS.

This package contains:
- settings: Settings dataclass with configuration fields
- manager: ConfigManager class for loading/saving configuration

Configuration Format
====================
Flat KEY=VALUE (environment variable style), for example:

    BUILD_STATUS_API_TOKEN="0123abcd"
    BUILD_STATUS_CHECK_INTERVAL=300
    BUILD_STATUS_TIMEOUT_SECONDS=10
"""

from buildstatus.config.manager import (
    SENSITIVE_KEY_PATTERNS,
    ConfigManager,
    is_sensitive_key,
    mask_secret,
)
from buildstatus.config.settings import (
    CONFIG_FILE,
    DEFAULT_CHECK_INTERVAL_SECONDS,
    DEFAULT_TIMEOUT_SECONDS,
    Settings,
)

__all__ = [
    "Settings",
    "ConfigManager",
    "CONFIG_FILE",
    "DEFAULT_CHECK_INTERVAL_SECONDS",
    "DEFAULT_TIMEOUT_SECONDS",
    "SENSITIVE_KEY_PATTERNS",
    "is_sensitive_key",
    "mask_secret",
]
