"""Settings dataclass for BUILDSTATUS configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CHECK_INTERVAL_SECONDS = 300
DEFAULT_TIMEOUT_SECONDS = 10.0


@dataclass
class Settings:
    """Configuration settings for BUILDSTATUS.

    All settings have sensible defaults and can be loaded from
    the configuration file (~/.buildstatus-config) or the environment.

    Attributes:
        api_token: Global default CircleCI API token (per-repo git config wins)
        check_interval: Seconds between the end of one poll sweep and the next
        timeout_seconds: Timeout applied to each status request
    """

    api_token: str = ""
    check_interval: int = DEFAULT_CHECK_INTERVAL_SECONDS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    # Config key to attribute mapping
    _key_mapping: dict[str, str] = field(
        default_factory=lambda: {
            "BUILD_STATUS_API_TOKEN": "api_token",
            "BUILD_STATUS_CHECK_INTERVAL": "check_interval",
            "BUILD_STATUS_TIMEOUT_SECONDS": "timeout_seconds",
        },
        repr=False,
    )

    def get_attribute_for_key(self, key: str) -> str | None:
        """Get the attribute name for a config key.

        Args:
            key: Configuration key (e.g., "BUILD_STATUS_API_TOKEN")

        Returns:
            Attribute name or None if key is unknown
        """
        return self._key_mapping.get(key)

    @classmethod
    def get_config_keys(cls) -> list[str]:
        """Get list of all valid configuration keys."""
        temp = cls()
        return list(temp._key_mapping.keys())

    @property
    def default_token(self) -> str | None:
        """The global API token, or None when unset."""
        return self.api_token or None


# Default configuration file path
CONFIG_FILE = Path.home() / ".buildstatus-config"


__all__ = [
    "Settings",
    "CONFIG_FILE",
    "DEFAULT_CHECK_INTERVAL_SECONDS",
    "DEFAULT_TIMEOUT_SECONDS",
]
