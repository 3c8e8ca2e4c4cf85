"""Configuration manager for BUILDSTATUS.

This module provides the ConfigManager class for loading, saving, and
displaying configuration values with a cascading hierarchy:

    1. Environment Variables (highest priority)
    2. Global Config (~/.buildstatus-config)
    3. Built-in Defaults (lowest priority)

Per-project API tokens live in each repository's git config
(``build-status.api-token``) and are resolved by the project locator.
"""

from __future__ import annotations

import logging
import os
import re
import tempfile
from pathlib import Path

from buildstatus.config.settings import CONFIG_FILE, Settings
from buildstatus.utils.console import console, print_header, print_info
from buildstatus.utils.errors import ConfigValidationError
from buildstatus.utils.logging import log_message

logger = logging.getLogger(__name__)

_KEY_PATTERN = re.compile(r"^([a-zA-Z_][a-zA-Z0-9_]*)=(.*)$")

# Substrings that mark a config key as holding a secret
SENSITIVE_KEY_PATTERNS: tuple[str, ...] = ("TOKEN", "SECRET", "PASSWORD", "KEY")


def is_sensitive_key(key: str) -> bool:
    """Return True if values for this key must never be logged or shown."""
    upper = key.upper()
    return any(pattern in upper for pattern in SENSITIVE_KEY_PATTERNS)


def mask_secret(value: str) -> str:
    """Mask a secret for display, keeping the last four characters."""
    if not value:
        return "(not set)"
    if len(value) <= 4:
        return "****"
    return f"****{value[-4:]}"


class ConfigManager:
    """Manages configuration loading and saving with cascading hierarchy.

    Configuration Precedence (highest to lowest):
    1. Environment Variables - CI/CD, temporary overrides
    2. Global Config (~/.buildstatus-config) - User defaults
    3. Built-in Defaults - Fallback values

    Security features:
    - Safe line-by-line parsing (no eval/exec)
    - Key name validation
    - Atomic file writes
    - Secure file permissions (600)

    Attributes:
        settings: Current settings instance
        global_config_path: Path to global ~/.buildstatus-config file
    """

    def __init__(self, global_config_path: Path | None = None) -> None:
        """Initialize the configuration manager.

        Args:
            global_config_path: Optional custom path to global config file.
                                Defaults to ~/.buildstatus-config.
        """
        self.global_config_path = global_config_path or CONFIG_FILE
        self.settings = Settings()
        self._raw_values: dict[str, str] = {}
        self._config_sources: dict[str, str] = {}

    def load(self) -> Settings:
        """Load configuration from all sources with cascading precedence.

        Each call starts from clean defaults so repeated loads never keep
        stale values.

        Returns:
            Settings instance with loaded values

        Raises:
            ConfigValidationError: If a numeric setting is malformed or out of range
        """
        self.settings = Settings()
        self._raw_values = {}
        self._config_sources = {}

        if self.global_config_path.exists():
            log_message(f"Loading global configuration from {self.global_config_path}")
            self._raw_values.update(self._read_file_values(self.global_config_path))
            for key in self._raw_values:
                self._config_sources[key] = "global"

        self._load_environment()

        for key, value in self._raw_values.items():
            self._apply_value_to_settings(key, value)

        log_message(f"Configuration loaded successfully ({len(self._raw_values)} keys)")
        return self.settings

    def _load_environment(self) -> None:
        """Override config with environment variables for known keys only."""
        for key in Settings.get_config_keys():
            env_value = os.environ.get(key)
            if env_value is not None:
                self._raw_values[key] = env_value
                self._config_sources[key] = "environment"

    def _apply_value_to_settings(self, key: str, value: str) -> None:
        """Apply a raw config value to the settings object.

        Args:
            key: Configuration key
            value: Raw string value from file or environment

        Raises:
            ConfigValidationError: If a numeric value cannot be parsed or is out of range
        """
        attr = self.settings.get_attribute_for_key(key)
        if attr is None:
            return  # Unknown key, ignore

        current_value = getattr(self.settings, attr)
        source = self._config_sources.get(key, "unknown")

        if isinstance(current_value, int):
            try:
                parsed_int = int(value)
            except ValueError:
                raise ConfigValidationError(
                    f"{key} must be an integer, got '{value}' (from {source})"
                ) from None
            if parsed_int < 1:
                raise ConfigValidationError(f"{key} must be at least 1, got {parsed_int}")
            setattr(self.settings, attr, parsed_int)
        elif isinstance(current_value, float):
            try:
                parsed_float = float(value)
            except ValueError:
                raise ConfigValidationError(
                    f"{key} must be a number, got '{value}' (from {source})"
                ) from None
            if parsed_float <= 0:
                raise ConfigValidationError(f"{key} must be positive, got {parsed_float}")
            setattr(self.settings, attr, parsed_float)
        else:
            setattr(self.settings, attr, value.strip())

    def save(self, key: str, value: str) -> str | None:
        """Save a configuration value to the global config file.

        Writes the value and reloads all configuration so that
        ``self.settings`` reflects the effective value.

        Args:
            key: Configuration key (must match pattern: [a-zA-Z_][a-zA-Z0-9_]*)
            value: Configuration value to save

        Returns:
            Warning message if an environment variable overrides the saved
            value, None otherwise.

        Raises:
            ValueError: If key name is invalid
        """
        if not re.match(r"^[a-zA-Z_][a-zA-Z0-9_]*$", key):
            raise ValueError(f"Invalid config key: {key}")

        target_path = self.global_config_path
        existing_lines: list[str] = []
        if target_path.exists():
            existing_lines = target_path.read_text().splitlines()

        new_lines: list[str] = []
        written = False
        escaped_value = self._escape_value_for_storage(value)

        for line in existing_lines:
            match = _KEY_PATTERN.match(line.strip())
            if match and match.group(1) == key:
                new_lines.append(f'{key}="{escaped_value}"')
                written = True
            else:
                # Comments, blank lines and other keys are kept as-is
                new_lines.append(line)

        if not written:
            new_lines.append(f'{key}="{escaped_value}"')

        self._atomic_write_to_path(new_lines, target_path)

        if is_sensitive_key(key):
            log_message(f"Configuration saved: {key}=<REDACTED>")
        else:
            log_message(f"Configuration saved: {key}")

        warning = None
        if os.environ.get(key) is not None:
            warning = (
                f"Warning: '{key}' saved to global config but is overridden "
                "by an environment variable"
            )

        self.load()
        return warning

    def _read_file_values(self, path: Path) -> dict[str, str]:
        """Read key=value pairs from a config file without modifying state.

        Args:
            path: Path to the config file

        Returns:
            Dictionary of key-value pairs
        """
        values: dict[str, str] = {}

        with path.open() as f:
            for line in f:
                line = line.strip()
                if not line or line.startswith("#"):
                    continue
                match = _KEY_PATTERN.match(line)
                if match:
                    key, value = match.groups()
                    # Only unescape for double-quoted values (single quotes are literal)
                    if len(value) >= 2 and value.startswith('"') and value.endswith('"'):
                        value = self._unescape_value(value[1:-1])
                    elif len(value) >= 2 and value.startswith("'") and value.endswith("'"):
                        value = value[1:-1]
                    values[key] = value
        return values

    def _atomic_write_to_path(self, lines: list[str], target_path: Path) -> None:
        """Atomically write lines to a config file with 0600 permissions."""
        target_path.parent.mkdir(parents=True, exist_ok=True)

        fd, temp_path = tempfile.mkstemp(
            dir=target_path.parent,
            prefix=".buildstatus-config-",
        )
        try:
            with os.fdopen(fd, "w") as f:
                f.write("\n".join(lines))
                if lines:
                    f.write("\n")

            os.chmod(temp_path, 0o600)
            Path(temp_path).replace(target_path)
        except Exception:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise

    @staticmethod
    def _escape_value_for_storage(value: str) -> str:
        """Escape backslashes and double quotes for double-quoted storage."""
        result = value.replace("\\", "\\\\")
        result = result.replace('"', '\\"')
        return result

    @staticmethod
    def _unescape_value(value: str) -> str:
        """Reverse _escape_value_for_storage."""
        result = value.replace("\\\\", "\\")
        result = result.replace('\\"', '"')
        return result

    def get_source(self, key: str) -> str:
        """Return where a key's effective value came from."""
        return self._config_sources.get(key, "default")

    def show(self) -> None:
        """Display current configuration using Rich formatting."""
        print_header("Current Configuration")
        print_info(f"Global config: {self.global_config_path}")
        console.print()

        s = self.settings
        console.print("  [bold]CircleCI:[/bold]")
        console.print(
            f"    API Token: {mask_secret(s.api_token)} "
            f"[dim]({self.get_source('BUILD_STATUS_API_TOKEN')})[/dim]"
        )
        console.print("  [bold]Polling:[/bold]")
        console.print(
            f"    Check Interval: {s.check_interval}s "
            f"[dim]({self.get_source('BUILD_STATUS_CHECK_INTERVAL')})[/dim]"
        )
        console.print(
            f"    Request Timeout: {s.timeout_seconds}s "
            f"[dim]({self.get_source('BUILD_STATUS_TIMEOUT_SECONDS')})[/dim]"
        )
        console.print()


__all__ = [
    "ConfigManager",
    "SENSITIVE_KEY_PATTERNS",
    "is_sensitive_key",
    "mask_secret",
]
