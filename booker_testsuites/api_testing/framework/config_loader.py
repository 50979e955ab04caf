"""
================================================================================
Configuration Loader
================================================================================

YAML-based configuration management with environment variable override support.

Features:
    - Lazy, load-once settings shared by every caller
    - Environment overlay files (BOOKER_ENV=staging merges config/staging.yaml)
    - Environment variable override (BASE_URL overrides base.url)
    - Dot notation key access with typed accessors

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import os
import threading
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional

import yaml
from loguru import logger


# Default configuration file paths
DEFAULT_CONFIG_DIR = Path(__file__).parent.parent.parent.parent / "config"
DEFAULT_CONFIG_PATH = DEFAULT_CONFIG_DIR / "config.yaml"

# Environment variable selecting the overlay file (config/<env>.yaml)
ENVIRONMENT_VARIABLE = "BOOKER_ENV"

# Keys that may be supplied purely through environment variables
WELL_KNOWN_KEYS = ("base.url", "auth.username", "auth.password")

_MISSING = object()


class ConfigurationError(Exception):
    """Raised when configuration loading or access fails."""
    pass


class ConfigMissing(ConfigurationError, KeyError):
    """Raised when a required setting is absent."""

    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key

    def __str__(self) -> str:
        return f"Required setting is not configured: {self.key}"


class ConfigLoadFailure(ConfigurationError):
    """Raised when the settings source cannot be read or parsed."""
    pass


class ConfigLoader:
    """
    Configuration loader with YAML and environment variable support.

    Configuration hierarchy (highest to lowest priority):
        1. Environment variables (BASE_URL)
        2. Environment overlay file (config/<env>.yaml)
        3. Base YAML configuration file
        4. Default values passed to get()

    Settings are loaded on first access and never change afterwards. One
    instance is created per test session and handed to the components that
    need it.

    Usage:
        >>> config = ConfigLoader()
        >>> config.get_base_url()
        'https://restful-booker.herokuapp.com'

        >>> config.get_int("api.timeout", 30)
        30  # Default value if not configured

    Environment Variable Mapping:
        - base.url -> BASE_URL
        - auth.username -> AUTH_USERNAME
        - api.timeout -> API_TIMEOUT
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        environment: Optional[str] = None,
    ) -> None:
        """
        Initialize configuration loader. Nothing is read until first access.

        Args:
            config_path: Path to the base YAML file.
                        Uses DEFAULT_CONFIG_PATH if not specified.
            environment: Overlay name. Falls back to $BOOKER_ENV.
        """
        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_PATH
        self._environment = environment or os.environ.get(ENVIRONMENT_VARIABLE)
        self._settings: Optional[Mapping[str, Any]] = None
        self._lock = threading.Lock()

    @property
    def config_path(self) -> Path:
        return self._config_path

    @property
    def environment(self) -> Optional[str]:
        return self._environment

    @property
    def settings(self) -> Mapping[str, Any]:
        """
        Read-only flattened settings, loaded at most once.

        Raises:
            ConfigLoadFailure: If the settings source is missing or invalid
        """
        with self._lock:
            if self._settings is None:
                self._settings = MappingProxyType(self._load_config())
            return self._settings

    def _load_config(self) -> Dict[str, Any]:
        """Load, merge and flatten configuration files."""
        if not self._config_path.exists():
            raise ConfigLoadFailure(
                f"Configuration file not found: {self._config_path}"
            )

        config = self._read_yaml(self._config_path)
        logger.debug(f"Loaded configuration from: {self._config_path}")

        if self._environment:
            overlay_path = self._config_path.parent / f"{self._environment}.yaml"
            if overlay_path.exists():
                config = _deep_merge(config, self._read_yaml(overlay_path))
                logger.debug(f"Merged environment config: {overlay_path}")
            else:
                logger.warning(
                    f"No overlay for environment '{self._environment}': {overlay_path}"
                )

        flat = _flatten(config)
        self._apply_env_overrides(flat)
        return flat

    @staticmethod
    def _read_yaml(path: Path) -> Dict[str, Any]:
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except OSError as e:
            raise ConfigLoadFailure(
                f"Unable to read configuration file {path}: {e}"
            ) from e
        except yaml.YAMLError as e:
            raise ConfigLoadFailure(
                f"Invalid YAML in configuration file {path}: {e}"
            ) from e

        if data is None:
            return {}
        if not isinstance(data, dict):
            raise ConfigLoadFailure(
                f"Configuration file {path} must contain a mapping, "
                f"got {type(data).__name__}"
            )
        return data

    @staticmethod
    def _apply_env_overrides(flat: Dict[str, Any]) -> None:
        for key in set(flat) | set(WELL_KNOWN_KEYS):
            env_value = os.environ.get(_env_name(key))
            if env_value is not None:
                flat[key] = env_value
                logger.debug(f"Setting '{key}' overridden from environment")

    def get(self, key: str, default: Any = _MISSING) -> Any:
        """
        Get configuration value by dot-notation key.

        Values keep the type they were written with: YAML scalars arrive as
        int, float or bool, environment overrides always arrive as str. Use
        get_int, get_float or get_bool when a specific type is needed.

        Args:
            key: Dot-notation path (e.g., "base.url")
            default: Value returned when the key is absent

        Returns:
            Configuration value or default

        Raises:
            ConfigMissing: If the key is absent and no default was given
        """
        settings = self.settings
        if key in settings:
            return settings[key]
        if default is _MISSING:
            raise ConfigMissing(key)
        return default

    def get_base_url(self) -> str:
        """Base address of the booking API."""
        return str(self.get("base.url"))

    def get_int(self, key: str, default: Any = _MISSING) -> int:
        value = self.get(key, default)
        try:
            return int(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Setting '{key}' is not an integer: {value!r}") from e

    def get_float(self, key: str, default: Any = _MISSING) -> float:
        value = self.get(key, default)
        try:
            return float(value)
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Setting '{key}' is not a number: {value!r}") from e

    def get_bool(self, key: str, default: Any = _MISSING) -> bool:
        value = self.get(key, default)
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in ("true", "1", "yes", "on")

    def get_section(self, section: str) -> Dict[str, Any]:
        """
        Get every setting under a prefix, keyed by the remainder.

        Args:
            section: Section name (e.g., "auth")

        Returns:
            Section dictionary or empty dict if not found
        """
        prefix = f"{section}."
        return {
            key[len(prefix):]: value
            for key, value in self.settings.items()
            if key.startswith(prefix)
        }


def _env_name(key: str) -> str:
    return key.upper().replace(".", "_")


def _deep_merge(base: Dict, override: Dict) -> Dict:
    """
    Deep merges two dictionaries, with override taking precedence.
    """
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _flatten(data: Dict[str, Any], prefix: str = "") -> Dict[str, Any]:
    flat: Dict[str, Any] = {}
    for key, value in data.items():
        full_key = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{full_key}."))
        else:
            flat[full_key] = value
    return flat


__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "ConfigMissing",
    "ConfigLoadFailure",
]
