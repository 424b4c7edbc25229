"""Configuration management for agency-manager using YAML files."""

import os
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import structlog
import yaml

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".agency-manager"
DEFAULT_BASE_URL = "http://localhost:3001/api"
DEFAULT_TIMEOUT = 10.0
DEFAULT_REPROBE_INTERVAL = 60.0
DEFAULT_NAMESPACE = "agency"


class Config:
    """Configuration manager using YAML file storage.

    Supports both local (directory-level) and global (user-level) configuration.
    Local config is stored in .agency-manager/config.yaml in the current directory.
    Global config is stored in ~/.agency-manager/config.yaml.

    When reading, values are looked up in local config first, then global config.
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None) -> None:
        """Initialize configuration manager.

        Args:
            use_global: If True, use global config only. If False, use local config with global fallback.
            config_dir: Custom directory to store config file (overrides use_global)
        """
        if config_dir is not None:
            self.config_dir = Path(config_dir)
            self.is_global = use_global
        elif use_global:
            self.config_dir = Path.home() / CONFIG_DIR_NAME
            self.is_global = True
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
            self.is_global = False

        self.config_file = self.config_dir / "config.yaml"
        self.config_dir.mkdir(parents=True, exist_ok=True)

        self._config: dict[str, Any] = self._load()

        # For local config, also load global config as fallback
        self._global_config: dict[str, Any] = {}
        if not self.is_global:
            global_config_file = Path.home() / CONFIG_DIR_NAME / "config.yaml"
            if global_config_file.exists() and global_config_file != self.config_file:
                try:
                    with open(global_config_file, "r") as f:
                        self._global_config = yaml.safe_load(f) or {}
                except (OSError, yaml.YAMLError) as e:
                    logger.warning("Failed to load global config", error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    def _load(self) -> dict[str, Any]:
        """Load configuration from YAML file.

        Returns:
            Configuration dictionary
        """
        if not self.config_file.exists():
            logger.debug("Config file does not exist, initializing empty config")
            return {}

        try:
            with open(self.config_file, "r") as f:
                config = yaml.safe_load(f) or {}
                logger.debug("Config loaded successfully", keys=list(config.keys()))
                return config
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", error=str(e))
            raise ValueError(f"Failed to load config from {self.config_file}: {e}") from e

    def _save(self) -> None:
        """Save configuration to YAML file."""
        try:
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
            logger.debug("Config saved successfully")
        except OSError as e:
            logger.error("Failed to save config", error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value.

        For local config, checks local config first, then falls back to global config.

        Args:
            key: Configuration key
            default: Default value if key doesn't exist

        Returns:
            Configuration value or default
        """
        if key in self._config:
            logger.debug("Getting config value from local", key=key)
            return self._config[key]

        if not self.is_global and key in self._global_config:
            logger.debug("Getting config value from global", key=key)
            return self._global_config[key]

        logger.debug("Config value not found", key=key)
        return default

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value."""
        logger.debug("Setting config value", key=key)
        self._config[key] = value
        self._save()

    def unset(self, key: str) -> None:
        """Remove a configuration value."""
        logger.debug("Unsetting config value", key=key)
        if key in self._config:
            del self._config[key]
            self._save()

    def list(self) -> dict[str, Any]:
        """List all configuration settings.

        For local config, merges global config with local config (local takes precedence).
        """
        if self.is_global:
            logger.debug("Listing global config values", count=len(self._config))
            return self._config.copy()
        merged = self._global_config.copy()
        merged.update(self._config)
        logger.debug("Listing merged config values", count=len(merged))
        return merged


def get_config(use_global: bool = False) -> Config:
    """Get a configuration instance.

    Args:
        use_global: If True, return global config. If False, return local config with global fallback.

    Returns:
        Config instance
    """
    return Config(use_global=use_global)


def _parse_interval(value: Any) -> float | None:
    if value is None:
        return DEFAULT_REPROBE_INTERVAL
    if isinstance(value, str) and value.strip().lower() == "never":
        return None
    try:
        interval = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid connectivity.reprobe_interval: {value!r}") from e
    if interval < 0:
        raise ValueError(f"connectivity.reprobe_interval cannot be negative: {value!r}")
    return interval


def _parse_timeout(value: Any) -> float:
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid http.timeout: {value!r}") from e
    if timeout <= 0:
        raise ValueError(f"http.timeout must be positive: {value!r}")
    return timeout


def _parse_base_url(value: Any) -> str:
    url = str(value).strip()
    if not url.startswith(("http://", "https://")):
        raise ValueError(f"api.base_url must be an http(s) URL: {value!r}")
    return url


def _parse_namespace(value: Any) -> str:
    namespace = str(value).strip()
    if not namespace:
        raise ValueError("storage.namespace cannot be empty")
    return namespace


SETTING_PARSERS: dict[str, Callable[[Any], Any]] = {
    "api.base_url": _parse_base_url,
    "http.timeout": _parse_timeout,
    "connectivity.reprobe_interval": _parse_interval,
    "storage.path": str,
    "storage.namespace": _parse_namespace,
}


def parse_setting(key: str, value: Any) -> Any:
    """Convert a raw config value for a known key; unknown keys pass through.

    Raises:
        ValueError: If the value is not valid for the key
    """
    parser = SETTING_PARSERS.get(key)
    return value if parser is None else parser(value)


@dataclass
class Settings:
    """Resolved, typed settings for building a store."""

    base_url: str = DEFAULT_BASE_URL
    timeout: float = DEFAULT_TIMEOUT
    reprobe_interval: float | None = DEFAULT_REPROBE_INTERVAL
    data_dir: Path = Path.home() / CONFIG_DIR_NAME / "data"
    namespace: str = DEFAULT_NAMESPACE

    @classmethod
    def from_config(cls, config: Config) -> "Settings":
        """Resolve settings from config keys, with AGENCY_API_URL and AGENCY_DATA_DIR overrides."""
        base_url = _parse_base_url(os.environ.get("AGENCY_API_URL") or config.get("api.base_url") or DEFAULT_BASE_URL)
        data_dir = os.environ.get("AGENCY_DATA_DIR") or config.get("storage.path")
        settings = cls(
            base_url=base_url,
            timeout=_parse_timeout(config.get("http.timeout", DEFAULT_TIMEOUT)),
            reprobe_interval=_parse_interval(config.get("connectivity.reprobe_interval")),
            data_dir=Path(data_dir).expanduser() if data_dir else Path.home() / CONFIG_DIR_NAME / "data",
            namespace=_parse_namespace(config.get("storage.namespace", DEFAULT_NAMESPACE)),
        )
        logger.debug("Settings resolved", base_url=settings.base_url, data_dir=str(settings.data_dir))
        return settings
