"""
YAML Config Provider - Load configuration from a YAML settings file.

Sources, later ones winning:
- Built-in defaults
- YAML file (explicit path, or ~/.patchtracker.yml when present)
- Environment variables (TRACKER_URL, TRACKER_USER, TRACKER_PASSWORD, ...)
- Command line argument overrides
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml

from ...core.exceptions import ConfigError
from ...core.ports.config_provider import (
    DEFAULT_URL,
    AppConfig,
    ConfigProviderPort,
    SyncConfig,
    TrackerConfig,
)


DEFAULT_CONFIG_FILE = Path("~/.patchtracker.yml")


class YamlConfigProvider(ConfigProviderPort):
    """
    Configuration provider backed by a YAML file.
    """

    DEFAULTS = {
        "url": DEFAULT_URL,
        "user": "",
        "password": "",
        "base_ref": "origin/master",
        "head_ref": "HEAD",
    }

    ENV_MAPPING = {
        "TRACKER_URL": "url",
        "TRACKER_USER": "user",
        "TRACKER_PASSWORD": "password",
        "TRACKER_BASE_REF": "base_ref",
    }

    def __init__(
        self,
        config_file: Optional[Path] = None,
        cli_overrides: Optional[dict[str, Any]] = None,
        environ: Optional[dict[str, str]] = None,
    ):
        """
        Initialize the config provider.

        Args:
            config_file: Path to the YAML file (default file used if not specified)
            cli_overrides: Command line argument overrides
            environ: Environment mapping (os.environ if not specified)
        """
        self._values: dict[str, Any] = dict(self.DEFAULTS)
        self._config_file = Path(config_file) if config_file else None
        self._cli_overrides = cli_overrides or {}
        self._environ = os.environ if environ is None else environ
        self._loaded_file: Optional[Path] = None

        self._load_yaml_file()
        self._load_environment()
        self._apply_cli_overrides()

    # -------------------------------------------------------------------------
    # ConfigProviderPort Implementation
    # -------------------------------------------------------------------------

    @property
    def name(self) -> str:
        return "YAML"

    @property
    def loaded_file(self) -> Optional[Path]:
        return self._loaded_file

    def load(self) -> AppConfig:
        """Load complete configuration."""
        tracker = TrackerConfig(
            url=str(self.get("url", DEFAULT_URL)),
            user=str(self.get("user", "")),
            password=str(self.get("password", "")),
        )

        sync = SyncConfig(
            base_ref=str(self.get("base_ref", "origin/master")),
            head_ref=str(self.get("head_ref", "HEAD")),
            verbose=bool(self.get("verbose", False)),
        )

        return AppConfig(
            tracker=tracker,
            sync=sync,
            config_file=str(self._loaded_file) if self._loaded_file else None,
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value."""
        key = self._normalize(key)
        value = self._values.get(key)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value."""
        self._values[self._normalize(key)] = value

    def validate(self) -> list[str]:
        """
        Validate configuration.

        Credentials are not required here: listing sets works without them
        and the server answers 401 for the calls that need them.
        """
        errors = []

        url = self.get("url", "")
        if not url:
            errors.append("Missing tracker url - set `url` in the config file or TRACKER_URL")
        elif not str(url).startswith(("http://", "https://")):
            errors.append(f"Tracker url must start with http:// or https:// (got {url!r})")

        return errors

    # -------------------------------------------------------------------------
    # Private Methods
    # -------------------------------------------------------------------------

    @staticmethod
    def _normalize(key: Any) -> str:
        # Files written for the Ruby client use symbol keys (":url")
        return str(key).strip().lstrip(":").lower().replace("-", "_")

    def _find_config_file(self) -> Optional[Path]:
        if self._config_file is not None:
            if not self._config_file.exists():
                raise ConfigError(f"Config file not found: {self._config_file}")
            return self._config_file

        default = DEFAULT_CONFIG_FILE.expanduser()
        if default.exists():
            return default

        return None

    def _load_yaml_file(self) -> None:
        """Load values from the YAML file."""
        config_file = self._find_config_file()
        if not config_file:
            return

        try:
            data = yaml.safe_load(config_file.read_text())
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read config file {config_file}: {e}", cause=e)

        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigError(f"Config file {config_file} must contain a mapping")

        for key, value in data.items():
            self._values[self._normalize(key)] = value
        self._loaded_file = config_file

    def _load_environment(self) -> None:
        """Load values from environment variables."""
        for env_key, config_key in self.ENV_MAPPING.items():
            raw_value = self._environ.get(env_key)
            if raw_value is not None:
                self._values[config_key] = raw_value

    def _apply_cli_overrides(self) -> None:
        """Apply CLI argument overrides."""
        cli_mapping = {
            "url": "url",
            "user": "user",
            "base": "base_ref",
            "head": "head_ref",
            "verbose": "verbose",
        }

        for cli_key, config_key in cli_mapping.items():
            if cli_key in self._cli_overrides and self._cli_overrides[cli_key] is not None:
                self._values[config_key] = self._cli_overrides[cli_key]
