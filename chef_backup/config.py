"""Configuration management for chef-backup."""

import json
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import validator
from pydantic_settings import BaseSettings

from .exceptions import ConfigurationError

DEFAULT_RUNNING_CONFIG = "/etc/opscode/chef-server-running.json"
DEFAULT_EXPORT_DIR = "/var/opt/chef-backup"


class Settings(BaseSettings):
    """Process level settings, read from CHEF_BACKUP_* environment variables."""

    running_config_path: str = DEFAULT_RUNNING_CONFIG
    install_dir: str = "/opt/opscode"
    ctl_command: str = "chef-server-ctl"

    # Overrides for the running config's backup.* keys
    export_dir: Optional[str] = None
    tmp_dir: Optional[str] = None
    config_only: bool = False
    agree_to_go_offline: bool = False

    log_level: str = "INFO"

    @validator('log_level', pre=True)
    def normalize_log_level(cls, v):
        """Accept lowercase level names."""
        level = str(v).upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {v}")
        return level

    @property
    def embedded_bin(self) -> Path:
        return Path(self.install_dir) / "embedded" / "bin"

    @property
    def service_dir(self) -> Path:
        return Path(self.install_dir) / "sv"

    class Config:
        env_prefix = "CHEF_BACKUP_"
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"


class RunningConfig:
    """Read-only view of the server's running configuration.

    The running config is the JSON file rendered by the server's
    reconfigure run; everything of interest lives under ``private_chef``.
    """

    def __init__(self, data: Dict[str, Any]):
        self._data = data

    @classmethod
    def load(cls, path: str = DEFAULT_RUNNING_CONFIG) -> 'RunningConfig':
        """Load the running config from disk.

        Raises:
            ConfigurationError: if the file is missing or is not valid JSON
        """
        config_path = Path(path)
        try:
            with open(config_path, "r") as f:
                raw = json.load(f)
        except FileNotFoundError:
            raise ConfigurationError(f"Running config not found: {config_path}")
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Unable to read running config {config_path}: {e}")

        if not isinstance(raw, dict):
            raise ConfigurationError(f"Running config {config_path} is not a JSON object")

        return cls(raw.get("private_chef", raw))

    def get(self, *keys: str, default: Any = None) -> Any:
        """Look up a nested key, returning ``default`` when any level is missing."""
        node: Any = self._data
        for key in keys:
            if not isinstance(node, dict) or key not in node:
                return default
            node = node[key]
        return node

    @property
    def topology(self) -> str:
        return self.get("topology", default="standalone")

    def service_enabled(self, service: str) -> bool:
        # Services the running config does not mention are managed as enabled
        return bool(self.get(service, "enable", default=True))

    def to_dict(self) -> Dict[str, Any]:
        return dict(self._data)
