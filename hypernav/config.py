"""Configuration for hypernav clients, stored in YAML files."""

from pathlib import Path
from typing import Any

import httpx
import structlog
import yaml

from hypernav.auth import BasicAuth, BearerAuth, OAuth2Auth

logger = structlog.get_logger()

CONFIG_DIR_NAME = ".hypernav"
CONFIG_FILE_NAME = "config.yaml"


class Config:
    """Client settings kept in a YAML file.

    Local settings live in .hypernav/config.yaml under the working directory,
    global settings in ~/.hypernav/config.yaml. Lookups check local settings
    first and fall back to global ones. Keys are flat dotted names such as
    "auth.type".
    """

    def __init__(self, use_global: bool = False, config_dir: Path | None = None) -> None:
        """Initialize configuration.

        Args:
            use_global: Read and write only the global file
            config_dir: Directory holding config.yaml (overrides use_global)
        """
        if config_dir is not None:
            self.config_dir = Path(config_dir)
            self.is_global = use_global
        elif use_global:
            self.config_dir = self.global_dir()
            self.is_global = True
        else:
            self.config_dir = Path.cwd() / CONFIG_DIR_NAME
            self.is_global = False

        self.config_file = self.config_dir / CONFIG_FILE_NAME
        self._config: dict[str, Any] = self._load(self.config_file)

        self._global_config: dict[str, Any] = {}
        if not self.is_global:
            global_file = self.global_dir() / CONFIG_FILE_NAME
            if global_file != self.config_file and global_file.exists():
                try:
                    self._global_config = self._load(global_file)
                except ValueError as e:
                    logger.warning("Ignoring unreadable global config", error=str(e))

        logger.debug("Config initialized", config_file=str(self.config_file), is_global=self.is_global)

    @staticmethod
    def global_dir() -> Path:
        return Path.home() / CONFIG_DIR_NAME

    @staticmethod
    def _load(path: Path) -> dict[str, Any]:
        if not path.exists():
            logger.debug("Config file does not exist", config_file=str(path))
            return {}
        try:
            with open(path, "r") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to load config", config_file=str(path), error=str(e))
            raise ValueError(f"Failed to load config from {path}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        return data

    def _save(self) -> None:
        self.config_dir.mkdir(parents=True, exist_ok=True)
        try:
            with open(self.config_file, "w") as f:
                yaml.safe_dump(self._config, f, default_flow_style=False, sort_keys=False)
        except (OSError, yaml.YAMLError) as e:
            logger.error("Failed to save config", config_file=str(self.config_file), error=str(e))
            raise ValueError(f"Failed to save config to {self.config_file}: {e}") from e
        logger.debug("Config saved", config_file=str(self.config_file))

    def get(self, key: str, default: Any = None) -> Any:
        if key in self._config:
            return self._config[key]
        if not self.is_global and key in self._global_config:
            logger.debug("Using global config value", key=key)
            return self._global_config[key]
        return default

    def set(self, key: str, value: Any) -> None:
        logger.debug("Setting config value", key=key)
        self._config[key] = value
        self._save()

    def unset(self, key: str) -> None:
        if key in self._config:
            logger.debug("Unsetting config value", key=key)
            del self._config[key]
            self._save()

    def list(self) -> dict[str, Any]:
        """Return all settings, local values overriding global ones."""
        if self.is_global:
            return dict(self._config)
        merged = dict(self._global_config)
        merged.update(self._config)
        return merged


def auth_from_config(config: Config) -> httpx.Auth | None:
    """Build the request signing step described by the auth.* settings.

    Returns None when auth.type is not set.
    """
    auth_type = config.get("auth.type")
    if not auth_type:
        return None

    logger.debug("Configuring auth", auth_type=auth_type)
    if auth_type == "basic":
        username = config.get("auth.username")
        if not username:
            raise ValueError("Basic auth requires auth.username")
        return BasicAuth(username, config.get("auth.password", ""))
    if auth_type == "bearer":
        return BearerAuth(config.get("auth.token", ""))
    if auth_type == "oauth2":
        token_endpoint = config.get("auth.token_endpoint")
        client_id = config.get("auth.client_id")
        if not token_endpoint or not client_id:
            raise ValueError("OAuth2 auth requires auth.token_endpoint and auth.client_id")
        return OAuth2Auth(
            token_endpoint=token_endpoint,
            client_id=client_id,
            client_secret=config.get("auth.client_secret"),
            grant_type=config.get("auth.grant_type", "client_credentials"),
            username=config.get("auth.username"),
            password=config.get("auth.password"),
            refresh_token=config.get("auth.refresh_token"),
        )
    raise ValueError(f"Unknown auth type: {auth_type}")


def get_config(use_global: bool = False) -> Config:
    """Return the local configuration with global fallback, or the global one."""
    return Config(use_global=use_global)
