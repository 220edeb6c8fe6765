"""
Config system - layered configuration for automodeler.

Sources are merged with precedence (later wins):
    config files (JSON / YAML) < .env file < environment variables < overrides

Environment keys use a prefix and ``__`` for nesting:

    AM_DATABASE__URL=sqlite:///app.db      ->  database.url
    AM_AUTH__PASSWORD_ALGORITHM=pbkdf2_sha256

Usage:
    loader = ConfigLoader.load(paths=["config/*.yaml"], env_file=".env")
    settings = Settings.from_loader(loader)
    configure(settings)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from glob import glob
from pathlib import Path
from typing import Any, Dict, List, Optional

import yaml
from dotenv import dotenv_values

from .faults.domains import ConfigInvalidFault

logger = logging.getLogger("automodeler.config")

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigLoader:
    """
    Loads and merges configuration from multiple sources with precedence:
    overrides > environment variables > .env file > config files
    """

    def __init__(self, env_prefix: str = "AM_"):
        self.env_prefix = env_prefix
        self.config_data: Dict[str, Any] = {}

    @classmethod
    def load(
        cls,
        paths: Optional[List[str]] = None,
        env_prefix: str = "AM_",
        env_file: Optional[str] = None,
        overrides: Optional[Dict[str, Any]] = None,
    ) -> ConfigLoader:
        """
        Load configuration from multiple sources.

        Args:
            paths: Config file paths (glob patterns supported)
            env_prefix: Prefix for environment variables
            env_file: Path to .env file
            overrides: Manual overrides (highest precedence)

        Returns:
            Configured ConfigLoader instance
        """
        loader = cls(env_prefix=env_prefix)

        for pattern in paths or []:
            loader._load_from_files(pattern)

        if env_file:
            loader._load_env_file(env_file)

        loader._load_from_env()

        if overrides:
            loader._merge_dict(loader.config_data, overrides)

        return loader

    def _load_from_files(self, pattern: str):
        """Load config from JSON or YAML files."""
        matches = sorted(glob(pattern))
        if not matches:
            logger.debug(f"No config files match {pattern!r}")
        for path_str in matches:
            path = Path(path_str)
            if path.suffix == ".json":
                self._load_json_file(path)
            elif path.suffix in (".yaml", ".yml"):
                self._load_yaml_file(path)
            else:
                raise ConfigInvalidFault(
                    key=str(path),
                    reason=f"Unsupported config file type: {path.suffix or '<none>'}",
                )

    def _load_json_file(self, path: Path):
        """Load config from JSON file."""
        with open(path) as f:
            try:
                data = json.load(f)
            except json.JSONDecodeError as exc:
                raise ConfigInvalidFault(key=str(path), reason=str(exc)) from exc
        self._merge_mapping(path, data)

    def _load_yaml_file(self, path: Path):
        """Load config from YAML file."""
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as exc:
                raise ConfigInvalidFault(key=str(path), reason=str(exc)) from exc
        if data:
            self._merge_mapping(path, data)

    def _merge_mapping(self, path: Path, data: Any):
        if not isinstance(data, dict):
            raise ConfigInvalidFault(
                key=str(path),
                reason=f"Top level must be a mapping, got {type(data).__name__}",
            )
        logger.debug(f"Loaded config file {path}")
        self._merge_dict(self.config_data, data)

    def _load_env_file(self, path: str):
        """Load prefixed keys from a .env file."""
        if not Path(path).exists():
            logger.debug(f"No .env file at {path}")
            return
        for key, value in dotenv_values(path).items():
            if key.startswith(self.env_prefix) and value is not None:
                self._set_nested(key, value)

    def _load_from_env(self):
        """Load config from environment variables."""
        for key, value in os.environ.items():
            if key.startswith(self.env_prefix):
                self._set_nested(key, value)

    def _set_nested(self, key: str, value: str):
        """Convert AM_DATABASE__URL to {"database": {"url": ...}}."""
        key = key[len(self.env_prefix):]

        parts = key.lower().split("__")

        current = self.config_data
        for part in parts[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]

        current[parts[-1]] = self._parse_value(value)

    def _parse_value(self, value: str) -> Any:
        """Parse string value to appropriate type."""
        if value.lower() in ("true", "yes", "on"):
            return True
        if value.lower() in ("false", "no", "off"):
            return False

        try:
            if "." in value:
                return float(value)
            return int(value)
        except ValueError:
            pass

        if value.startswith(("{", "[")):
            try:
                return json.loads(value)
            except json.JSONDecodeError:
                pass

        return value

    def _merge_dict(self, target: dict, source: dict):
        """Deep merge source into target."""
        for key, value in source.items():
            if key in target and isinstance(target[key], dict) and isinstance(value, dict):
                self._merge_dict(target[key], value)
            else:
                target[key] = value

    def get(self, path: str, default: Any = None) -> Any:
        """Get config value by dot-separated path."""
        current = self.config_data

        for part in path.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default

        return current

    def to_dict(self) -> dict:
        """Export all config as dictionary."""
        return self.config_data.copy()


@dataclass
class Settings:
    """Typed view of the settings automodeler itself reads."""

    database_url: str = "sqlite:///:memory:"
    database_options: Dict[str, Any] = field(default_factory=dict)
    password_algorithm: str = "argon2id"
    log_level: str = "WARNING"

    @classmethod
    def from_loader(cls, loader: ConfigLoader) -> Settings:
        options = loader.get("database.options", {})
        if not isinstance(options, dict):
            raise ConfigInvalidFault(key="database.options", reason="must be a mapping")

        settings = cls(
            database_url=str(loader.get("database.url", cls.database_url)),
            database_options=dict(options),
            password_algorithm=str(loader.get("auth.password_algorithm", cls.password_algorithm)),
            log_level=str(loader.get("logging.level", cls.log_level)).upper(),
        )
        settings.validate()
        return settings

    def validate(self) -> None:
        from .auth.hashing import ALGORITHMS

        if self.password_algorithm not in ALGORITHMS:
            raise ConfigInvalidFault(
                key="auth.password_algorithm",
                reason=f"expected one of {ALGORITHMS}, got {self.password_algorithm!r}",
            )
        if self.log_level not in LOG_LEVELS:
            raise ConfigInvalidFault(
                key="logging.level",
                reason=f"expected one of {LOG_LEVELS}, got {self.log_level!r}",
            )
        if not self.database_url.startswith("sqlite"):
            raise ConfigInvalidFault(
                key="database.url",
                reason=f"unsupported database URL: {self.database_url!r}",
            )

    def make_hasher(self):
        """PasswordHasher for the configured algorithm."""
        from .auth.hashing import PasswordHasher

        return PasswordHasher(algorithm=self.password_algorithm)


def configure(settings: Settings):
    """
    Apply settings: set the ``automodeler`` log level, register the
    default database and the default password hasher.

    Returns:
        The registered Database
    """
    from .db.engine import configure_database
    from .models.base import ModelRegistry

    logging.getLogger("automodeler").setLevel(settings.log_level)
    db = configure_database(settings.database_url, **settings.database_options)
    ModelRegistry.set_hasher(settings.make_hasher())
    logger.info(f"Configured default database {settings.database_url}")
    logger.info(f"Password hashing uses {settings.password_algorithm}")
    return db
