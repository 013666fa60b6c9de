"""Centralized configuration management for Gnosis.

Configuration is loaded with clear precedence:
1. Explicit overrides (highest priority)
2. Environment variables
3. Config file (``config.json`` layout)
4. Default values (lowest priority)

A loaded :class:`Config` is an immutable snapshot. Reloading produces a new
snapshot; nothing is shared or mutated in place.
"""

import copy
import json
import os
from pathlib import Path
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError

from gnosis.core.exceptions import ConfigError

from .index_config import IndexSection

DEFAULT_CONFIG_FILE = "config.json"


class Config(BaseModel):
    """Top-level configuration: every index this process maintains."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    indexes: list[IndexSection] = Field(
        default_factory=list, validation_alias=AliasChoices("indexes", "Indexes")
    )
    debug: bool = Field(default=False)

    @classmethod
    def load(
        cls,
        config_file: Path | str | None = None,
        overrides: dict[str, Any] | None = None,
    ) -> "Config":
        """Load configuration from a JSON file, environment and overrides.

        Args:
            config_file: Path to the JSON config file (defaults to ./config.json)
            overrides: Values applied on top of file and environment

        Returns:
            New configuration snapshot

        Raises:
            ConfigError: If the file cannot be read, is not valid JSON or
                does not describe a valid configuration
        """
        config_path = Path(config_file or DEFAULT_CONFIG_FILE)

        try:
            with open(config_path, encoding="utf-8") as f:
                config_data = json.load(f)
        except OSError as e:
            raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(
                f"Invalid JSON in config file {config_path}: {e}. "
                "Please check the file format and try again."
            ) from e

        if not isinstance(config_data, dict):
            raise ConfigError(f"Config file {config_path} must contain a JSON object")

        return cls.from_dict(config_data, overrides)

    @classmethod
    def from_dict(
        cls, config_data: dict[str, Any], overrides: dict[str, Any] | None = None
    ) -> "Config":
        """Build configuration from already-parsed data plus environment."""
        config_data = copy.deepcopy(config_data)

        # Legacy config.json files spell the list "Indexes"
        if "Indexes" in config_data and "indexes" not in config_data:
            config_data["indexes"] = config_data.pop("Indexes")

        env_vars = cls._load_env_vars()
        if "debug" in env_vars:
            config_data["debug"] = env_vars["debug"]
        indexing_env = env_vars.get("indexing", {})
        if indexing_env:
            for section in config_data.get("indexes", []):
                if isinstance(section, dict):
                    section.update(indexing_env)

        if overrides:
            cls._deep_merge(config_data, overrides)

        try:
            return cls.model_validate(config_data)
        except ValidationError as e:
            raise ConfigError(f"Invalid configuration: {e}") from e

    @staticmethod
    def _load_env_vars() -> dict[str, Any]:
        """Load configuration from environment variables.

        Uses the GNOSIS_ prefix with __ delimiter for nested values. Indexing
        values apply to every configured index.
        """
        config: dict[str, Any] = {}

        if debug := os.getenv("GNOSIS_DEBUG"):
            config["debug"] = debug.lower() in ("true", "1", "yes")

        indexing_config: dict[str, Any] = {}
        if debounce := os.getenv("GNOSIS_INDEXING__DEBOUNCE_SECONDS"):
            try:
                indexing_config["debounce_seconds"] = float(debounce)
            except ValueError as e:
                raise ConfigError(
                    f"GNOSIS_INDEXING__DEBOUNCE_SECONDS must be a number, got {debounce!r}"
                ) from e
        if fulltext := os.getenv("GNOSIS_INDEXING__FULLTEXT"):
            indexing_config["fulltext"] = fulltext.lower() in ("true", "1", "yes")

        if indexing_config:
            config["indexing"] = indexing_config

        return config

    @staticmethod
    def _deep_merge(base: dict[str, Any], update: dict[str, Any]) -> None:
        """Merge *update* into *base* in place, recursing into nested dicts."""
        for key, value in update.items():
            if key in base and isinstance(base[key], dict) and isinstance(value, dict):
                Config._deep_merge(base[key], value)
            else:
                base[key] = value

    def get_index(self, name: str) -> IndexSection:
        """Return the index section called *name*."""
        for section in self.indexes:
            if section.index_name == name:
                return section
        raise KeyError(name)
