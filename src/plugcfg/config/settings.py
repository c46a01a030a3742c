"""Application settings for plugcfg.

This module defines a Pydantic ``BaseSettings`` model used to configure the
application via environment variables and a ``.env`` file. Environment
variables are read with the ``PLUGCFG_`` prefix (case-insensitive), and field
descriptions serve as the authoritative documentation for each setting.

These settings describe *where* things live (the configuration document, the
extra import paths) and how the process runs. What gets configured is decided
by the document itself; see ``plugcfg.config.document``.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings with environment variable support and validation.

    Notes:
    - Values can be provided via environment variables with prefix ``PLUGCFG_``
      (e.g., ``PLUGCFG_CONFIG_FILE=~/.config/plugins.toml``), or from a ``.env``
      file.
    - Configuration is case-insensitive and validates assignments at runtime.
    """

    app_name: str = Field(default="plugcfg", description="Application name")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Root logging level")

    config_file: Path = Field(
        default=Path("plugins.toml"),
        description="TOML document declaring plugins, bundles and global options",
    )
    search_paths: List[Path] = Field(
        default_factory=list,
        description="Extra directories prepended to sys.path before resolving modules",
    )

    api_host: str = Field(default="127.0.0.1", description="API server host")
    api_port: int = Field(default=8000, ge=1, le=65535, description="API server port")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        """Normalize the log level name and reject unknown levels.

        Args:
            value: Level name supplied via settings/env (e.g., "debug").

        Returns:
            The upper-cased level name.

        Raises:
            ValueError: If the name is not a standard logging level.
        """
        level = value.upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("config_file")
    @classmethod
    def expand_config_file(cls, value: Path) -> Path:
        """Expand ``~`` in the configuration document path."""
        return value.expanduser()

    model_config = {
        "env_file": ".env",
        "env_prefix": "PLUGCFG_",
        "case_sensitive": False,
        "validate_assignment": True,
        "extra": "ignore",
    }
