"""Configuration package exports.

Exposes:
- `Settings`: Pydantic settings for application configuration
- `ConfigDocument`, `GlobalConfig`: the validated plugin configuration document
- `TomlConfigSource`, `StaticConfigSource`: where the document comes from
"""

from .document import DEFAULT_CONFIG, ConfigDocument, GlobalConfig, build_document
from .settings import Settings
from .source import ConfigSource, StaticConfigSource, TomlConfigSource

__all__ = [
    "Settings",
    "DEFAULT_CONFIG",
    "ConfigDocument",
    "GlobalConfig",
    "build_document",
    "ConfigSource",
    "StaticConfigSource",
    "TomlConfigSource",
]
