"""Plugin and bundle descriptors.

This module defines the read-only records the loader works with:

- `ConfigKind` / `PluginConfig`: the tagged variant behind a plugin's
  ``config`` entry (absent, boolean, explicit module path, or inline table).
- `PluginSpec`: one declared plugin.
- `Bundle`: a named group of plugins configured by one shared module.

Instances are built from the configuration document; the loader never
mutates them.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional

logger = logging.getLogger(__name__)


class ConfigKind(str, Enum):
    """Shape of a plugin's ``config`` entry."""

    ABSENT = "absent"
    BOOLEAN = "boolean"
    MODULE = "module"
    TABLE = "table"


@dataclass(frozen=True)
class PluginConfig:
    """A plugin's ``config`` entry, tagged with its kind.

    Args:
        kind: Which variant this is.
        value: ``None`` for ``ABSENT``, a ``bool`` for ``BOOLEAN``, the module
            path for ``MODULE`` and a ``dict`` for ``TABLE``.
    """

    kind: ConfigKind = ConfigKind.ABSENT
    value: Any = None

    def __post_init__(self):
        """Check that the payload matches the kind."""
        expected = {
            ConfigKind.ABSENT: type(None),
            ConfigKind.BOOLEAN: bool,
            ConfigKind.MODULE: str,
            ConfigKind.TABLE: dict,
        }[self.kind]
        if not isinstance(self.value, expected):
            raise ValueError(
                f"Invalid {self.kind.value} config payload: {self.value!r}"
            )

    @classmethod
    def from_value(cls, value: Any) -> "PluginConfig":
        """Tag a raw document value.

        Raises:
            ValueError: If the value is none of absent, bool, str or mapping.
        """
        if value is None:
            return cls()
        if isinstance(value, bool):
            return cls(ConfigKind.BOOLEAN, value)
        if isinstance(value, str):
            return cls(ConfigKind.MODULE, value)
        if isinstance(value, Mapping):
            return cls(ConfigKind.TABLE, dict(value))
        raise ValueError(f"Unsupported config value: {value!r}")

    @property
    def is_true(self) -> bool:
        return self.kind is ConfigKind.BOOLEAN and self.value is True

    @property
    def is_false(self) -> bool:
        return self.kind is ConfigKind.BOOLEAN and self.value is False


@dataclass(frozen=True)
class PluginSpec:
    """A declared plugin.

    Args:
        name: Plugin name as declared (e.g. ``"telescope.nvim"``).
        config: What to do when no configuration module is found.
        opt: Lazy-load flag; lazy plugins are skipped unless
            ``load_opt_plugins`` is enabled.
    """

    name: str
    config: PluginConfig = field(default_factory=PluginConfig)
    opt: bool = False

    def __post_init__(self):
        if not self.name or not self.name.strip():
            raise ValueError("Plugin name cannot be empty")

    @classmethod
    def from_entry(cls, name: str, entry: Any) -> "PluginSpec":
        """Build a spec from a document entry.

        An entry is either a bare version string or a table with optional
        ``version``, ``opt`` and ``config`` keys. Versions belong to the
        package manager and are ignored. An unusable ``config`` value is
        logged and treated as absent.

        Raises:
            ValueError: If ``name`` is empty.
        """
        if not isinstance(entry, Mapping):
            return cls(name=name)

        try:
            config = PluginConfig.from_value(entry.get("config"))
        except ValueError as e:
            logger.warning(f"Ignoring config of plugin {name}: {e}")
            config = PluginConfig()

        return cls(name=name, config=config, opt=bool(entry.get("opt", False)))


@dataclass
class Bundle:
    """A named group of plugins configured by one shared module.

    Args:
        name: Bundle name; also the default module basename.
        items: Member plugin names, in declaration order.
        config: Explicit module path. Anything other than a string is
            discarded by the bundle loader.
    """

    name: str
    items: List[str] = field(default_factory=list)
    config: Any = None

    @classmethod
    def from_entry(cls, name: str, entry: Any) -> Optional["Bundle"]:
        """Build a bundle from a document entry, or ``None`` if malformed."""
        if not isinstance(entry, Mapping):
            return None
        items = entry.get("items")
        if not isinstance(items, list):
            return None
        return cls(name=name, items=[str(item) for item in items], config=entry.get("config"))
