"""The plugin configuration document.

The document is a nested mapping (usually parsed from TOML) with these
top-level keys:

- ``config``: global settings (``plugins_dir``, ``auto_setup``,
  ``load_opt_plugins``, ``colorscheme``/``colourscheme``, ``options``)
- ``plugins`` / ``rocks``: plugin name -> version string or table
- ``bundles``: bundle name -> ``{items = [...], config = "module.path"}``

User values are deep-merged over ``DEFAULT_CONFIG`` and validated with
Pydantic. Unknown top-level keys are kept but ignored.
"""

from __future__ import annotations

import copy
import logging
import re
from collections.abc import Mapping
from typing import Any, Dict, Iterator, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from ..errors import ConfigDocumentError
from ..plugins.base import Bundle, PluginSpec

DEFAULT_CONFIG: Dict[str, Any] = {
    "config": {
        "plugins_dir": "plugins",
        "auto_setup": False,
        "load_opt_plugins": False,
    },
}

_TRAILING_SEPARATORS = re.compile(r"[./\\]+$")

logger = logging.getLogger(__name__)


def deep_merge(*layers: Mapping[str, Any]) -> Dict[str, Any]:
    """Merge mappings left to right; later values win.

    Nested mappings are merged key by key, anything else is replaced. The
    inputs are not modified.

    Returns:
        A new dictionary.
    """
    result: Dict[str, Any] = {}
    for layer in layers:
        for key, value in layer.items():
            current = result.get(key)
            if isinstance(value, Mapping) and isinstance(current, Mapping):
                result[key] = deep_merge(current, value)
            elif isinstance(value, Mapping):
                result[key] = deep_merge(value)
            else:
                result[key] = copy.deepcopy(value)
    return result


def _plugin_spec(name: str, entry: Any) -> Optional[PluginSpec]:
    try:
        return PluginSpec.from_entry(name, entry)
    except ValueError as e:
        logger.warning(f"Ignoring plugin entry {name!r}: {e}")
        return None


class GlobalConfig(BaseModel):
    """The ``[config]`` table.

    ``colorscheme``, ``colourscheme`` and ``options`` are kept untyped: a
    value of the wrong type is ignored when applied rather than rejected here.
    """

    model_config = ConfigDict(extra="allow", validate_assignment=True)

    plugins_dir: str = Field(
        default="plugins", description="Package prefix of configuration modules"
    )
    auto_setup: bool = Field(
        default=False, description="Call setup() on plugins without configuration"
    )
    load_opt_plugins: bool = Field(
        default=False, description="Configure lazy (opt) plugins eagerly"
    )
    colorscheme: Any = None
    colourscheme: Any = None
    options: Any = None

    @field_validator("plugins_dir")
    @classmethod
    def strip_trailing_separators(cls, value: str) -> str:
        """Drop trailing ``.``, ``/`` and ``\\`` so the value can be joined
        with ``"."``."""
        return _TRAILING_SEPARATORS.sub("", value)

    def get_colorscheme(self) -> Optional[str]:
        """Return the colorscheme (either spelling) if it is a string."""
        value = self.colorscheme if self.colorscheme is not None else self.colourscheme
        return value if isinstance(value, str) else None

    def get_options(self) -> Dict[str, Any]:
        return dict(self.options) if isinstance(self.options, Mapping) else {}


class ConfigDocument(BaseModel):
    """The merged, validated configuration document."""

    model_config = ConfigDict(extra="allow")

    config: GlobalConfig = Field(default_factory=GlobalConfig)
    plugins: Dict[str, Any] = Field(default_factory=dict)
    rocks: Dict[str, Any] = Field(default_factory=dict)
    bundles: Dict[str, Any] = Field(default_factory=dict)

    def get_plugin(self, name: str) -> Optional[PluginSpec]:
        """Look a plugin up by name; ``plugins`` takes precedence over ``rocks``.

        Entries with a blank name are never returned.
        """
        for table in (self.plugins, self.rocks):
            if name in table:
                return _plugin_spec(name, table[name])
        return None

    def user_plugins(self) -> Dict[str, PluginSpec]:
        """Return every declared plugin keyed by name, in declaration order.

        Entries with a blank name are logged and skipped.
        """
        result: Dict[str, PluginSpec] = {}
        for table in (self.plugins, self.rocks):
            for name, entry in table.items():
                if name in result:
                    continue
                spec = _plugin_spec(name, entry)
                if spec is not None:
                    result[name] = spec
        return result

    def iter_bundles(self) -> Iterator[Tuple[str, Optional[Bundle]]]:
        """Yield ``(name, bundle)`` pairs; ``bundle`` is ``None`` when malformed."""
        for name, entry in self.bundles.items():
            yield name, Bundle.from_entry(name, entry)

    def get_bundle(self, name: str) -> Optional[Bundle]:
        if name not in self.bundles:
            return None
        return Bundle.from_entry(name, self.bundles[name])


def build_document(raw: Optional[Mapping[str, Any]] = None) -> ConfigDocument:
    """Merge ``raw`` over the defaults and validate the result.

    Raises:
        ConfigDocumentError: If the merged document fails validation.
    """
    merged = deep_merge(DEFAULT_CONFIG, raw or {})
    try:
        return ConfigDocument.model_validate(merged)
    except ValidationError as e:
        raise ConfigDocumentError(f"Invalid configuration document: {e}") from e
