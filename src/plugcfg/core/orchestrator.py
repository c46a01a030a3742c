"""Top-level driver for plugin configuration.

A run (`ConfigOrchestrator.setup`) goes:
  read document -> apply options -> load bundles -> configure plugins -> colorscheme -> report

Bundles are loaded first so that a successful bundle marks its members
configured and the per-plugin pass skips them; members of a bundle that failed
or has no module are configured individually by that same pass. Problems are
collected in the shared `ConfigState` and reported with a single warning at
the end of the run. Notifications deferred through the host are delivered
when each public operation returns.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator, Mapping
from contextlib import contextmanager
from typing import Any, List, Optional, Tuple, Union

from .health import HealthReport, build_health_report
from .host import Host, LoggingHost
from .state import ConfigState
from ..base.loggable import Loggable
from ..config.document import ConfigDocument, GlobalConfig, build_document
from ..config.settings import Settings
from ..config.source import ConfigSource, TomlConfigSource
from ..errors import ColorschemeNotFoundError
from ..plugins.base import PluginSpec
from ..plugins.loader import ImportlibResolver, ModuleResolver
from ..plugins.manager import BundleLoader, PluginConfigurator
from ..plugins.validator import BundleValidator

PluginRef = Union[str, PluginSpec]

ISSUES_FOUND_MESSAGE: str = (
    "Issues found while loading plugin configs. "
    "Check the plugcfg diagnostics report for more info."
)


class ConfigOrchestrator(Loggable):
    """Coordinate bundle and plugin configuration for one process.

    Attributes:
      - source: Callable returning the raw configuration document.
      - resolver: Finds and loads configuration and plugin modules.
      - host: Receives notifications, options and the colorscheme.
      - state: Configured plugins and the error log; keep one instance for
        the lifetime of the process.
    """

    def __init__(
        self,
        source: ConfigSource,
        resolver: ModuleResolver,
        host: Optional[Host] = None,
        state: Optional[ConfigState] = None,
    ) -> None:
        super().__init__()
        self.source = source
        self.resolver = resolver
        self.host = host or LoggingHost()
        self.state = state or ConfigState()
        self.validator = BundleValidator()

        self.configurator = PluginConfigurator(resolver, self.state)
        self.bundle_loader = BundleLoader(resolver, self.state, self.host, self.validator)

    @classmethod
    def from_settings(
        cls, settings: Settings, host: Optional[Host] = None
    ) -> "ConfigOrchestrator":
        """Build an orchestrator reading ``settings.config_file`` and
        importing modules with ``importlib``."""
        return cls(
            source=TomlConfigSource(settings.config_file),
            resolver=ImportlibResolver(settings.search_paths),
            host=host,
        )

    def get_config(self) -> ConfigDocument:
        """Read the document and merge it over the defaults.

        Raises:
            ConfigDocumentError: If the document cannot be read or validated.
        """
        return build_document(self.source())

    @contextmanager
    def _operation(self) -> Iterator[None]:
        """Deliver deferred notifications when a public operation ends."""
        try:
            yield
        finally:
            self.host.flush()

    def setup(self, all_plugins: Optional[Any] = None) -> None:
        """Run a full configuration pass.

        Args:
            all_plugins: Plugins to configure. Accepts a mapping of name to
                `PluginSpec` (or raw document entry), or an iterable of specs
                or names. Defaults to every plugin declared in the document.
        """
        with self._operation():
            self._setup(all_plugins)

    def _setup(self, all_plugins: Optional[Any]) -> None:
        document = self.get_config()
        config = document.config

        for key, value in config.get_options().items():
            self.host.set_option(key, value)

        for bundle_name, bundle in document.iter_bundles():
            if bundle is None:
                self.logger.debug(f"Skipping malformed bundle {bundle_name}")
                continue

            unknown_item = self.validator.find_unknown_item(bundle, document.get_plugin)
            if unknown_item is not None:
                self.host.notify(
                    self.validator.unknown_item_message(bundle_name, unknown_item),
                    logging.ERROR,
                )
                continue

            if not config.load_opt_plugins and self.validator.has_opt_item(
                bundle, document.get_plugin
            ):
                self.logger.debug(f"Skipping bundle {bundle_name} with lazy members")
                continue

            self.bundle_loader.load_bundle(config, bundle_name, bundle)

        for plugin in self._collect_plugins(all_plugins, document):
            if not plugin.opt or config.load_opt_plugins:
                self.configurator.configure(plugin, config)

        colorscheme = config.get_colorscheme()
        if colorscheme is not None:
            try:
                self.host.apply_colorscheme(colorscheme)
            except ColorschemeNotFoundError as e:
                self.logger.debug(f"Ignoring colorscheme: {e}")

        if self.errors_found():
            self.host.notify(ISSUES_FOUND_MESSAGE, logging.WARNING)

    def configure(
        self,
        plugin: PluginRef,
        config: Optional[Union[ConfigDocument, GlobalConfig]] = None,
    ) -> None:
        """Configure a single plugin, e.g. when a lazy plugin gets loaded.

        Args:
            plugin: A `PluginSpec`, or a plugin name looked up in the document.
            config: Settings to use instead of reading the document.
        """
        with self._operation():
            self._configure(plugin, config)

    def _configure(
        self, plugin: PluginRef, config: Optional[Union[ConfigDocument, GlobalConfig]]
    ) -> None:
        document: Optional[ConfigDocument] = None
        if isinstance(plugin, str):
            if self.state.is_configured(plugin):
                return
            document = self.get_config()
            spec = document.get_plugin(plugin)
            if spec is None:
                self.host.notify(
                    f"Plugin {plugin} not found in the configuration document",
                    logging.ERROR,
                )
                return
            plugin = spec

        if config is None:
            config = (document or self.get_config()).config
        elif isinstance(config, ConfigDocument):
            config = config.config

        self.configurator.configure(plugin, config)

    def load_bundle(self, bundle_name: str) -> bool:
        """Load one bundle by name.

        Members are not configured individually when this fails; call
        `configure` for them if needed.

        Returns:
            True if the bundle module loaded.
        """
        with self._operation():
            return self._load_bundle(bundle_name)

    def _load_bundle(self, bundle_name: str) -> bool:
        document = self.get_config()
        bundle = document.get_bundle(bundle_name)
        if bundle is None:
            self._notify_later(f"Bundle '{bundle_name}' not found.", logging.ERROR)
            return False

        unknown_item = self.validator.find_unknown_item(bundle, document.get_plugin)
        if unknown_item is not None:
            self._notify_later(
                self.validator.unknown_item_message(bundle_name, unknown_item),
                logging.ERROR,
            )
            return False

        return self.bundle_loader.load_bundle(document.config, bundle_name, bundle)

    def get_bundle(self, plugin: PluginRef) -> Tuple[Optional[str], Optional[List[str]]]:
        """Return ``(bundle_name, items)`` of the first bundle containing
        ``plugin``, or ``(None, None)``."""
        name = plugin if isinstance(plugin, str) else plugin.name
        for bundle_name, bundle in self.get_config().iter_bundles():
            if bundle is not None and name in bundle.items:
                return bundle_name, list(bundle.items)
        return None, None

    def errors_found(self) -> bool:
        return self.state.errors.has_errors()

    def health_report(self) -> HealthReport:
        return build_health_report(self.state)

    def _collect_plugins(
        self, all_plugins: Optional[Any], document: ConfigDocument
    ) -> List[PluginSpec]:
        if all_plugins is None:
            return list(document.user_plugins().values())

        if isinstance(all_plugins, Mapping):
            entries = list(all_plugins.items())
        elif isinstance(all_plugins, Iterable) and not isinstance(all_plugins, str):
            entries = [(None, item) for item in all_plugins]
        else:
            raise TypeError(f"Unsupported plugin collection: {type(all_plugins).__name__}")

        plugins = []
        for name, value in entries:
            if isinstance(value, PluginSpec):
                plugins.append(value)
                continue
            try:
                if name is None:
                    plugins.append(document.get_plugin(value) or PluginSpec(name=value))
                else:
                    plugins.append(PluginSpec.from_entry(name, value))
            except ValueError as e:
                self.logger.warning(f"Skipping plugin {name or value!r}: {e}")
        return plugins

    def _notify_later(self, message: str, level: int) -> None:
        self.host.schedule(lambda: self.host.notify(message, level))
