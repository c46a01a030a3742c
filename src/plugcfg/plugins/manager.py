"""Configuration loading for plugins and bundles.

This module holds the two loaders driven by the orchestrator:

- `PluginConfigurator`: configures a single plugin. It tries each heuristic
  candidate under ``plugins_dir`` in order, loads the first one that exists,
  records any later matches as duplicates, and falls back to an explicit
  module path or to calling the plugin's own ``setup()``.
- `BundleLoader`: loads one shared module for a group of plugins and marks
  all of them configured when it succeeds.

Failures never propagate out of a single plugin or bundle: they are recorded
in the shared `ErrorLog` and the run continues. `InvariantViolation` is the
exception, since it signals a bug rather than a user mistake.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List

from .base import Bundle, ConfigKind, PluginSpec
from .heuristics import generate_candidates
from .loader import LoadResult, LoadStatus, ModuleResolver, format_error
from .validator import BundleValidator
from ..base.loggable import Loggable
from ..core.state import AUTO_SETUP_MARKER, ConfigState
from ..errors import InvariantViolation

if TYPE_CHECKING:
    from ..config.document import GlobalConfig
    from ..core.host import Host


def qualify(prefix: str, name: str) -> str:
    """Join a package prefix and a module basename with ``"."``."""
    return f"{prefix}.{name}" if prefix else name


def checked_load(resolver: ModuleResolver, name: str) -> LoadResult:
    """Load through ``resolver`` and enforce its return contract.

    Raises:
        InvariantViolation: If the resolver returns anything but a `LoadResult`.
    """
    result = resolver.load(name)
    if not isinstance(result, LoadResult) or not isinstance(result.status, LoadStatus):
        raise InvariantViolation(
            f"{type(resolver).__name__}.load({name!r}) returned {result!r}"
        )
    return result


class PluginConfigurator(Loggable):
    """Configure individual plugins from convention-named modules."""

    def __init__(self, resolver: ModuleResolver, state: ConfigState):
        super().__init__()
        self.resolver = resolver
        self.state = state

    def configure(self, plugin: PluginSpec, config: GlobalConfig) -> None:
        """Configure ``plugin`` unless it already has been.

        Args:
            plugin: The plugin to configure.
            config: Global settings (``plugins_dir``, ``auto_setup``).
        """
        name = plugin.name
        if self.state.is_configured(name):
            return
        self.state.mark_configured([name])

        heuristics = generate_candidates(name)
        found_custom_configuration = False

        for heuristic in heuristics:
            mod_name = qualify(config.plugins_dir, heuristic)
            try:
                if found_custom_configuration:
                    if self.resolver.probe(mod_name):
                        self.state.errors.add_duplicate(name, heuristic)
                else:
                    found_custom_configuration = self._load_config(
                        name, heuristic, mod_name
                    )
            except InvariantViolation:
                raise
            except Exception as e:
                self.logger.error(f"Error resolving {mod_name} for {name}: {e}")
                self.state.errors.add_failure(name, heuristic, format_error(e))
                found_custom_configuration = True

        if found_custom_configuration:
            return

        plugin_config = plugin.config
        if plugin_config.kind is ConfigKind.MODULE:
            self._load_explicit_config(plugin, plugin_config.value)
        elif plugin_config.is_true or (config.auto_setup and not plugin_config.is_false):
            self.auto_setup(heuristics, config, plugin)

    def _load_config(self, plugin_name: str, heuristic: str, mod_name: str) -> bool:
        """Load one candidate.

        Returns:
            True if the module exists, even when loading it failed.
        """
        result = checked_load(self.resolver, mod_name)
        if result.status is LoadStatus.FAILED:
            self.logger.warning(f"Configuration {mod_name} for {plugin_name} failed")
            self.state.errors.add_failure(plugin_name, heuristic, result.error or "")
            return True
        if result.ok:
            self.logger.info(f"Loaded configuration {mod_name} for {plugin_name}")
        return result.found

    def _load_explicit_config(self, plugin: PluginSpec, mod_name: str) -> None:
        """Load the module named by a string ``config``; a missing module is a failure."""
        try:
            result = checked_load(self.resolver, mod_name)
        except InvariantViolation:
            raise
        except Exception as e:
            self.state.errors.add_failure(plugin.name, mod_name, format_error(e))
            return

        if result.status is LoadStatus.NOT_FOUND:
            self.state.errors.add_failure(
                plugin.name, mod_name, f"module '{mod_name}' not found"
            )
        elif result.status is LoadStatus.FAILED:
            self.state.errors.add_failure(plugin.name, mod_name, result.error or "")
        else:
            self.logger.info(f"Loaded configuration {mod_name} for {plugin.name}")

    def auto_setup(
        self, heuristics: List[str], config: GlobalConfig, plugin: PluginSpec
    ) -> None:
        """Call ``setup()`` on the plugin's own module(s).

        Each heuristic is tried as a top-level module name. Modules that are
        missing, fail to import or have no callable ``setup`` are skipped.
        The first error raised by a ``setup`` call stops the scan and is
        recorded under `AUTO_SETUP_MARKER`.
        """
        plugin_config = plugin.config
        try:
            for candidate in heuristics:
                result = checked_load(self.resolver, candidate)
                if not result.ok:
                    continue
                setup = getattr(result.value, "setup", None)
                if not callable(setup):
                    continue

                if plugin_config.kind is ConfigKind.TABLE:
                    self.logger.info(f"Calling {candidate}.setup() with inline config")
                    setup(dict(plugin_config.value))
                elif (config.auto_setup or plugin_config.is_true) and not plugin_config.is_false:
                    self.logger.info(f"Calling {candidate}.setup()")
                    setup()
        except InvariantViolation:
            raise
        except Exception as e:
            self.logger.error(f"Auto-setup of {plugin.name} failed: {e}")
            self.state.errors.add_failure(plugin.name, AUTO_SETUP_MARKER, format_error(e))


class BundleLoader(Loggable):
    """Load a bundle's shared configuration module.

    On success every member is marked configured: the bundle module is
    trusted to configure them. On failure or when the module is missing
    nothing is marked, so the members stay eligible for individual
    configuration.
    """

    def __init__(
        self,
        resolver: ModuleResolver,
        state: ConfigState,
        host: Host,
        validator: BundleValidator | None = None,
    ):
        super().__init__()
        self.resolver = resolver
        self.state = state
        self.host = host
        self.validator = validator or BundleValidator()

    def load_bundle(self, config: GlobalConfig, bundle_name: str, bundle: Bundle) -> bool:
        """Load ``bundle``. Members must already be validated.

        Returns:
            True if the bundle module loaded and its members are configured.
        """
        mod_name = bundle.config
        config_error = self.validator.validate_config(bundle)
        if config_error:
            self._notify_later(config_error, logging.ERROR)
            mod_name = None
        if mod_name is None:
            mod_name = qualify(config.plugins_dir, bundle_name)

        try:
            result = checked_load(self.resolver, mod_name)
        except InvariantViolation:
            raise
        except Exception as e:
            result = LoadResult.failed(format_error(e))

        if result.ok:
            self.logger.info(f"Loaded bundle {bundle_name} from {mod_name}")
            self.state.mark_configured(bundle.items)
            return True

        if result.status is LoadStatus.FAILED:
            self.host.notify(
                f"Bundle '{bundle_name}' failed to load (see the diagnostics report for details).\n"
                "Falling back to loading plugins from the bundle individually...",
                logging.WARNING,
            )
            self.state.errors.add_failure(bundle_name, repr(bundle.items), result.error or "")
        else:
            self.host.notify(
                f"Bundle '{bundle_name}' has no specified configuration file.\n"
                "Falling back to loading plugins from the bundle individually...",
                logging.WARNING,
            )
        return False

    def _notify_later(self, message: str, level: int) -> None:
        self.host.schedule(lambda: self.host.notify(message, level))
