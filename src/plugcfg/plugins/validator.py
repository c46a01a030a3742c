"""Bundle validation.

Checks run before a bundle is loaded: every member must be a declared plugin,
and the bundle's ``config`` must be absent or a module path string. Problems
are reported as messages; callers decide whether to skip the bundle or carry
on without the invalid field.
"""

from typing import Callable, Optional

from .base import Bundle, PluginSpec
from ..base.loggable import Loggable

PluginLookup = Callable[[str], Optional[PluginSpec]]


class BundleValidator(Loggable):
    """Validate bundle membership and fields against the declared plugins."""

    def find_unknown_item(self, bundle: Bundle, get_plugin: PluginLookup) -> Optional[str]:
        """Return the first member that is not a declared plugin, if any."""
        for item in bundle.items:
            if get_plugin(item) is None:
                self.logger.debug(f"Bundle {bundle.name} references unknown plugin {item}")
                return item
        return None

    @staticmethod
    def unknown_item_message(bundle_name: str, item: str) -> str:
        return (
            f"Bundle '{bundle_name}' has invalid plugin '{item}'.\n"
            "Did you make a typo, or is the plugin not installed?"
        )

    def validate_config(self, bundle: Bundle) -> Optional[str]:
        """Return an error message if ``bundle.config`` is set but not a string."""
        if bundle.config is None or isinstance(bundle.config, str):
            return None
        return (
            f"Bundle '{bundle.name}' has invalid `config` variable. Expected string "
            f"pointing to a valid path, got {type(bundle.config).__name__} instead..."
        )

    @staticmethod
    def has_opt_item(bundle: Bundle, get_plugin: PluginLookup) -> bool:
        """Return True if any member is a lazy (opt) plugin.

        Members must already be known to exist.
        """
        return any(get_plugin(item).opt for item in bundle.items)
