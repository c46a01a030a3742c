"""Plugin configuration loading.

Exposes:
- `PluginSpec`, `PluginConfig`, `ConfigKind`, `Bundle`: declared plugins and bundles
- `generate_candidates()`: configuration module name heuristics
- `ModuleResolver`, `ImportlibResolver`, `InMemoryResolver`, `LoadResult`: module lookup
- `PluginConfigurator`, `BundleLoader`: per-plugin and per-bundle loading
- `BundleValidator`: bundle membership and field checks
"""

from .base import Bundle, ConfigKind, PluginConfig, PluginSpec
from .heuristics import generate_candidates
from .loader import (
    NO_VALUE,
    ImportlibResolver,
    InMemoryResolver,
    LoadResult,
    LoadStatus,
    ModuleResolver,
)
from .manager import BundleLoader, PluginConfigurator
from .validator import BundleValidator

__all__ = [
    "Bundle",
    "ConfigKind",
    "PluginConfig",
    "PluginSpec",
    "generate_candidates",
    "NO_VALUE",
    "ImportlibResolver",
    "InMemoryResolver",
    "LoadResult",
    "LoadStatus",
    "ModuleResolver",
    "PluginConfigurator",
    "BundleLoader",
    "BundleValidator",
]
