"""plugcfg package public API and version.

Exposes convenient imports for external consumers:
- `Settings`: application configuration
- `ConfigOrchestrator`: runs bundle and plugin configuration
- `ConfigState`: configured plugins and the error log
- `ImportlibResolver`, `InMemoryResolver`: module resolvers
- `generate_candidates`: configuration module name heuristics
"""

__version__ = "1.0.0"

from .config.settings import Settings
from .core.orchestrator import ConfigOrchestrator
from .core.state import ConfigState
from .plugins.heuristics import generate_candidates
from .plugins.loader import ImportlibResolver, InMemoryResolver

__all__ = [
    "Settings",
    "ConfigOrchestrator",
    "ConfigState",
    "ImportlibResolver",
    "InMemoryResolver",
    "generate_candidates",
]
