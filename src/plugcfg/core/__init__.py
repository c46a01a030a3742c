"""Shared run state, host capabilities and diagnostics.

Exposes:
- `ConfigState`, `ErrorLog`: configured plugins and recorded problems
- `Host`, `LoggingHost`: notification, scheduling and option capabilities
- `HealthReport`, `build_health_report()`: diagnostics for a run

The orchestrator lives in `plugcfg.core.orchestrator` and is imported from
there (or from the top-level package) to keep this package free of plugin
loader imports.
"""

from .health import HealthReport, build_health_report, format_health_report
from .host import Host, LoggingHost
from .state import ConfigState, ErrorLog

__all__ = [
    "ConfigState",
    "ErrorLog",
    "Host",
    "LoggingHost",
    "HealthReport",
    "build_health_report",
    "format_health_report",
]
