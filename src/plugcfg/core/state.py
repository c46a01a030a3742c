"""Shared state for configuration runs.

`ConfigState` holds the set of plugins already configured and the error log
consumed at the end of a run. One long-lived state gives "configure at most
once per process" semantics; tests build a fresh one each time.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, NamedTuple, Set

logger = logging.getLogger(__name__)

AUTO_SETUP_MARKER: str = "auto_setup"


class DuplicateConfig(NamedTuple):
    """A configuration module that resolved after another one already had."""

    plugin: str
    candidate: str


class LoadFailure(NamedTuple):
    """A configuration unit that was found but raised while loading.

    For bundles ``plugin`` is the bundle name and ``candidate`` the rendered
    item list; for auto-setup ``candidate`` is `AUTO_SETUP_MARKER`.
    """

    plugin: str
    candidate: str
    message: str


@dataclass
class ErrorLog:
    """Append-only record of duplicates and failures."""

    duplicate_configs_found: List[DuplicateConfig] = field(default_factory=list)
    failed_to_load: List[LoadFailure] = field(default_factory=list)

    def add_duplicate(self, plugin: str, candidate: str) -> None:
        logger.debug(f"Duplicate config for {plugin}: {candidate}")
        self.duplicate_configs_found.append(DuplicateConfig(plugin, candidate))

    def add_failure(self, plugin: str, candidate: str, message: str) -> None:
        logger.debug(f"Failed to load {candidate} for {plugin}: {message}")
        self.failed_to_load.append(LoadFailure(plugin, candidate, message))

    def has_errors(self) -> bool:
        return bool(self.duplicate_configs_found or self.failed_to_load)


@dataclass
class ConfigState:
    """Configured plugins plus the error log."""

    configured: Set[str] = field(default_factory=set)
    errors: ErrorLog = field(default_factory=ErrorLog)

    def is_configured(self, name: str) -> bool:
        return name in self.configured

    def mark_configured(self, names: Iterable[str]) -> None:
        self.configured.update(names)
