"""Module resolution for configuration and plugin modules.

This module provides the resolver seam used by the configuration loader:

- `ModuleResolver`: answers "does a loadable unit exist for this name" and
  "load it" without raising when the unit is missing. Load results are
  cached so every unit executes at most once per resolver.
- `ImportlibResolver`: resolves dotted names through Python's import system.
- `InMemoryResolver`: resolves names from a mapping of loader callables,
  used by tests and by embedders that keep configuration in code.

Three outcomes are distinguished: not found (silent), found but failed
(carries the error message), and loaded (carries the produced value, which
is `NO_VALUE` when the unit produced nothing).
"""

import importlib
import importlib.util
import sys
import traceback
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from ..base.loggable import Loggable


class _NoValue:
    """Type of the `NO_VALUE` sentinel."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "NO_VALUE"

    def __bool__(self) -> bool:
        return False


NO_VALUE = _NoValue()


class LoadStatus(str, Enum):
    NOT_FOUND = "not_found"
    FAILED = "failed"
    LOADED = "loaded"


@dataclass(frozen=True)
class LoadResult:
    """Outcome of `ModuleResolver.load`.

    Args:
        status: Which of the three outcomes occurred.
        value: The unit's value when ``LOADED`` (possibly `NO_VALUE`).
        error: The error message when ``FAILED``.
    """

    status: LoadStatus
    value: Any = None
    error: Optional[str] = None

    @property
    def found(self) -> bool:
        """True when the unit exists, whether or not it loaded cleanly."""
        return self.status is not LoadStatus.NOT_FOUND

    @property
    def ok(self) -> bool:
        return self.status is LoadStatus.LOADED

    @classmethod
    def not_found(cls) -> "LoadResult":
        return cls(LoadStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: str) -> "LoadResult":
        return cls(LoadStatus.FAILED, error=error)

    @classmethod
    def loaded(cls, value: Any) -> "LoadResult":
        return cls(LoadStatus.LOADED, value=NO_VALUE if value is None else value)


def format_error(error: BaseException) -> str:
    """Render an exception as a one-line message for the error log."""
    return "".join(traceback.format_exception_only(type(error), error)).strip()


class ModuleResolver(Loggable, ABC):
    """Probe for and load named units with per-name caching.

    Subclasses implement `_find` and `_execute`; this class provides the
    caching and the never-raise-on-missing contract.
    """

    def __init__(self):
        super().__init__()
        self._probes: Dict[str, bool] = {}
        self._results: Dict[str, LoadResult] = {}

    def probe(self, name: str) -> bool:
        """Return True if a unit named ``name`` can be loaded.

        Probing never executes the unit. The answer is cached.
        """
        if name in self._results:
            return self._results[name].found
        if name not in self._probes:
            self._probes[name] = bool(self._find(name))
        return self._probes[name]

    def load(self, name: str) -> LoadResult:
        """Load ``name`` once and return the (cached) outcome.

        Missing units return a not-found result; exceptions raised while
        executing the unit are captured in a failed result.
        """
        cached = self._results.get(name)
        if cached is not None:
            return cached

        if not self.probe(name):
            return LoadResult.not_found()

        try:
            value = self._execute(name)
        except Exception as e:
            self.logger.debug(f"Loading {name} failed: {e}")
            result = LoadResult.failed(format_error(e))
        else:
            self.logger.debug(f"Loaded {name}")
            result = LoadResult.loaded(value)

        self._results[name] = result
        return result

    def is_loaded(self, name: str) -> bool:
        return name in self._results

    def clear_cache(self) -> None:
        """Forget probe and load results."""
        self._probes.clear()
        self._results.clear()

    @abstractmethod
    def _find(self, name: str) -> bool:
        """Return True if ``name`` resolves to a unit. Must not execute it."""
        pass

    @abstractmethod
    def _execute(self, name: str) -> Any:
        """Execute the unit and return its value. May raise."""
        pass


class ImportlibResolver(ModuleResolver):
    """Resolve dotted module names with ``importlib``.

    Modules already present in ``sys.modules`` count as found; loading them
    returns the existing module without re-executing it.
    """

    def __init__(self, search_paths: Optional[Iterable[Path]] = None):
        super().__init__()
        self.search_paths = [Path(p) for p in (search_paths or [])]
        self.setup_search_paths()

    def setup_search_paths(self) -> None:
        """Prepend the configured search paths to ``sys.path`` if missing."""
        for path in reversed(self.search_paths):
            if str(path) not in sys.path:
                sys.path.insert(0, str(path))
        importlib.invalidate_caches()

    def _find(self, name: str) -> bool:
        if not name or not all(name.split(".")):
            return False
        if name in sys.modules:
            return True
        try:
            return importlib.util.find_spec(name) is not None
        except (ImportError, ValueError):
            # Missing parent package
            return False

    def _execute(self, name: str) -> Any:
        return importlib.import_module(name)


class InMemoryResolver(ModuleResolver):
    """Resolve names from a mapping of zero-argument loader callables.

    A loader returning ``None`` produces `NO_VALUE`; a loader that raises
    produces a failed result.
    """

    def __init__(self, units: Optional[Mapping[str, Callable[[], Any]]] = None):
        super().__init__()
        self._units: Dict[str, Callable[[], Any]] = dict(units or {})

    def register(self, name: str, loader: Callable[[], Any]) -> None:
        self._units[name] = loader
        self._probes.pop(name, None)

    def _find(self, name: str) -> bool:
        return name in self._units

    def _execute(self, name: str) -> Any:
        return self._units[name]()
