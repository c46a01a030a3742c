"""Shared test doubles."""

from typing import Any, Dict, List


class CallRecorder:
    """Build in-memory loader callables that record when they run."""

    def __init__(self):
        self.calls: List[str] = []

    def unit(self, name: str, value: Any = None):
        def loader():
            self.calls.append(name)
            return value

        return loader

    def failing(self, name: str, message: str = "boom"):
        def loader():
            self.calls.append(name)
            raise RuntimeError(message)

        return loader

    def count(self, name: str) -> int:
        return self.calls.count(name)


class FakePluginModule:
    """Stands in for a plugin's own module exposing ``setup()``."""

    def __init__(self, error: Exception | None = None):
        self.setup_calls: List[tuple] = []
        self.error = error

    def setup(self, *args: Dict[str, Any]) -> None:
        self.setup_calls.append(args)
        if self.error is not None:
            raise self.error
