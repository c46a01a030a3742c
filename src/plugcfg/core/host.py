"""Host capabilities consumed by the orchestrator.

The loader does not talk to a user interface directly. It asks a `Host` to
notify the user, to defer work until the current pass completes, and to apply
global options and the colorscheme.
"""

import logging
from abc import ABC, abstractmethod
from collections import deque
from typing import Any, Callable, Deque, Dict, Iterable, List, Optional, Set, Tuple

from ..base.loggable import Loggable
from ..errors import ColorschemeNotFoundError

NOTIFY_PREFIX: str = "[plugcfg]"


class Host(ABC):
    """Capabilities provided by the embedding application."""

    @abstractmethod
    def notify(self, message: str, level: int = logging.INFO) -> None:
        """Show ``message`` to the user with a ``logging`` severity."""
        pass

    @abstractmethod
    def schedule(self, callback: Callable[[], None]) -> None:
        """Run ``callback`` after the current pass. Nobody waits on it."""
        pass

    def flush(self) -> None:
        """Run callbacks scheduled during the operation that just finished.

        Called by the orchestrator at the end of every public operation.
        Hosts that hand callbacks to their own event loop can leave this
        as is.
        """
        pass

    @abstractmethod
    def set_option(self, name: str, value: Any) -> None:
        """Apply one global option."""
        pass

    @abstractmethod
    def apply_colorscheme(self, name: str) -> None:
        """Apply a colorscheme.

        Raises:
            ColorschemeNotFoundError: If the colorscheme does not exist.
        """
        pass


class LoggingHost(Host, Loggable):
    """Host that reports notifications through ``logging``.

    Notifications are also kept in `notifications` so callers (and the HTTP
    diagnostics surface) can inspect them. Scheduled callbacks queue up until
    `flush` is called. Options and the colorscheme are stored in
    memory.

    Args:
        colorschemes: Known colorscheme names. ``None`` accepts any name.
    """

    def __init__(self, colorschemes: Optional[Iterable[str]] = None):
        super().__init__()
        self.notifications: List[Tuple[int, str]] = []
        self.options: Dict[str, Any] = {}
        self.colorscheme: Optional[str] = None
        self.colorschemes: Optional[Set[str]] = (
            set(colorschemes) if colorschemes is not None else None
        )
        self._pending: Deque[Callable[[], None]] = deque()

    def notify(self, message: str, level: int = logging.INFO) -> None:
        message = message.strip()
        self.notifications.append((level, message))
        self.logger.log(level, f"{NOTIFY_PREFIX} {message}")

    def schedule(self, callback: Callable[[], None]) -> None:
        self._pending.append(callback)

    def flush(self) -> None:
        """Run queued callbacks, including ones they schedule."""
        while self._pending:
            callback = self._pending.popleft()
            callback()

    @property
    def pending(self) -> int:
        return len(self._pending)

    def set_option(self, name: str, value: Any) -> None:
        self.logger.debug(f"Setting option {name}={value!r}")
        self.options[name] = value

    def apply_colorscheme(self, name: str) -> None:
        if self.colorschemes is not None and name not in self.colorschemes:
            raise ColorschemeNotFoundError(f"Colorscheme not found: {name}")
        self.logger.info(f"Applied colorscheme: {name}")
        self.colorscheme = name

    def messages(self, level: Optional[int] = None) -> List[str]:
        """Return notification texts, optionally filtered by level."""
        return [text for lvl, text in self.notifications if level is None or lvl == level]
