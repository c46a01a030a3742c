"""Logging mixin used across plugcfg classes."""

import logging


class Loggable:
    """Give subclasses a `logger` named after their module and class."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(
            f"{self.__class__.__module__}.{self.__class__.__name__}"
        )
