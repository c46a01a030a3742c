"""Configuration document sources.

A source is any zero-argument callable returning the raw document mapping.
The orchestrator calls it on every public operation so edits to the file are
picked up without restarting.
"""

import logging
import tomllib
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional

from ..errors import ConfigDocumentError

logger = logging.getLogger(__name__)

ConfigSource = Callable[[], Mapping[str, Any]]


class TomlConfigSource:
    """Read the document from a TOML file.

    A missing file is not an error: it yields an empty document so the
    defaults apply.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    def __call__(self) -> Dict[str, Any]:
        if not self.path.exists():
            logger.info(f"Configuration file not found: {self.path}")
            return {}
        try:
            with open(self.path, "rb") as f:
                return tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            raise ConfigDocumentError(f"Cannot read {self.path}: {e}") from e


class StaticConfigSource:
    """Serve a fixed in-memory document."""

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self.data = dict(data or {})

    def __call__(self) -> Dict[str, Any]:
        return self.data
