"""Candidate configuration-module names for a plugin.

Plugin names rarely match a valid module basename (``telescope.nvim``,
``nvim-cmp``, ``neorg-lua``), so several guesses are derived from each name
and tried in order, most specific first.
"""

import re
from typing import Iterable, List

_EDITOR_SUFFIX = re.compile(r"-n?vim$")
_LUA_SUFFIX = re.compile(r"-lua$")
_EDITOR_PREFIX = re.compile(r"^n?vim-")


def dedup(names: Iterable[str]) -> List[str]:
    """Drop repeated entries, keeping the first occurrence of each."""
    return list(dict.fromkeys(names))


def generate_candidates(name: str) -> List[str]:
    """Return candidate module basenames for ``name``, in priority order.

    Example:
        >>> generate_candidates("telescope.nvim")
        ['telescope-nvim', 'telescope', 'telescope-nvim-nvim']
    """
    normalized = name.replace(".", "-")

    return dedup(
        [
            normalized,
            _EDITOR_PREFIX.sub("", _EDITOR_SUFFIX.sub("", normalized)),
            _EDITOR_PREFIX.sub("", _LUA_SUFFIX.sub("", normalized)),
            name.replace(".", "-"),
            normalized + "-nvim",
        ]
    )
