"""Error types raised by plugcfg.

Most loading problems never surface as exceptions: missing modules are a
normal outcome and failing modules are recorded in the error log. The types
below cover the few cases that do propagate.
"""


class PlugcfgError(Exception):
    """Base type for plugcfg failures."""


class InvariantViolation(PlugcfgError):
    """Raised when an internal contract is broken (e.g. a resolver returned
    something other than a ``LoadResult``)."""


class ConfigDocumentError(PlugcfgError):
    """Raised when the configuration document cannot be read or parsed."""


class ColorschemeNotFoundError(PlugcfgError):
    """Raised by a host when asked to apply an unknown colorscheme."""
