"""
Exceptions raised by the SBOM comparator.

Configuration problems are reported before any comparison runs. Load,
render and write failures name the operation that failed and chain the
underlying cause.
"""


class SBomComparatorError(Exception):
    """Base class for every error the comparator raises on purpose."""


class ConfigurationError(SBomComparatorError):
    """Unsupported option value, missing input, or unreadable config file."""


class BomLoadError(SBomComparatorError):
    """An inventory document could not be read into memory."""


class RenderError(SBomComparatorError):
    """A renderer could not encode (or decode) a classification result."""


class OutputWriteError(SBomComparatorError):
    """An output artifact could not be written."""
