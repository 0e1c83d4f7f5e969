"""mdlive error hierarchy.

All mdlive-specific errors inherit from MdliveError for easy catching.
Every error except NotReadyError is fatal at startup; mid-run failures are
absorbed by the pipeline and never raised to viewers.
"""


class MdliveError(Exception):
    """Base error for all mdlive operations."""


class ConfigError(MdliveError):
    """Invalid or malformed configuration."""


class SourceError(MdliveError):
    """The source document could not be read at startup."""


class WatchError(MdliveError):
    """No file watch backend could be established."""


class ServeError(MdliveError):
    """The preview server could not bind or listen."""


class NotReadyError(MdliveError):
    """No revision was published before the snapshot timeout expired."""
