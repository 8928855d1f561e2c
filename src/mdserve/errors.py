"""Exception types raised by mdserve."""


class MdserveError(Exception):
    """Base exception for mdserve errors."""

    pass


class PathNotFound(MdserveError):
    """Raised when neither the target path nor its parent directory exists."""

    pass


class ScanError(MdserveError):
    """Raised when walking a directory for markdown files fails."""

    pass


class RenderError(MdserveError):
    """Raised when markdown conversion or page templating fails."""

    pass


class BindError(MdserveError):
    """Raised when no TCP port can be bound."""

    pass


class RequestFault(MdserveError):
    """Wraps any other unexpected failure while handling a request."""

    pass
