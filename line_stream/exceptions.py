"""Custom exceptions for line_stream package."""

from typing import Any


class LineStreamError(Exception):
    """Base exception for line stream errors."""
    pass


class ConfigurationError(LineStreamError):
    """Raised when a stream option has an invalid value or is not recognized."""
    pass


class StreamClosedError(LineStreamError):
    """Raised when data is written to a stream that has ended or closed."""
    pass


class UpstreamError(LineStreamError):
    """Raised (or emitted) when the wrapped source reports a failure.

    The object the source reported is kept untouched in ``original``.
    """

    def __init__(self, message: str, original: Any = None) -> None:
        super().__init__(message)
        self.original = original
        if isinstance(original, BaseException):
            self.__cause__ = original


class ChannelReadError(UpstreamError):
    """Raised when reading from an SSH channel fails or times out."""
    pass
