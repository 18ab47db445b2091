# framing_errors.py
"""
Exception types for the frame reader and its tooling.
"""
from __future__ import annotations


class FramingError(RuntimeError):
    """Base class for framing related errors."""


class InvalidFrameSize(FramingError, ValueError):
    """Raised when a length prefix declares a frame below the minimum size.

    The stream can no longer be trusted once this is raised; callers should
    close the connection.
    """

    def __init__(self, size: int, minimum: int) -> None:
        super().__init__(f"invalid frame size {size} (minimum {minimum})")
        self.size = size
        self.minimum = minimum


class ConfigurationError(FramingError):
    """Raised when a reader profile or byte order setting is invalid."""


class FrameTooLarge(FramingError, ValueError):
    """Raised when a length prefix declares a frame above the configured maximum."""

    def __init__(self, size: int, maximum: int) -> None:
        super().__init__(f"frame size {size} exceeds maximum {maximum}")
        self.size = size
        self.maximum = maximum


class StreamDesynchronized(FramingError):
    """Raised when a read gave up part-way through a frame.

    The bytes already taken off the stream are lost, so the next prefix would
    be read from the middle of a frame.
    """

    def __init__(self, consumed: int) -> None:
        super().__init__(f"stream desynchronized: {consumed} bytes of a frame discarded")
        self.consumed = consumed
