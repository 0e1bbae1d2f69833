"""Exceptions raised by the stream engine."""


class StreamError(Exception):
    """Base class for all stream engine errors."""


class AllocationError(StreamError, MemoryError):
    """Buffer growth could not be satisfied."""


class InvalidShapeError(StreamError, ValueError):
    """Requested extent or dimensionality is not valid for the operation."""


class BoundsError(StreamError, IndexError):
    """Index, position or region lies outside the stream extents."""


class BufferBindError(StreamError, ValueError):
    """External buffer cannot back the stream as given."""


class StreamClosedError(StreamError, RuntimeError):
    """Stream was used after close()."""


class ConfigError(StreamError, ValueError):
    """Configuration source is malformed."""


__all__ = [
    "StreamError",
    "AllocationError",
    "InvalidShapeError",
    "BoundsError",
    "BufferBindError",
    "StreamClosedError",
    "ConfigError",
]
