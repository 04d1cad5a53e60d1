"""Exceptions raised by the decoding and selection layers.

Routers translate these into HTTP errors; nothing below the API layer
knows about status codes.
"""


class TrackviewError(Exception):
    """Base class for application errors."""


class DecodeError(TrackviewError):
    """Raw bytes are not a well-formed activity file."""


class DecodeShapeError(DecodeError):
    """Decoding succeeded but the result has no `records` sequence."""


class InvalidRangeError(TrackviewError, ValueError):
    """A selection range with non-finite bounds or start > end."""


class SessionNotFoundError(TrackviewError, KeyError):
    """No loaded session under the requested filename."""

    def __str__(self):
        # KeyError repr-quotes its argument
        return str(self.args[0]) if self.args else "Session not found"
