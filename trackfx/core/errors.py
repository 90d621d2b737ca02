"""
Exception types raised by trackfx.

Render paths never raise for missing data; these are surfaced to the
caller that configures an effect or loads a tracking file.
"""


class TrackFXError(Exception):
    """Base class for all trackfx errors."""


class InvalidJSON(TrackFXError, ValueError):
    """The effect configuration document is malformed."""

    def __init__(self, message: str, key: str | None = None):
        self.key = key
        if key:
            message = f"{message} (key: {key})"
        super().__init__(message)


class TrackingFileError(TrackFXError, OSError):
    """A tracking data file could not be read or parsed."""

    def __init__(self, message: str, path: str | None = None):
        self.path = path
        super().__init__(message)
