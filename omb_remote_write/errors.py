"""Exception types raised by the results-to-remote-write pipeline."""
from typing import Optional


class WriterError(Exception):
    """Base class for every fatal pipeline error."""


class InputError(WriterError):
    """Results file unreadable or malformed."""


class LabelParseError(InputError):
    """A label token is not of the form name:value."""


class DuplicateLabelName(InputError):
    """A label set would contain the same label name twice."""

    def __init__(self, name: str):
        super().__init__(f"duplicate label name '{name}'")
        self.name = name


class ConfigError(WriterError):
    """Destination URL or writer settings are invalid."""


class EncodeError(WriterError):
    """Write request could not be serialized, compressed or decoded."""


class TransmitError(WriterError):
    """Upload to the remote-write endpoint failed."""

    def __init__(self, message: str, status_code: Optional[int] = None, recoverable: bool = False):
        super().__init__(message)
        self.status_code = status_code
        self.recoverable = recoverable
