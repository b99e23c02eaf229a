"""
Exceptions raised while talking to the apcupsd Network Information Server.
"""

from typing import Optional


class NISError(Exception):
    """Base exception for NIS client errors."""
    pass


class NISTransportError(NISError):
    """Connect, write, read, framing or timeout failure."""
    pass


class NISParseError(NISError):
    """A record or field value could not be parsed."""

    def __init__(self, message: str, field: Optional[str] = None):
        self.field = field
        if field:
            message = f"{field}: {message}"
        super().__init__(message)
