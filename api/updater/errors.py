"""Errors raised while fetching update metadata."""

from typing import Optional


class UpdateCheckError(Exception):
    """Base class for update metadata failures."""


class TransportError(UpdateCheckError):
    """The metadata endpoint could not be reached (DNS, TLS, timeout...)."""


class HttpStatusError(UpdateCheckError):
    """The metadata endpoint answered with something other than HTTP 200."""

    def __init__(self, status_code: int, body: Optional[str] = None):
        super().__init__(f"Request error: HTTP code {status_code}")
        self.status_code = status_code
        self.body = body


class InvalidMetadataError(UpdateCheckError):
    """The decoded metadata is not a usable mapping."""
