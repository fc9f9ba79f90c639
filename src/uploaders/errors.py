"""Exceptions raised by the Imgur client."""

from __future__ import annotations


class ImgurError(Exception):
    """Base class for every error raised by the Imgur client."""
    pass


class TransportError(ImgurError):
    """Exception raised when the HTTP exchange itself fails."""
    pass


class UploadTimeoutError(TransportError):
    """Exception raised when the remote service does not answer in time."""
    pass


class UploadCancelledError(TransportError):
    """Exception raised when a caller cancels an upload."""
    pass


class EncodingError(ImgurError, ValueError):
    """Exception raised when a request body cannot be built."""
    pass


class DecodingError(ImgurError):
    """Exception raised when a response body is not the expected JSON."""
    pass


class ConfigError(ImgurError):
    """Exception raised when configuration is missing or malformed."""
    pass
