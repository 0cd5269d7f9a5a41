"""Exception hierarchy for the dropboxer package."""

from __future__ import annotations


class DropboxerError(Exception):
    """Base exception for all dropboxer errors."""

    pass


class TransportError(DropboxerError):
    """Raised when a request cannot reach the remote (DNS, TLS, timeout)."""

    pass


class RemoteError(DropboxerError):
    """Raised when the remote answers with a non-success status.

    The raw response body is kept on the exception for diagnostics.
    """

    def __init__(self, status: int, body: str) -> None:
        super().__init__(f"Result code is {status} due to: {body}")
        self.status = status
        self.body = body


class LocalIOError(DropboxerError):
    """Raised when a local file or directory cannot be read."""

    pass


class DecodeError(DropboxerError):
    """Raised when a response body is not the JSON we expect."""

    pass


class ConfigError(DropboxerError):
    """Raised when settings are missing or malformed."""

    pass
