"""
binfetch error classes.

One class per failing phase so callers (and the CLI exit code mapping) can tell
a bad download apart from a bad archive or a failed write.
"""
from __future__ import annotations


class BinfetchError(Exception):
    """Base class for all binfetch errors."""
    pass


class StreamError(BinfetchError):
    """
    The upstream byte source failed or was closed before completion.

    Raised when:
    - The transport raises while the body is being drained
    - The response is cancelled or times out mid-body

    Any partially collected data is discarded.
    """
    pass


class MalformedArchiveError(BinfetchError):
    """
    The collected buffer is not a well-formed archive container.

    Raised when:
    - The buffer is empty or too short to hold a container
    - The trailer / signature is missing or corrupt
    - An entry fails to decompress or its checksum does not match
    """
    pass


class WriteError(BinfetchError):
    """
    A located entry could not be written to its destination.

    Wraps the underlying OSError (permission, disk full, missing directory).
    """

    def __init__(self, message: str, path: str | None = None):
        super().__init__(message)
        self.path = path


class DownloadError(BinfetchError):
    """
    The release could not be requested.

    Raised for HTTP status errors and connection failures that happen before
    the response body starts streaming.
    """

    def __init__(self, message: str, url: str | None = None, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class BinaryNotFoundError(BinfetchError):
    """The downloaded release does not contain the configured binary."""
    pass


class UnsupportedPlatformError(BinfetchError):
    """The running platform or architecture has no release mapping."""
    pass


class InstallPathError(BinfetchError):
    """No executable directory could be determined for this environment."""
    pass


__all__ = [
    "BinfetchError",
    "StreamError",
    "MalformedArchiveError",
    "WriteError",
    "DownloadError",
    "BinaryNotFoundError",
    "UnsupportedPlatformError",
    "InstallPathError",
]
