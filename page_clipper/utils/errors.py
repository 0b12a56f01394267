"""
Exception types raised at the external boundaries of the capture pipeline.
"""

from typing import Optional


class ClipperError(Exception):
    """Base class for all page clipper errors."""


class FetchError(ClipperError):
    """Raised when a resource cannot be retrieved."""

    def __init__(self, url: str, reason: str, status: Optional[int] = None):
        self.url = url
        self.reason = reason
        self.status = status
        message = f"Failed to fetch {url}: {reason}"
        if status is not None:
            message = f"Failed to fetch {url}: HTTP {status}"
        super().__init__(message)


class StoreError(ClipperError):
    """Raised when a fetched resource cannot be persisted."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to store {url}: {reason}")
