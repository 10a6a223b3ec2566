"""
OSL-specific exceptions.

Parsing and evaluation never raise; these cover the host boundary only:
- SurfaceUnavailableError: the one fatal condition, raised at construction
- ResourceLoadError: raised by fetchers, caught and logged by the runtime
"""

from typing import Optional


class OslError(Exception):
    """Base exception for OSL runtime errors."""
    pass


class SurfaceUnavailableError(OslError):
    """The drawing surface cannot be used; the runtime cannot be built."""

    def __init__(self, reason: str = "2D drawing surface required"):
        super().__init__(reason)


class ResourceLoadError(OslError):
    """An image or sound could not be fetched or decoded."""

    def __init__(self, url: str, reason: Optional[str] = None):
        self.url = url
        self.reason = reason
        message = f"failed to load {url}"
        if reason:
            message += f": {reason}"
        super().__init__(message)
