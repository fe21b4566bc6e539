"""
Error Taxonomy

Exceptions raised by the Vestige pipeline. Only configuration errors abort a
run; every other kind is caught by the controller, logged, and the run
continues with the next target or asset.
"""

from typing import Optional


class VestigeError(Exception):
    """Base class for all Vestige errors."""

    def __init__(self, message: str, url: Optional[str] = None):
        super().__init__(message)
        self.url = url


class ConfigurationError(VestigeError):
    """Missing or malformed configuration or target file."""


class TransportError(VestigeError):
    """The request could not be sent or no response arrived in time."""


class HttpStatusError(VestigeError):
    """The server answered with a non-2xx status."""

    def __init__(self, status_code: int, url: Optional[str] = None):
        super().__init__(f"HTTP {status_code}", url=url)
        self.status_code = status_code


class FilesystemError(VestigeError):
    """A directory or file could not be created or written."""

    def __init__(self, message: str, path: Optional[str] = None):
        super().__init__(message)
        self.path = path


class AssetError(VestigeError):
    """A single asset could not be downloaded or written."""
