"""Error taxonomy for catalog API access."""

from __future__ import annotations

from enum import Enum
from typing import Optional


class ErrorKind(str, Enum):
    CONFIGURATION = "configuration_error"
    UPSTREAM_AUTH = "upstream_auth_error"
    UPSTREAM_SEARCH = "upstream_search_error"
    UPSTREAM_TIMEOUT = "upstream_timeout"


class CatalogError(Exception):
    """Base class for failures talking to the Spotify catalog."""

    kind: ErrorKind = ErrorKind.UPSTREAM_SEARCH

    def __init__(self, message: str, *, status: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status = status


class ConfigurationError(CatalogError):
    kind = ErrorKind.CONFIGURATION


class UpstreamAuthError(CatalogError):
    kind = ErrorKind.UPSTREAM_AUTH


class UpstreamSearchError(CatalogError):
    kind = ErrorKind.UPSTREAM_SEARCH


class UpstreamTimeout(CatalogError):
    kind = ErrorKind.UPSTREAM_TIMEOUT


__all__ = [
    "ErrorKind",
    "CatalogError",
    "ConfigurationError",
    "UpstreamAuthError",
    "UpstreamSearchError",
    "UpstreamTimeout",
]
