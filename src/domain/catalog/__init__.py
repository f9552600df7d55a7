"""Catalog domain services (credentials, track resolution)."""

from .credentials import Credential, CredentialManager
from .errors import (
    CatalogError,
    ConfigurationError,
    ErrorKind,
    UpstreamAuthError,
    UpstreamSearchError,
    UpstreamTimeout,
)
from .outcomes import Failure, Multiple, NotFound, ResolutionOutcome, Single
from .track_resolver import TrackResolver

__all__ = [
    "Credential",
    "CredentialManager",
    "CatalogError",
    "ConfigurationError",
    "ErrorKind",
    "UpstreamAuthError",
    "UpstreamSearchError",
    "UpstreamTimeout",
    "Failure",
    "Multiple",
    "NotFound",
    "ResolutionOutcome",
    "Single",
    "TrackResolver",
]
