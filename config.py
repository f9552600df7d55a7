#!/usr/bin/env python
# config.py
import os
from typing import Optional

# This assumes config.py is at the root of your project
basedir = os.path.abspath(os.path.dirname(__file__))


def _get_int(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_float(name: str, default: float) -> float:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _get_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "t", "yes", "y", "on"}


def _get_prefix(name: str) -> str:
    raw = (os.getenv(name) or "").strip().rstrip("/")
    if raw and not raw.startswith("/"):
        raw = "/" + raw
    return raw


def get_spotify_credentials() -> tuple[Optional[str], Optional[str]]:
    """Read the catalog client id/secret from the environment.

    Looked up on every call so a deployment can fix missing secrets without a
    restart. The legacy ``SPOTIPY_*`` names are honoured as a fallback.
    """
    client_id = os.getenv("SPOTIFY_CLIENT_ID") or os.getenv("SPOTIPY_CLIENT_ID")
    client_secret = os.getenv("SPOTIFY_CLIENT_SECRET") or os.getenv("SPOTIPY_CLIENT_SECRET")
    return (client_id or None), (client_secret or None)


class Config:
    # Spotify catalog API
    SPOTIFY_TOKEN_URL = os.getenv('SPOTIFY_TOKEN_URL', 'https://accounts.spotify.com/api/token')
    SPOTIFY_SEARCH_URL = os.getenv('SPOTIFY_SEARCH_URL', 'https://api.spotify.com/v1/search')
    # Explicit timeout for every outbound call (token exchange and search)
    SPOTIFY_HTTP_TIMEOUT_SECONDS = max(0.1, _get_float('SPOTIFY_HTTP_TIMEOUT_SECONDS', 10.0))
    # Tokens are treated as expired this many seconds before Spotify says so
    SPOTIFY_TOKEN_SAFETY_MARGIN_SECONDS = max(0, _get_int('SPOTIFY_TOKEN_SAFETY_MARGIN_SECONDS', 300))
    # Spotify API caps search pages at 50
    SPOTIFY_SEARCH_LIMIT = min(max(1, _get_int('SPOTIFY_SEARCH_LIMIT', 10)), 50)

    # HTTP surface
    API_ROUTE_PREFIX = _get_prefix('API_ROUTE_PREFIX')
    CORS_MAX_AGE_SECONDS = max(0, _get_int('CORS_MAX_AGE_SECONDS', 600))
    PORT = _get_int('PORT', 5000)

    # Runtime behavior
    # Turn Flask debug on/off from env; default off to avoid noisy console
    DEBUG = _get_bool('DEBUG', False)
    # Control console logging; when disabled, logs go only to file
    ENABLE_CONSOLE_LOGS = _get_bool('ENABLE_CONSOLE_LOGS', False)
    LOG_DIR = os.getenv('LOG_DIR', os.path.join(basedir, 'src', 'log'))

    # Observability
    OTEL_EXPORTER_OTLP_ENDPOINT = os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
    OTEL_EXPORTER_OTLP_HEADERS = os.getenv('OTEL_EXPORTER_OTLP_HEADERS')
    OTEL_EXPORTER_OTLP_INSECURE = _get_bool('OTEL_EXPORTER_OTLP_INSECURE', True)
    OTEL_SERVICE_NAME = os.getenv('OTEL_SERVICE_NAME', 'mixtape-creator-api')
    SERVICE_VERSION = os.getenv('SERVICE_VERSION', '0.1.0')
