"""Client-credentials token cache for the Spotify Web API."""

from __future__ import annotations

import logging
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

import requests

from config import Config, get_spotify_credentials
from src.domain.catalog.errors import ConfigurationError, ErrorKind, UpstreamAuthError, UpstreamTimeout
from src.observability.metrics import record_token_exchange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Credential:
    token: str
    expires_at: float  # epoch seconds, safety margin already applied

    def is_valid(self, now: float) -> bool:
        return now < self.expires_at


class CredentialManager:
    """Hands out a currently-valid application bearer token.

    Tokens come from the client-credentials grant and are cached in memory
    until ``expires_in - safety_margin`` seconds have elapsed (the margin is
    capped at half the lifetime so short-lived tokens stay usable). Failed
    exchanges are never cached, so the next call tries again.

    Refreshes are serialized on a lock: a caller that waited behind another
    refresh reuses the token it produced instead of issuing a second exchange.
    """

    def __init__(self, client_id: Optional[str] = None,
                 client_secret: Optional[str] = None,
                 *,
                 session: Optional[requests.Session] = None,
                 token_url: Optional[str] = None,
                 timeout: Optional[float] = None,
                 safety_margin: Optional[int] = None,
                 clock: Callable[[], float] = time.time) -> None:
        self._client_id = client_id
        self._client_secret = client_secret
        self._session = session or requests.Session()
        self._token_url = token_url or Config.SPOTIFY_TOKEN_URL
        self._timeout = timeout if timeout is not None else Config.SPOTIFY_HTTP_TIMEOUT_SECONDS
        self._safety_margin = safety_margin if safety_margin is not None else Config.SPOTIFY_TOKEN_SAFETY_MARGIN_SECONDS
        self._clock = clock

        self._credential: Optional[Credential] = None
        self._refresh_lock = threading.Lock()

    def _resolve_secrets(self) -> tuple[Optional[str], Optional[str]]:
        env_id, env_secret = get_spotify_credentials()
        return (self._client_id or env_id), (self._client_secret or env_secret)

    def is_configured(self) -> bool:
        client_id, client_secret = self._resolve_secrets()
        return bool(client_id and client_secret)

    def invalidate(self) -> None:
        self._credential = None

    def get_token(self) -> Credential:
        client_id, client_secret = self._resolve_secrets()
        if not client_id or not client_secret:
            logger.warning("Missing Spotify credentials: SPOTIFY_CLIENT_ID or SPOTIFY_CLIENT_SECRET not set")
            raise ConfigurationError("Spotify client id/secret are not configured.")

        cached = self._credential
        if cached is not None and cached.is_valid(self._clock()):
            return cached

        with self._refresh_lock:
            # Another thread may have refreshed while we waited.
            cached = self._credential
            if cached is not None and cached.is_valid(self._clock()):
                return cached
            credential = self._exchange(client_id, client_secret)
            self._credential = credential
            return credential

    def _exchange(self, client_id: str, client_secret: str) -> Credential:
        requested_at = self._clock()
        try:
            response = self._session.post(
                self._token_url,
                auth=(client_id, client_secret),
                data={"grant_type": "client_credentials"},
                timeout=self._timeout,
            )
        except requests.Timeout as exc:
            record_token_exchange("timeout")
            logger.error("Spotify token request timed out after %ss", self._timeout)
            raise UpstreamTimeout("Spotify token endpoint timed out.") from exc
        except requests.RequestException as exc:
            record_token_exchange("error")
            logger.error("Error getting Spotify access token: %s", exc)
            raise UpstreamAuthError("Spotify token endpoint unreachable.") from exc

        if not response.ok:
            record_token_exchange("rejected")
            logger.error("Spotify token error: %s - %s", response.status_code, response.text)
            raise UpstreamAuthError("Spotify rejected the client credentials.", status=response.status_code)

        try:
            data = response.json()
            token = data["access_token"]
            lifetime = int(data["expires_in"])
            if not isinstance(token, str) or not token:
                raise TypeError("access_token is missing or not a string")
            if lifetime <= 0:
                raise ValueError(f"non-positive expires_in: {lifetime}")
        except (ValueError, KeyError, TypeError) as exc:
            record_token_exchange("error")
            logger.error("Malformed Spotify token response: %s", exc,
                         extra={"error_kind": ErrorKind.UPSTREAM_AUTH.value, "upstream_status": response.status_code})
            raise UpstreamAuthError("Malformed token response from Spotify.", status=response.status_code) from exc

        record_token_exchange("success")
        # Short-lived tokens keep at least half their lifetime usable.
        margin = min(self._safety_margin, lifetime // 2)
        expires_at = requested_at + lifetime - margin
        logger.info("Obtained Spotify access token valid for %ss", lifetime)
        return Credential(token=token, expires_at=expires_at)


__all__ = ["Credential", "CredentialManager"]
