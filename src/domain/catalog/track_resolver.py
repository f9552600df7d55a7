# src/domain/catalog/track_resolver.py
import logging
import math
import time
from typing import Any, Dict, List, Optional

import requests

from config import Config
from src.domain.catalog.credentials import CredentialManager
from src.domain.catalog.errors import CatalogError, ErrorKind, UpstreamSearchError, UpstreamTimeout
from src.domain.catalog.outcomes import Failure, Multiple, NotFound, ResolutionOutcome, Single
from src.models.dto import TrackQuery, TrackRecord
from src.observability.metrics import record_search_outcome
from src.observability.tracing import (
    ATTR_HTTP_REQUEST_METHOD,
    ATTR_HTTP_RESPONSE_STATUS_CODE,
    ATTR_PEER_SERVICE,
    ATTR_SERVER_ADDRESS,
    ATTR_URL_FULL,
    SpanKind,
    set_span_error,
    set_span_success,
    tracer,
)

logger = logging.getLogger(__name__)

CREDENTIALS_MISSING_MESSAGE = (
    "Spotify API credentials not configured. "
    "Please set SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET environment variables."
)
SEARCH_FAILED_MESSAGE = "Failed to search Spotify. Please try again."
SEARCH_TIMEOUT_MESSAGE = "Spotify did not respond in time. Please try again."
GENERIC_FAILURE_MESSAGE = "Failed to search for track"


def build_search_query(song_name: str, artist: Optional[str] = None) -> str:
    """Build the Spotify ``q`` parameter.

    With an artist, field filters narrow the match; a bare title is searched
    as free text.
    """
    song = (song_name or "").strip()
    artist = (artist or "").strip()
    if artist:
        return f"track:{song} artist:{artist}"
    return song


def duration_from_ms(duration_ms: Any) -> int:
    """Convert milliseconds to whole seconds, rounding halves up."""
    if duration_ms is None:
        return 0
    seconds = math.floor(float(duration_ms) / 1000 + 0.5)
    return max(0, int(seconds))


def map_track(item: Dict[str, Any]) -> TrackRecord:
    """Normalize one raw Spotify track object."""
    album = item.get("album") or {}
    images = album.get("images") or []
    artists = item.get("artists") or []
    return TrackRecord(
        song_name=item["name"],
        artist=", ".join(a.get("name", "") for a in artists),
        duration=duration_from_ms(item.get("duration_ms")),
        album_art=images[0].get("url") if images else None,
        album_name=album.get("name"),
        spotify_id=item.get("id"),
    )


def disambiguate(records: List[TrackRecord]) -> ResolutionOutcome:
    if not records:
        return NotFound()
    if len(records) == 1:
        return Single(records[0])
    return Multiple(tuple(records))


class TrackResolver:
    """Resolves a song/artist query into zero, one or many Spotify tracks.

    The resolver never guesses between several candidates: two or more hits
    are handed back in search order for the caller to choose from. Failures
    are returned as ``Failure`` outcomes rather than raised, and nothing is
    retried here.
    """

    def __init__(self, credentials: CredentialManager,
                 *,
                 session: Optional[requests.Session] = None,
                 search_url: Optional[str] = None,
                 limit: Optional[int] = None,
                 timeout: Optional[float] = None):
        self.credentials = credentials
        self._session = session or requests.Session()
        self._search_url = search_url or Config.SPOTIFY_SEARCH_URL
        self._limit = limit or Config.SPOTIFY_SEARCH_LIMIT
        self._timeout = timeout if timeout is not None else Config.SPOTIFY_HTTP_TIMEOUT_SECONDS

    def resolve(self, query: TrackQuery) -> ResolutionOutcome:
        started = time.monotonic()
        attributes = {
            ATTR_HTTP_REQUEST_METHOD: "GET",
            ATTR_SERVER_ADDRESS: "api.spotify.com",
            ATTR_PEER_SERVICE: "spotify",
            "spotify.search.song_name": query.song_name,
            "spotify.search.artist": query.artist or "",
        }
        with tracer.start_as_current_span(
            "spotify.search_track", kind=SpanKind.CLIENT, attributes=attributes
        ) as span:
            outcome = self._resolve(query, span)
            if isinstance(outcome, Failure):
                set_span_error(span, outcome.message, outcome.kind.value)
            elif isinstance(outcome, NotFound):
                set_span_error(span, "Track not found", "not_found")
            else:
                set_span_success(span)
        record_search_outcome(outcome.label, time.monotonic() - started)
        return outcome

    def _resolve(self, query: TrackQuery, span) -> ResolutionOutcome:
        try:
            credential = self.credentials.get_token()
        except UpstreamTimeout:
            return Failure(ErrorKind.UPSTREAM_TIMEOUT, SEARCH_TIMEOUT_MESSAGE)
        except CatalogError as exc:
            logger.warning(
                "Cannot search Spotify without a token (%s): %s", exc.kind.value, exc.message,
                extra={"error_kind": exc.kind.value, "upstream_status": exc.status},
            )
            return Failure(ErrorKind.CONFIGURATION, CREDENTIALS_MISSING_MESSAGE, exc.status)

        search_query = build_search_query(query.song_name, query.artist)
        try:
            records = self._search(search_query, credential.token, span)
        except UpstreamTimeout:
            return Failure(ErrorKind.UPSTREAM_TIMEOUT, SEARCH_TIMEOUT_MESSAGE)
        except UpstreamSearchError as exc:
            return Failure(ErrorKind.UPSTREAM_SEARCH, exc.message, exc.status)

        outcome = disambiguate(records)
        logger.info(
            "Found %s track(s) for query: %s", len(records), search_query,
            extra={"search_query": search_query, "outcome": outcome.label, "result_count": len(records)},
        )
        return outcome

    def _search(self, search_query: str, token: str, span) -> List[TrackRecord]:
        """Run one search call and map its hits; raises on any upstream failure."""
        params = {"q": search_query, "type": "track", "limit": self._limit}
        span.set_attribute(ATTR_URL_FULL, self._search_url)

        try:
            response = self._session.get(
                self._search_url,
                params=params,
                headers={"Authorization": f"Bearer {token}"},
                timeout=self._timeout,
            )
        except requests.Timeout as exc:
            logger.error("Spotify search timed out after %ss for query: %s", self._timeout, search_query,
                         extra={"error_kind": ErrorKind.UPSTREAM_TIMEOUT.value, "search_query": search_query})
            raise UpstreamTimeout(SEARCH_TIMEOUT_MESSAGE) from exc
        except requests.RequestException as exc:
            logger.error("Error searching Spotify track: %s", exc,
                         extra={"error_kind": ErrorKind.UPSTREAM_SEARCH.value, "search_query": search_query})
            raise UpstreamSearchError(GENERIC_FAILURE_MESSAGE) from exc

        span.set_attribute(ATTR_HTTP_RESPONSE_STATUS_CODE, response.status_code)
        if not response.ok:
            logger.error("Spotify search error: %s - %s", response.status_code, response.text,
                         extra={"error_kind": ErrorKind.UPSTREAM_SEARCH.value,
                                "upstream_status": response.status_code, "search_query": search_query})
            raise UpstreamSearchError(SEARCH_FAILED_MESSAGE, status=response.status_code)

        try:
            data = response.json()
            items = ((data or {}).get("tracks") or {}).get("items") or []
            records = [map_track(item) for item in items[: self._limit]]
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            logger.error("Unexpected Spotify search payload: %s", exc,
                         extra={"error_kind": ErrorKind.UPSTREAM_SEARCH.value,
                                "upstream_status": response.status_code, "search_query": search_query})
            raise UpstreamSearchError(GENERIC_FAILURE_MESSAGE, status=response.status_code) from exc

        span.set_attribute("spotify.search.result_count", len(records))
        return records



__all__ = [
    "TrackResolver",
    "build_search_query",
    "duration_from_ms",
    "map_track",
    "disambiguate",
]
