import logging

from flask import Blueprint, current_app, jsonify, request

from src.domain.catalog.track_resolver import GENERIC_FAILURE_MESSAGE
from src.models.dto import TrackQuery
from src.observability.tracing import (
    ATTR_HTTP_REQUEST_METHOD,
    ATTR_HTTP_RESPONSE_STATUS_CODE,
    ATTR_HTTP_ROUTE,
    ATTR_URL_FULL,
    SpanKind,
    set_span_error,
    set_span_success,
    tracer,
)

logger = logging.getLogger(__name__)

search_bp = Blueprint('search_bp', __name__)

SONG_NAME_REQUIRED = "Song name is required"


def get_track_resolver():
    return current_app.extensions['track_resolver']


def _parse_query(payload):
    """Return a TrackQuery, or None when the body lacks a usable song name."""
    if not isinstance(payload, dict):
        return None
    song_name = payload.get('songName')
    if not isinstance(song_name, str) or not song_name.strip():
        return None
    artist = payload.get('artist')
    if not isinstance(artist, str):
        artist = None
    return TrackQuery(song_name=song_name, artist=artist)


@search_bp.route('/search-track', methods=['POST'])
def search_track():
    attributes = {
        ATTR_HTTP_REQUEST_METHOD: "POST",
        ATTR_URL_FULL: request.url,
        ATTR_HTTP_ROUTE: request.url_rule.rule if request.url_rule else "/search-track",
    }
    with tracer.start_as_current_span(
        "workflow.search_track", kind=SpanKind.SERVER, attributes=attributes
    ) as span:
        try:
            payload = request.get_json(force=True)
            query = _parse_query(payload)
            if query is None:
                span.set_attribute(ATTR_HTTP_RESPONSE_STATUS_CODE, 400)
                set_span_error(span, SONG_NAME_REQUIRED, "validation_error")
                return jsonify({"error": SONG_NAME_REQUIRED}), 400

            span.set_attribute("spotify.search.song_name", query.song_name)
            span.set_attribute("spotify.search.artist", query.artist or "")

            outcome = get_track_resolver().resolve(query)
            body, status = outcome.to_response()
            span.set_attribute(ATTR_HTTP_RESPONSE_STATUS_CODE, status)
            if status >= 400:
                set_span_error(span, body.get("error", ""), "spotify_error")
            else:
                set_span_success(span)
            return jsonify(body), status
        except Exception as e:
            logger.error("Error searching for track: %s", e, exc_info=True)
            span.set_attribute(ATTR_HTTP_RESPONSE_STATUS_CODE, 500)
            set_span_error(span, e, "internal_error")
            return jsonify({"error": GENERIC_FAILURE_MESSAGE}), 500
