from __future__ import annotations

from typing import Optional

from flask import Blueprint, Response
from prometheus_client import Counter, Histogram, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

TOKEN_EXCHANGES = Counter(
    "mixtape_spotify_token_exchanges_total",
    "Client-credentials token exchanges issued against Spotify, by result.",
    ["result"],
)
TRACK_SEARCH_OUTCOMES = Counter(
    "mixtape_track_search_outcomes_total",
    "Track resolutions by outcome (single, multiple, not_found or an error kind).",
    ["outcome"],
)
TRACK_SEARCH_DURATION = Histogram(
    "mixtape_track_search_seconds",
    "Wall time spent resolving a track query, token exchange included.",
    buckets=(0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, 10, float("inf")),
)


def record_token_exchange(result: str) -> None:
    TOKEN_EXCHANGES.labels(result=result).inc()


def record_search_outcome(outcome: str, duration_seconds: Optional[float] = None) -> None:
    TRACK_SEARCH_OUTCOMES.labels(outcome=outcome).inc()
    if duration_seconds is not None:
        TRACK_SEARCH_DURATION.observe(duration_seconds)


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
