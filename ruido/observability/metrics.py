from __future__ import annotations

from typing import Optional

from flask import Blueprint, Response
from prometheus_client import Counter, Histogram, generate_latest

metrics_blueprint = Blueprint("metrics_bp", __name__)

CONTENT_TYPE_LATEST = "text/plain; version=0.0.4; charset=utf-8"

SEARCH_REQUESTS = Counter(
    "ruido_track_search_requests_total",
    "Track searches served, by execution path.",
    ["path"],
)
SEARCH_FAILURES = Counter(
    "ruido_track_search_failures_total",
    "Track searches that failed, by failure kind.",
    ["kind"],
)
SEARCH_PARTIAL_HYDRATION = Counter(
    "ruido_track_search_dropped_rows_total",
    "Ranked ids that no longer hydrated to a track.",
)
SEARCH_LATENCY = Histogram(
    "ruido_track_search_seconds",
    "Wall time spent executing a track search.",
    ["path"],
    buckets=(0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5, float("inf")),
)
TRACK_EVENTS = Counter(
    "ruido_track_events_total",
    "Counter mutations applied to tracks.",
    ["event"],
)


def record_search(path: str, duration_seconds: Optional[float] = None) -> None:
    SEARCH_REQUESTS.labels(path=path).inc()
    if duration_seconds is not None:
        SEARCH_LATENCY.labels(path=path).observe(duration_seconds)


def record_search_failure(kind: str) -> None:
    SEARCH_FAILURES.labels(kind=kind).inc()


def record_dropped_rows(count: int) -> None:
    if count > 0:
        SEARCH_PARTIAL_HYDRATION.inc(count)


def record_track_event(event: str) -> None:
    TRACK_EVENTS.labels(event=event).inc()


@metrics_blueprint.route("/metrics")
def metrics_endpoint() -> Response:
    return Response(generate_latest(), mimetype=CONTENT_TYPE_LATEST)
