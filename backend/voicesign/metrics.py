from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Callable, Iterator

from prometheus_client import CONTENT_TYPE_LATEST, Counter, Histogram, generate_latest

HTTP_REQUESTS = Counter(
    "http_requests_total",
    "HTTP requests received by the API.",
    ["path", "method", "status"],
)

HTTP_LATENCY = Histogram(
    "http_request_duration_seconds",
    "Latencies for HTTP requests.",
    ["path", "method"],
)

UPSTREAM_REQUESTS = Counter(
    "upstream_requests_total",
    "Calls made to external AI services (by service/outcome).",
    ["service", "outcome"],
)

UPSTREAM_LATENCY = Histogram(
    "upstream_request_duration_seconds",
    "Latency of calls to external AI services.",
    ["service"],
    buckets=(0.1, 0.5, 1, 2, 5, 10, 30, 60, 120),
)


@contextmanager
def track_http_request(
    path: str,
    method: str,
    status_getter: Callable[[], int],
) -> Iterator[None]:
    start = time.perf_counter()
    try:
        yield
    finally:
        duration = time.perf_counter() - start
        HTTP_REQUESTS.labels(path=path, method=method, status=str(status_getter())).inc()
        HTTP_LATENCY.labels(path=path, method=method).observe(duration)


@contextmanager
def track_upstream_call(service: str) -> Iterator[dict[str, str]]:
    """
    Time one outbound call. The caller sets ``outcome["outcome"]``;
    anything left unset is counted as an error.
    """
    outcome = {"outcome": "error"}
    start = time.perf_counter()
    try:
        yield outcome
    finally:
        UPSTREAM_LATENCY.labels(service=service).observe(time.perf_counter() - start)
        UPSTREAM_REQUESTS.labels(service=service, outcome=outcome["outcome"]).inc()


def render_all_metrics_prometheus() -> bytes:
    return generate_latest()


__all__ = [
    "CONTENT_TYPE_LATEST",
    "HTTP_LATENCY",
    "HTTP_REQUESTS",
    "UPSTREAM_LATENCY",
    "UPSTREAM_REQUESTS",
    "render_all_metrics_prometheus",
    "track_http_request",
    "track_upstream_call",
]
