"""
Prometheus metrics middleware for the Capital Code assistant API.

Exposes /metrics endpoint with request counters, latency histograms,
and chat pipeline metrics.
"""

import logging
import time

from fastapi import Request, Response
from prometheus_client import (
    Counter, Histogram, Gauge,
    generate_latest, CONTENT_TYPE_LATEST,
)
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.routing import Match

logger = logging.getLogger(__name__)

# Request metrics
REQUEST_COUNT = Counter(
    "capital_code_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status_code"],
)
REQUEST_LATENCY = Histogram(
    "capital_code_http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint"],
    buckets=[0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0],
)
ACTIVE_REQUESTS = Gauge(
    "capital_code_http_active_requests",
    "Currently active HTTP requests",
)

# Chat pipeline metrics
INTENT_COUNT = Counter(
    "capital_code_intent_classification_total",
    "Intent classifications",
    ["intent"],
)
CHAT_OUTCOME_COUNT = Counter(
    "capital_code_chat_outcomes_total",
    "Chat replies by serving model, or failure class",
    ["model", "outcome"],
)
COMPLETION_LATENCY = Histogram(
    "capital_code_completion_duration_seconds",
    "End-to-end completion latency including retries and fallback",
    buckets=[0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0],
)


def record_intent(intent: str):
    """Record an intent classification event."""
    INTENT_COUNT.labels(intent=intent).inc()


def record_chat_outcome(model: str, outcome: str):
    """Record which model served a reply, or why none did."""
    CHAT_OUTCOME_COUNT.labels(model=model, outcome=outcome).inc()


def record_completion_latency(seconds: float):
    """Record completion latency."""
    COMPLETION_LATENCY.observe(seconds)


def endpoint_label(request: Request) -> str:
    """Route template ("/api/customers/{customer_id}/messages") rather than the raw path."""
    for route in request.app.routes:
        match, _ = route.matches(request.scope)
        if match == Match.FULL:
            return getattr(route, "path", request.url.path)
    return "unmatched"


class MetricsMiddleware(BaseHTTPMiddleware):
    """Records count, latency and in-flight gauge for every HTTP request."""

    async def dispatch(self, request: Request, call_next):
        endpoint = endpoint_label(request)
        started = time.perf_counter()
        ACTIVE_REQUESTS.inc()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            ACTIVE_REQUESTS.dec()
            REQUEST_COUNT.labels(request.method, endpoint, status_code).inc()
            REQUEST_LATENCY.labels(request.method, endpoint).observe(time.perf_counter() - started)


async def metrics_endpoint(request: Request) -> Response:
    return Response(generate_latest(), media_type=CONTENT_TYPE_LATEST)
