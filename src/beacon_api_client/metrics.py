"""
Client metrics using prometheus_client.

Metrics live in a dedicated registry so that embedding applications decide
whether and where to expose them.
"""

from __future__ import annotations

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Histogram,
    generate_latest,
)

REGISTRY = CollectorRegistry()

# -----------------------------------------------------------------------------
# Requests
# -----------------------------------------------------------------------------

requests_total = Counter(
    "beacon_api_requests_total",
    "REST requests by endpoint and outcome",
    ["endpoint", "outcome"],
    registry=REGISTRY,
)

request_duration = Histogram(
    "beacon_api_request_seconds",
    "REST request duration",
    ["endpoint"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0),
    registry=REGISTRY,
)

# -----------------------------------------------------------------------------
# Events
# -----------------------------------------------------------------------------

events_received = Counter(
    "beacon_api_events_total",
    "Decoded events by kind",
    ["kind"],
    registry=REGISTRY,
)

event_errors = Counter(
    "beacon_api_event_errors_total",
    "Event stream errors by error class",
    ["error"],
    registry=REGISTRY,
)

reconnects_total = Counter(
    "beacon_api_reconnects_total",
    "Event stream reconnection attempts",
    registry=REGISTRY,
)


def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics output.

    Returns:
        Prometheus text format output as bytes.
    """
    return generate_latest(REGISTRY)
