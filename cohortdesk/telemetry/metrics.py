"""Prometheus metrics definitions and helpers."""

from __future__ import annotations

from prometheus_client import Counter, Histogram

REQUEST_COUNT = Counter(
    "http_requests_total",
    "Total HTTP requests processed",
    ("method", "route", "status"),
)

REQUEST_LATENCY = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ("method", "route"),
    buckets=(
        0.005,
        0.01,
        0.025,
        0.05,
        0.1,
        0.25,
        0.5,
        1.0,
        2.5,
        5.0,
        10.0,
    ),
)

LOGIN_COUNTER = Counter(
    "cohortdesk_logins_total",
    "Number of successful admin login events",
)

ERROR_COUNTER = Counter(
    "cohortdesk_internal_errors_total",
    "Number of requests ending in internal server error responses",
    ("method", "route"),
)

ASSIGNMENT_OUTCOMES = Counter(
    "cohortdesk_assignment_outcomes_total",
    "Per-student results of assignment requests",
    ("outcome",),
)

AUDIT_WRITE_FAILURES = Counter(
    "cohortdesk_audit_write_failures_total",
    "Audit log entries that could not be persisted",
    ("action",),
)


def observe_request(
    method: str,
    route: str,
    status_code: int,
    duration_seconds: float,
) -> None:
    """Record metrics for a completed HTTP request."""

    safe_route = route or "unknown"
    safe_method = method or "UNKNOWN"
    observed_duration = duration_seconds if duration_seconds >= 0 else 0

    REQUEST_COUNT.labels(
        method=safe_method,
        route=safe_route,
        status=str(status_code),
    ).inc()
    REQUEST_LATENCY.labels(
        method=safe_method,
        route=safe_route,
    ).observe(observed_duration)

    if status_code >= 500:
        ERROR_COUNTER.labels(
            method=safe_method,
            route=safe_route,
        ).inc()


def increment_login() -> None:
    """Increment the successful login counter."""

    LOGIN_COUNTER.inc()


def record_assignment_outcome(outcome: str) -> None:
    ASSIGNMENT_OUTCOMES.labels(outcome=outcome).inc()


def record_audit_failure(action: str) -> None:
    AUDIT_WRITE_FAILURES.labels(action=action).inc()
