"""Telemetry helpers and metrics."""

from .metrics import (
    ASSIGNMENT_OUTCOMES,
    AUDIT_WRITE_FAILURES,
    ERROR_COUNTER,
    LOGIN_COUNTER,
    REQUEST_COUNT,
    REQUEST_LATENCY,
    increment_login,
    observe_request,
    record_assignment_outcome,
    record_audit_failure,
)

__all__ = [
    "ASSIGNMENT_OUTCOMES",
    "AUDIT_WRITE_FAILURES",
    "ERROR_COUNTER",
    "LOGIN_COUNTER",
    "REQUEST_COUNT",
    "REQUEST_LATENCY",
    "increment_login",
    "observe_request",
    "record_assignment_outcome",
    "record_audit_failure",
]
