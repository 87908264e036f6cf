"""Structured request logging and metrics middleware."""

from __future__ import annotations

import logging
import time
from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from cohortdesk.telemetry import observe_request
from cohortdesk.utils import AuthenticationError, decode_access_token

logger = logging.getLogger("cohortdesk.middleware.structured")

COLOR_RESET = "\u001b[0m"
COLOR_GREEN = "\u001b[32m"
COLOR_CYAN = "\u001b[36m"
COLOR_YELLOW = "\u001b[33m"
COLOR_RED = "\u001b[31m"


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    """Log one line per HTTP request and record Prometheus request metrics."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start_time = time.perf_counter()
        log_payload: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "method": request.method,
            "url": str(request.url),
            "client_ip": request.client.host if request.client else None,
            "user_id": self._resolve_user_id(request),
        }

        try:
            response = await call_next(request)
        except Exception as exc:  # pragma: no cover
            duration = time.perf_counter() - start_time
            log_payload["status_code"] = 500
            log_payload["duration_ms"] = round(duration * 1000, 2)
            log_payload["error"] = repr(exc)
            logger.exception(self._format_console_message(log_payload))
            observe_request(request.method, self._resolve_route(request), 500, duration)
            raise

        duration = time.perf_counter() - start_time
        log_payload["status_code"] = response.status_code
        log_payload["duration_ms"] = round(duration * 1000, 2)
        logger.info(self._format_console_message(log_payload))
        observe_request(
            request.method,
            self._resolve_route(request),
            response.status_code,
            duration,
        )
        return response

    @staticmethod
    def _resolve_route(request: Request) -> str:
        """Return best-effort route pattern for metrics labels."""

        scope_route: Any = request.scope.get("route")
        path = getattr(scope_route, "path", None)
        return path or request.url.path

    @staticmethod
    def _extract_bearer_token(request: Request) -> Optional[str]:
        """Return the bearer token from the request headers when present."""

        auth_header = request.headers.get("authorization")
        if not auth_header:
            return None

        scheme, _, token = auth_header.partition(" ")
        if scheme.lower() != "bearer" or not token:
            return None

        return token

    @classmethod
    def _resolve_user_id(cls, request: Request) -> Optional[str]:
        token = cls._extract_bearer_token(request)
        if token is None:
            return None
        try:
            return decode_access_token(token).sub
        except AuthenticationError:
            logger.debug("Unreadable bearer token on %s", request.url.path)
            return None

    @staticmethod
    def _format_console_message(payload: dict[str, Any]) -> str:
        """Return request metadata wrapped with ANSI color codes."""

        status = payload.get("status_code") or 0
        if 200 <= status < 300:
            color = COLOR_GREEN
        elif 400 <= status < 500:
            color = COLOR_YELLOW
        elif status >= 500:
            color = COLOR_RED
        else:
            color = COLOR_CYAN

        fields = [
            ("timestamp", payload.get("timestamp")),
            ("method", payload.get("method")),
            ("url", payload.get("url")),
            ("status", payload.get("status_code")),
            ("duration_ms", payload.get("duration_ms")),
            ("client_ip", payload.get("client_ip")),
            ("user_id", payload.get("user_id")),
        ]
        message = ", ".join(
            f"{name}={value if value is not None else '-'}" for name, value in fields
        )

        return f"{color}{message}{COLOR_RESET}"
