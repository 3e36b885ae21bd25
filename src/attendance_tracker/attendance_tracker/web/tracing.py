"""
Request tracing and logging setup.

Every request gets a reference id (taken from ``X-Reference-Id`` or freshly
generated). It is echoed in the response header, in response bodies and in
every log record emitted while the request is handled.
"""

from __future__ import annotations

import logging
import logging.config
import time
import uuid
from datetime import datetime, timezone

from flask import Flask, g, has_request_context, request

from ..core.constants import REFERENCE_ID_HEADER

logger = logging.getLogger(__name__)

SENSITIVE_KEYS = (
    "password",
    "pass",
    "pwd",
    "token",
    "authorization",
    "auth",
    "secret",
    "jwt",
    "apikey",
    "api_key",
    "api-key",
)


def current_reference_id() -> str:
    if not has_request_context():
        return str(uuid.uuid4())
    if "reference_id" not in g:
        g.reference_id = str(uuid.uuid4())
    return g.reference_id


class ReferenceIdFilter(logging.Filter):
    """Adds ``reference_id`` to log records ('-' outside a request)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.reference_id = g.get("reference_id", "-") if has_request_context() else "-"
        return True


def configure_logging(level: str = "INFO") -> None:
    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "filters": {"reference_id": {"()": ReferenceIdFilter}},
            "formatters": {
                "standard": {
                    "format": "%(asctime)s [%(levelname)s] %(name)s [ref=%(reference_id)s]: %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "standard",
                    "filters": ["reference_id"],
                },
            },
            "root": {"handlers": ["console"], "level": level.upper()},
            "loggers": {
                "apscheduler": {"level": "WARNING"},
                "werkzeug": {"level": "WARNING"},
            },
        }
    )


def is_sensitive(key: str) -> bool:
    lowered = (key or "").lower()
    return any(s in lowered for s in SENSITIVE_KEYS)


def format_params(params) -> str:
    """Render query params sorted by key with sensitive values redacted."""
    if not params:
        return "-"
    parts = []
    for key in sorted(params.keys(), key=str.lower):
        if is_sensitive(key):
            parts.append(f"{key}=REDACTED")
            continue
        values = params.getlist(key) if hasattr(params, "getlist") else [params[key]]
        parts.append(f"{key}={','.join(values) if values else '-'}")
    return "&".join(parts)


def register_tracing(app: Flask) -> None:
    @app.before_request
    def _start_trace():
        header = (request.headers.get(REFERENCE_ID_HEADER) or "").strip()
        g.reference_id = header or str(uuid.uuid4())
        g.trace_started_at = datetime.now(timezone.utc)
        g.trace_started_ns = time.perf_counter_ns()

    @app.after_request
    def _finish_trace(response):
        response.headers[REFERENCE_ID_HEADER] = current_reference_id()

        started_ns = g.get("trace_started_ns")
        duration_ms = (time.perf_counter_ns() - started_ns) // 1_000_000 if started_ns else 0
        principal = g.get("principal")
        user = principal.username if principal else "anonymous"
        status = response.status_code

        if status >= 500:
            log = logger.error
        elif status >= 400:
            log = logger.warning
        else:
            log = logger.info
        log(
            "Request completed method=%s uri=%s params=%s user=%s startTime=%s status=%s durationMs=%s",
            request.method,
            request.path,
            format_params(request.args),
            user,
            g.get("trace_started_at").isoformat() if g.get("trace_started_at") else "-",
            status,
            duration_ms,
        )
        return response
