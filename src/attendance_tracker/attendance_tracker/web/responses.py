from __future__ import annotations

from datetime import datetime, timezone
from http import HTTPStatus
from typing import Any, Mapping, Optional

from flask import jsonify, request

from .tracing import current_reference_id


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def success(result: Any, status: int = 200):
    """Standard envelope for successful responses."""
    http_status = HTTPStatus(status)
    body = {
        "timestamp": _now_iso(),
        "code": http_status.value,
        "status": http_status.phrase,
        "referenceId": current_reference_id(),
        "result": result,
    }
    return jsonify(body), http_status.value


def failure(status: int, message: str, errors: Optional[Mapping[str, str]] = None):
    """Standard envelope for error responses; ``errors`` only when field-level."""
    http_status = HTTPStatus(status)
    body = {
        "referenceId": current_reference_id(),
        "timestamp": _now_iso(),
        "status": http_status.value,
        "error": http_status.name,
        "message": message,
        "path": request.path,
    }
    if errors:
        body["errors"] = dict(errors)
    return jsonify(body), http_status.value
