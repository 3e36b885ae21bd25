from __future__ import annotations

import logging

from flask import Flask
from werkzeug.exceptions import HTTPException

from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BadRequestError,
    ConflictError,
    DomainError,
    NotFoundError,
    ValidationError,
)
from .responses import failure
from .tracing import current_reference_id

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (ValidationError, 400),
    (BadRequestError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (ConflictError, 409),
)


def status_for(error: DomainError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(e: DomainError):
        errors = e.errors if isinstance(e, ValidationError) else None
        return failure(status_for(e), e.message, errors)

    @app.errorhandler(HTTPException)
    def _http_error(e: HTTPException):
        return failure(e.code or 500, e.description or e.name)

    @app.errorhandler(Exception)
    def _unexpected(e: Exception):
        logger.exception("Unhandled exception referenceId=%s", current_reference_id())
        return failure(500, "An unexpected error occurred. Please contact support with the referenceId.")
