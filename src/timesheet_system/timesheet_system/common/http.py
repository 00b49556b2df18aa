from __future__ import annotations

import logging

from flask import Flask, jsonify, request

from ..core.constants import IMPERSONATION_HEADER, PRINCIPAL_HEADER
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DomainError,
    InvalidTransitionError,
    NotFoundError,
    ReadOnlyStateError,
    StorageUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = {
    ValidationError: 400,
    AuthenticationError: 401,
    AuthorizationError: 403,
    NotFoundError: 404,
    ConflictError: 409,
    InvalidTransitionError: 409,
    ReadOnlyStateError: 423,
    StorageUnavailableError: 503,
}


def status_for(exc: DomainError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_BY_ERROR:
            return STATUS_BY_ERROR[cls]
    return 400


def error_body(exc: DomainError) -> dict:
    return {"error": exc.code, "message": str(exc), "retryable": exc.retryable}


def caller_headers() -> tuple:
    """(principal, override) from the current request."""
    return request.headers.get(PRINCIPAL_HEADER), request.headers.get(IMPERSONATION_HEADER)


def json_body() -> dict:
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(exc: DomainError):
        status = status_for(exc)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.path, exc)
        else:
            logger.warning("%s %s rejected: %s %s", request.method, request.path, exc.code, exc)
        return jsonify(error_body(exc)), status
