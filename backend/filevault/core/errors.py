"""Centralized JSON error handling for the API.

Every failure leaves the service as ``{"error": ..., "code": ..., "status": ...,
"request_id": ...}`` so clients only ever parse one error shape.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from filevault.core.logger import ensure_request_id
from filevault.services._shared import errors as svc

log = logging.getLogger(__name__)


def _http_status_to_code(status_code: int) -> str:
    """Map common HTTP status codes to canonical, stable error codes."""
    mapping = {
        400: "bad_request",
        401: "unauthorized",
        403: "forbidden",
        404: "not_found",
        405: "method_not_allowed",
        409: "conflict",
        413: "payload_too_large",
        415: "unsupported_media_type",
        422: "unprocessable_entity",
        500: "internal_server_error",
        503: "service_unavailable",
    }
    return mapping.get(status_code, "error")


def _error_body(
    *,
    status: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Build the JSON error payload.

    :param status: HTTP status code.
    :param code: Stable machine-consumable error code.
    :param message: Human-readable error summary (safe for clients).
    :param details: Optional safe, structured details.
    :returns: Error dictionary.
    :rtype: dict
    """
    body: dict[str, Any] = {
        "error": message,
        "code": code,
        "status": int(status),
        "request_id": ensure_request_id(),
    }
    if details:
        body["details"] = details
    return body


def _error_response(body: dict[str, Any]) -> tuple[Response, int]:
    return jsonify(body), int(body["status"])


class APIError(Exception):
    """
    Represent a JSON-serializable API error raised from the HTTP layer.

    Parameters
    ----------
    message : str
        Human-readable description presented to clients.
    status_code : int, optional
        HTTP status code to return. Defaults to ``400``.
    code : str, optional
        Machine-readable identifier. Defaults to ``"bad_request"``.
    details : dict[str, Any] | None, optional
        Optional structured payload included in the response body.
    """

    def __init__(
        self,
        message: str,
        status_code: int = 400,
        code: str = "bad_request",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = int(status_code)
        self.code = code
        self.details = details or {}

    def to_body(self) -> dict[str, Any]:
        return _error_body(
            status=self.status_code,
            code=self.code,
            message=self.message,
            details=self.details or None,
        )


def translate_service_error(exc: svc.ServiceError) -> APIError:
    """
    Map a framework-agnostic service error to its HTTP representation.

    :param exc: Error raised within the service layer.
    :returns: API error carrying status and code.
    :rtype: APIError
    """
    message = str(exc)
    # Order matters: subclasses before their bases.
    if isinstance(exc, svc.InvalidAccessToken):
        return APIError(message, HTTPStatus.FORBIDDEN, "forbidden")
    if isinstance(exc, svc.AuthenticationError):
        return APIError(message, HTTPStatus.UNAUTHORIZED, "unauthorized")
    if isinstance(exc, svc.NotFoundError):
        return APIError(message, HTTPStatus.NOT_FOUND, "not_found")
    if isinstance(exc, svc.ConflictError):
        # Duplicate signup is reported as a plain 400.
        return APIError(message, HTTPStatus.BAD_REQUEST, "conflict")
    if isinstance(exc, svc.ValidationError):
        return APIError(message, HTTPStatus.BAD_REQUEST, "bad_request")
    return APIError(
        "Unexpected error", HTTPStatus.INTERNAL_SERVER_ERROR, "internal_server_error"
    )


def init_app(app: Flask) -> None:
    """
    Attach JSON error handlers to the Flask app.

    Notes
    -----
    - Ensures a correlation ``request_id`` is present on every error.
    - Emits 5xx with ``exc_info`` for traceability; 4xx as warnings.
    """

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        body = err.to_body()
        level = log.error if err.status_code >= 500 else log.warning
        level(
            "APIError: code=%s status=%s msg=%s",
            err.code,
            err.status_code,
            err.message,
        )
        return _error_response(body)

    @app.errorhandler(svc.ServiceError)
    def handle_service_error(err: svc.ServiceError):
        api_err = translate_service_error(err)
        body = api_err.to_body()
        if api_err.status_code >= 500:
            log.error("ServiceError: %s", type(err).__name__, exc_info=err)
        else:
            log.warning(
                "ServiceError: type=%s status=%s msg=%s",
                type(err).__name__,
                api_err.status_code,
                api_err.message,
            )
        return _error_response(body)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = int(err.code or HTTPStatus.INTERNAL_SERVER_ERROR)
        error_code = _http_status_to_code(status)
        # Werkzeug descriptions can be HTML-ish; normalize for clients
        message = (err.description or error_code.replace("_", " ").capitalize()).strip()
        if status == HTTPStatus.NOT_FOUND:
            message = f"Route '{request.path}' not found"
        level = log.error if status >= 500 else log.warning
        level("HTTPException: code=%s status=%s detail=%s", error_code, status, message)
        return _error_response(_error_body(status=status, code=error_code, message=message))

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        body = _error_body(
            status=HTTPStatus.BAD_REQUEST,
            code="validation_error",
            message="Validation failed",
            details={"errors": err.messages},
        )
        fields = sorted(err.messages) if isinstance(err.messages, dict) else None
        log.warning("ValidationError: fields=%s", fields)
        return _error_response(body)

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Do not leak raw DB error to clients
        log.error("IntegrityError", exc_info=err)
        return _error_response(
            _error_body(status=HTTPStatus.CONFLICT, code="conflict", message="Resource conflict")
        )

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        log.error("OperationalError", exc_info=err)
        return _error_response(
            _error_body(
                status=HTTPStatus.SERVICE_UNAVAILABLE,
                code="service_unavailable",
                message="Service temporarily unavailable",
            )
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        # Unexpected server-side error; never leak internal details
        log.error("Unhandled exception", exc_info=err)
        return _error_response(
            _error_body(
                status=HTTPStatus.INTERNAL_SERVER_ERROR,
                code="internal_server_error",
                message="Unexpected error",
            )
        )
