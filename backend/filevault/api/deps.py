"""Shared API helpers for request parsing and cross-cutting concerns."""

from __future__ import annotations

import functools
import time
from collections.abc import Callable
from typing import Any, TypeVar, cast

from flask import Response, current_app, g, jsonify, request

from filevault.container import EXTENSION_KEY, ServiceContainer
from filevault.services.gate import AuthContext, GateRequest, parse_bearer

F = TypeVar("F", bound=Callable[..., Any])


def get_services() -> ServiceContainer:
    """Return the service container bound to the current application."""

    return cast(ServiceContainer, current_app.extensions[EXTENSION_KEY])


def json_response(payload: Any, *, status: int = 200) -> Response:
    """Return a JSON response enforcing a consistent MIME type."""

    response = jsonify(payload)
    response.status_code = status
    return response


def timing(func: F) -> F:
    """Decorator capturing handler execution time in milliseconds."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        start = time.perf_counter()
        try:
            return func(*args, **kwargs)
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            request_endpoint = getattr(request, "endpoint", None)
            current_app.logger.debug(
                "request.elapsed",
                extra={"endpoint": request_endpoint, "elapsed_ms": round(elapsed_ms, 2)},
            )

    return wrapper  # type: ignore[return-value]


# ------------------------------ Authentication ---------------------------------


def refresh_cookie() -> str | None:
    """Return the refresh token cookie of the current request, if any."""

    return request.cookies.get(current_app.config["REFRESH_COOKIE_NAME"]) or None


def require_session(func: F) -> F:
    """Run the auth gate before the handler.

    The access token comes from ``Authorization: Bearer``, the refresh token
    from the refresh cookie. On success the :class:`AuthContext` is stored on
    ``flask.g.auth``; gate errors propagate to the error handlers.
    """

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any):
        gate_request = GateRequest(
            access_token=parse_bearer(request.headers.get("Authorization")),
            refresh_token=refresh_cookie(),
        )
        g.auth = get_services().gate.check(gate_request)
        return func(*args, **kwargs)

    return wrapper  # type: ignore[return-value]


def current_auth() -> AuthContext:
    """Return the context established by :func:`require_session`."""

    return cast(AuthContext, g.auth)


def set_refresh_cookie(response: Response, token: str) -> Response:
    """Attach the refresh token cookie (HttpOnly, path ``/``)."""

    config = current_app.config
    response.set_cookie(
        config["REFRESH_COOKIE_NAME"],
        token,
        max_age=config["REFRESH_COOKIE_MAX_AGE"],
        secure=bool(config.get("REFRESH_COOKIE_SECURE", False)),
        httponly=True,
        samesite=config.get("REFRESH_COOKIE_SAMESITE", "Strict"),
        path="/",
    )
    return response


def clear_refresh_cookie(response: Response) -> Response:
    config = current_app.config
    response.delete_cookie(
        config["REFRESH_COOKIE_NAME"],
        path="/",
        secure=bool(config.get("REFRESH_COOKIE_SECURE", False)),
        httponly=True,
        samesite=config.get("REFRESH_COOKIE_SAMESITE", "Strict"),
    )
    return response
