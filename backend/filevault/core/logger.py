"""Structured JSON logging with per-request correlation ids.

Every line written to stdout is one JSON object carrying ``time``, ``level``,
``name``, ``message`` and ``request_id`` plus whichever of
:data:`EXTRA_FIELDS` the caller passed through ``extra=``. Encoded JWTs are
masked before a line is rendered, so a token that slips into a message or an
exception text never reaches the log sink.
"""

from __future__ import annotations

import json
import logging
import re
import sys
from datetime import datetime, timezone
from typing import Any, Final
from uuid import uuid4

from flask import Flask, g, has_request_context, request

REQUEST_ID_HEADER: Final = "X-Request-ID"
# Checked in order; the first non-empty value wins.
CORRELATION_HEADERS: Final = ("X-Request-ID", "X-Correlation-ID")

# Attributes passed through ``extra=`` that make it into the JSON line.
EXTRA_FIELDS: Final = ("endpoint", "elapsed_ms", "user_id", "file_id", "count")

# header.payload.signature, each part base64url; JOSE headers start with "eyJ".
JWT_RE: Final = re.compile(r"eyJ[\w-]+\.[\w-]+\.[\w-]+")
REDACTED: Final = "[redacted-token]"


def redact(text: str) -> str:
    """Mask anything shaped like an encoded JWT."""
    return JWT_RE.sub(REDACTED, text)


class JSONFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, Any] = {
            "time": datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": redact(record.getMessage()),
            "request_id": getattr(record, "request_id", None),
        }
        for key in EXTRA_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = redact(self.formatException(record.exc_info))
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Attach the active ``request_id`` to each record (``None`` outside requests)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = current_request_id()
        return True


def current_request_id() -> str | None:
    return ensure_request_id() if has_request_context() else None


def ensure_request_id() -> str:
    """Return the id correlating the current request, creating it on first use.

    The id comes from the first correlation header present, or a new UUID4,
    and is cached on ``flask.g`` until the request ends. Outside a request a
    throwaway UUID is returned.
    """
    if not has_request_context():
        return str(uuid4())
    cached = g.get("request_id")
    if cached:
        return cached
    incoming = next(
        (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)),
        None,
    )
    g.request_id = incoming or str(uuid4())
    return g.request_id


def configure_logging(level: str | int = "INFO") -> None:
    """Route the root logger to stdout as JSON lines at ``level``."""
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        level = resolved if isinstance(resolved, int) else logging.INFO
    root.setLevel(level)


def init_app(app: Flask) -> None:
    """Reset the request id per request and echo it on every response."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        # A test client may reuse one app context across requests.
        g.pop("request_id", None)
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response):
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = [
    "JSONFormatter",
    "RequestIdFilter",
    "configure_logging",
    "current_request_id",
    "ensure_request_id",
    "init_app",
    "redact",
]
