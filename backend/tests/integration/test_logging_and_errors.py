"""Request correlation, JSON log lines and generic error bodies."""

from __future__ import annotations

import json
import logging
from datetime import timedelta

from filevault.core.logger import JSONFormatter


def test_request_id_is_echoed(client):
    res = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert res.headers["X-Request-ID"] == "req-123"

    res = client.get("/health", headers={"X-Correlation-ID": "corr-9"})
    assert res.headers["X-Request-ID"] == "corr-9"

    res = client.get("/health")
    assert res.headers["X-Request-ID"] not in {"req-123", "corr-9"}


def test_error_body_carries_request_id(client):
    res = client.get("/file/list", headers={"X-Request-ID": "req-err"})

    assert res.get_json()["request_id"] == "req-err"


def test_unknown_route(client):
    res = client.get("/nope")

    assert res.status_code == 404
    assert res.get_json()["error"] == "Route '/nope' not found"


def test_method_not_allowed(client):
    res = client.get("/signup")
    assert res.status_code == 405
    assert res.get_json()["code"] == "method_not_allowed"


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    body = res.get_json()
    assert body["status"] == "ok"
    assert body["db"] == "ok"


def test_json_formatter_includes_extras():
    record = logging.LogRecord("filevault.test", logging.INFO, __file__, 1, "files.uploaded", None, None)
    record.request_id = "rid"
    record.user_id = "a@b.com"
    record.file_id = "f-1"

    line = json.loads(JSONFormatter().format(record))

    assert line["message"] == "files.uploaded"
    assert line["level"] == "INFO"
    assert line["request_id"] == "rid"
    assert line["user_id"] == "a@b.com"
    assert line["file_id"] == "f-1"
    assert "elapsed_ms" not in line


def test_lifecycle_events_never_log_secrets(client, caplog):
    caplog.set_level(logging.INFO, logger="filevault")

    res = client.post("/signup", json={"id": "a@b.com", "password": "secret1"})
    token = res.get_json()["accessToken"]

    messages = [r.getMessage() for r in caplog.records]
    assert "auth.signup" in messages
    rendered = "\n".join(JSONFormatter().format(r) for r in caplog.records)
    assert "secret1" not in rendered
    assert token not in rendered


def test_json_formatter_masks_encoded_tokens(token_provider):
    token = token_provider.create_access_token(
        identity="a@b.com", expires_delta=timedelta(minutes=5), jti="j-1"
    )
    record = logging.LogRecord(
        "filevault.test", logging.WARNING, __file__, 1, "bad header Bearer %s", (token,), None
    )

    line = json.loads(JSONFormatter().format(record))

    assert token not in line["message"]
    assert line["message"] == "bad header Bearer [redacted-token]"
