"""File endpoints exercised through the Flask test client."""

from __future__ import annotations

import io

import pytest

PDF = b"%PDF-1.4\n" + b"0" * 491  # 500 bytes


@pytest.fixture()
def login(app):
    """Return ``(client, headers)`` for a freshly signed-up user."""

    def _login(user_id: str = "a@b.com"):
        c = app.test_client()
        res = c.post("/signup", json={"id": user_id, "password": "secret1"})
        assert res.status_code == 201
        return c, {"Authorization": f"Bearer {res.get_json()['accessToken']}"}

    return _login


def _upload(client, headers, name="report.pdf", data=PDF, mime="application/pdf"):
    return client.post(
        "/file/upload",
        headers=headers,
        data={"file": (io.BytesIO(data), name, mime)},
        content_type="multipart/form-data",
    )


def test_upload_scenario(session, login):
    client, headers = login()

    res = _upload(client, headers)

    assert res.status_code == 201
    body = res.get_json()
    assert set(body) == {
        "id",
        "name",
        "extension",
        "mimeType",
        "size",
        "userId",
        "createdAt",
        "updatedAt",
    }
    assert body["name"] == "report.pdf"
    assert body["extension"] == ".pdf"
    assert body["mimeType"] == "application/pdf"
    assert body["size"] == 500
    assert body["userId"] == "a@b.com"

    res = client.get(f"/file/{body['id']}", headers=headers)
    assert res.status_code == 200
    assert res.get_json()["id"] == body["id"]


def test_upload_without_file(session, login):
    client, headers = login()

    res = client.post("/file/upload", headers=headers, data={}, content_type="multipart/form-data")

    assert res.status_code == 400
    assert res.get_json()["error"] == "No file uploaded"


def test_download_uses_original_name(session, login):
    client, headers = login()
    file_id = _upload(client, headers).get_json()["id"]

    res = client.get(f"/file/download/{file_id}", headers=headers)

    assert res.status_code == 200
    assert res.data == PDF
    assert res.mimetype == "application/pdf"
    assert "attachment" in res.headers["Content-Disposition"]
    assert "report.pdf" in res.headers["Content-Disposition"]
    res.close()


def test_list_pagination(session, login):
    client, headers = login()
    for i in range(3):
        _upload(client, headers, name=f"f{i}.txt", data=b"x", mime="text/plain")

    res = client.get("/file/list?page=1&page_size=2", headers=headers)

    assert res.status_code == 200
    body = res.get_json()
    assert body["total"] == 3
    assert body["currentPage"] == 1
    assert body["totalPages"] == 2
    assert len(body["files"]) == 2

    res = client.get("/file/list", headers=headers)
    assert res.get_json()["totalPages"] == 1


@pytest.mark.parametrize("query", ["page=0", "page_size=0", "page_size=101", "page=abc"])
def test_list_rejects_bad_paging(session, login, query):
    client, headers = login()

    res = client.get(f"/file/list?{query}", headers=headers)

    assert res.status_code == 400


def test_update_replaces_content(session, login):
    client, headers = login()
    file_id = _upload(client, headers).get_json()["id"]

    res = client.put(
        f"/file/update/{file_id}",
        headers=headers,
        data={"file": (io.BytesIO(b"hello"), "notes.txt", "text/plain")},
        content_type="multipart/form-data",
    )

    assert res.status_code == 200
    body = res.get_json()
    assert (body["id"], body["name"], body["extension"], body["size"]) == (
        file_id,
        "notes.txt",
        ".txt",
        5,
    )
    download = client.get(f"/file/download/{file_id}", headers=headers)
    assert download.data == b"hello"
    download.close()


def test_delete(session, login):
    client, headers = login()
    file_id = _upload(client, headers).get_json()["id"]

    res = client.delete(f"/file/delete/{file_id}", headers=headers)

    assert res.status_code == 200
    assert res.get_json() == {"message": "File deleted successfully"}
    assert client.get(f"/file/{file_id}", headers=headers).status_code == 404


def test_cross_user_access_is_404(session, login):
    owner, owner_headers = login("owner@example.com")
    file_id = _upload(owner, owner_headers).get_json()["id"]
    stranger, stranger_headers = login("stranger@example.com")

    for method, path in [
        ("get", f"/file/{file_id}"),
        ("get", f"/file/download/{file_id}"),
        ("delete", f"/file/delete/{file_id}"),
    ]:
        res = getattr(stranger, method)(path, headers=stranger_headers)
        assert res.status_code == 404
        assert res.get_json()["error"] == "File not found"

    res = stranger.put(
        f"/file/update/{file_id}",
        headers=stranger_headers,
        data={"file": (io.BytesIO(b"x"), "x.txt")},
        content_type="multipart/form-data",
    )
    assert res.status_code == 404

    listing = stranger.get("/file/list", headers=stranger_headers).get_json()
    assert listing["total"] == 0

    assert owner.get(f"/file/{file_id}", headers=owner_headers).status_code == 200


def test_oversized_upload_is_413(app, session, login, monkeypatch):
    client, headers = login()
    monkeypatch.setitem(app.config, "MAX_CONTENT_LENGTH", 100)

    res = _upload(client, headers)

    assert res.status_code == 413
    assert res.get_json()["code"] == "payload_too_large"
