"""File endpoints, all scoped to the authenticated owner."""

from __future__ import annotations

from flask import Blueprint, request, send_file

from filevault.api.deps import current_auth, get_services, json_response, require_session, timing
from filevault.schemas import FilePageSchema, FileSchema, MessageSchema, PaginationQuerySchema
from filevault.services.files import UploadIn

bp = Blueprint("files", __name__)

file_schema = FileSchema()
file_page_schema = FilePageSchema()
pagination_schema = PaginationQuerySchema()
message_schema = MessageSchema()


def _upload_from_request() -> UploadIn | None:
    """Map the multipart ``file`` field to an :class:`UploadIn` (or ``None``)."""

    storage = request.files.get("file")
    if storage is None or not storage.filename:
        return None
    return UploadIn(
        filename=storage.filename,
        mime_type=storage.mimetype or "application/octet-stream",
        stream=storage.stream,
    )


@bp.post("/upload")
@require_session
@timing
def upload_file():
    """Store a new file for the caller."""

    created = get_services().files.upload(current_auth().user_id, _upload_from_request())
    return json_response(file_schema.dump(created), status=201)


@bp.get("/list")
@require_session
@timing
def list_files():
    """Return the caller's files, newest first."""

    query = pagination_schema.load(request.args)
    page = get_services().files.list(
        current_auth().user_id,
        page=query["page"],
        page_size=query["page_size"],
    )
    return json_response(file_page_schema.dump(page))


@bp.get("/<string:file_id>")
@require_session
@timing
def get_file(file_id: str):
    """Return metadata for one owned file."""

    meta = get_services().files.get(current_auth().user_id, file_id)
    return json_response(file_schema.dump(meta))


@bp.get("/download/<string:file_id>")
@require_session
@timing
def download_file(file_id: str):
    """Stream an owned file as an attachment under its original name."""

    download = get_services().files.download(current_auth().user_id, file_id)
    return send_file(
        download.stream,
        mimetype=download.mime_type,
        as_attachment=True,
        download_name=download.name,
    )


@bp.put("/update/<string:file_id>")
@require_session
@timing
def update_file(file_id: str):
    """Replace an owned file's content and metadata."""

    updated = get_services().files.update(
        current_auth().user_id, file_id, _upload_from_request()
    )
    return json_response(file_schema.dump(updated))


@bp.delete("/delete/<string:file_id>")
@require_session
@timing
def delete_file(file_id: str):
    """Delete an owned file."""

    get_services().files.delete(current_auth().user_id, file_id)
    return json_response(message_schema.dump({"message": "File deleted successfully"}))
