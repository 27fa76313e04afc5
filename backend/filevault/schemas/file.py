"""File resource schemas."""

from __future__ import annotations

from marshmallow import Schema, fields


class FileSchema(Schema):
    """Public representation of a stored file."""

    id = fields.String(required=True)
    name = fields.String(required=True)
    extension = fields.String(required=True)
    mime_type = fields.String(required=True, data_key="mimeType")
    size = fields.Integer(required=True)
    user_id = fields.String(required=True, data_key="userId")
    created_at = fields.DateTime(allow_none=True, data_key="createdAt")
    updated_at = fields.DateTime(allow_none=True, data_key="updatedAt")


class FilePageSchema(Schema):
    """One page of files plus paging totals."""

    files = fields.List(fields.Nested(FileSchema), required=True)
    total = fields.Integer(required=True)
    current_page = fields.Integer(required=True, data_key="currentPage")
    total_pages = fields.Integer(required=True, data_key="totalPages")
