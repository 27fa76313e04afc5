"""Common Marshmallow schemas shared across resources."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100


class PaginationQuerySchema(Schema):
    """Validate ``page`` / ``page_size`` query parameters."""

    class Meta:
        unknown = EXCLUDE

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    page_size = fields.Integer(
        load_default=DEFAULT_PAGE_SIZE,
        validate=validate.Range(min=1, max=MAX_PAGE_SIZE),
    )


class MessageSchema(Schema):
    """Plain acknowledgement body."""

    message = fields.String(required=True)
