"""Authentication-related Marshmallow schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate


class CredentialsSchema(Schema):
    """``{id, password}`` body shared by signup and signin.

    Identifier format and password length are business rules checked by
    :class:`~filevault.services.auth.AuthService`; the schema only enforces
    presence and type.
    """

    class Meta:
        unknown = EXCLUDE

    id = fields.String(required=True, validate=validate.Length(min=1, max=255))
    password = fields.String(required=True, validate=validate.Length(max=128))


class SignupSchema(CredentialsSchema):
    """Input payload for account registration."""


class SigninSchema(CredentialsSchema):
    """Input payload for authenticating a user."""


class TokenResponseSchema(Schema):
    """Response payload containing an access token."""

    access_token = fields.String(required=True, data_key="accessToken")


class UserInfoSchema(Schema):
    """Identity of the authenticated user."""

    id = fields.String(required=True)
