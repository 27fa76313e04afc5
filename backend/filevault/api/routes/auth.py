"""Authentication endpoints: signup, signin, token refresh, info and logout."""

from __future__ import annotations

from flask import Blueprint, request

from filevault.api.deps import (
    clear_refresh_cookie,
    current_auth,
    get_services,
    json_response,
    refresh_cookie,
    require_session,
    set_refresh_cookie,
    timing,
)
from filevault.schemas import (
    MessageSchema,
    SigninSchema,
    SignupSchema,
    TokenResponseSchema,
    UserInfoSchema,
)
from filevault.services._shared.errors import ValidationError
from filevault.services.auth import SigninIn, SignupIn
from filevault.services.tokens import TokenPairOut

bp = Blueprint("auth", __name__)

signup_schema = SignupSchema()
signin_schema = SigninSchema()
token_schema = TokenResponseSchema()
user_info_schema = UserInfoSchema()
message_schema = MessageSchema()


def _token_response(pair: TokenPairOut, *, status: int = 200):
    response = json_response(token_schema.dump(pair), status=status)
    return set_refresh_cookie(response, pair.refresh_token)


@bp.post("/signup")
@timing
def signup():
    """Register a user and open their first session."""

    data = signup_schema.load(request.get_json(silent=True) or {})
    pair = get_services().auth.signup(SignupIn(id=data["id"], password=data["password"]))
    return _token_response(pair, status=201)


@bp.post("/signin")
@timing
def signin():
    """Authenticate credentials and open a new session."""

    data = signin_schema.load(request.get_json(silent=True) or {})
    pair = get_services().auth.signin(SigninIn(id=data["id"], password=data["password"]))
    return _token_response(pair)


@bp.get("/signin/new_token")
@timing
def new_token():
    """Rotate the refresh cookie and return a fresh access token."""

    token = refresh_cookie()
    if not token:
        raise ValidationError("Refresh token is required")
    rotation = get_services().auth.refresh(token)
    return _token_response(rotation.tokens)


@bp.get("/info")
@require_session
@timing
def info():
    """Return the authenticated user's identifier."""

    user = get_services().auth.info(current_auth())
    return json_response(user_info_schema.dump(user))


@bp.get("/logout")
@require_session
@timing
def logout():
    """Invalidate the current session's refresh token and clear the cookie."""

    get_services().auth.logout(current_auth())
    response = json_response(message_schema.dump({"message": "Logged out successfully"}))
    return clear_refresh_cookie(response)
