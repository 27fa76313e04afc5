"""Unit tests for TokenService: issue, rotate, invalidate, verify."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from filevault.infra.jwt import PyJWTTokenProvider
from filevault.models import RefreshToken
from filevault.services._shared.errors import (
    ExpiredAccessToken,
    InvalidAccessToken,
    InvalidRefreshToken,
)
from filevault.services.tokens import TokenConfig, TokenPairOut, TokenService
from tests.factories.user import UserFactory


@pytest.fixture()
def user(session):
    u = UserFactory(id="a@b.com")
    session.commit()
    return u


def _ledger(session, token: str) -> RefreshToken:
    return session.query(RefreshToken).filter_by(refresh_token=token).one()


class TestIssue:
    def test_issue_returns_pair_and_records_refresh(self, token_service, session, user):
        pair = token_service.issue(user.id)

        assert isinstance(pair, TokenPairOut)
        assert pair.access_token != pair.refresh_token
        row = _ledger(session, pair.refresh_token)
        assert row.user_id == user.id
        assert row.is_valid is True

    def test_access_token_verifies_to_user(self, token_service, user):
        pair = token_service.issue(user.id)
        assert token_service.verify_access(pair.access_token) == user.id

    def test_each_issue_is_a_distinct_session(self, token_service, user):
        first = token_service.issue(user.id)
        second = token_service.issue(user.id)
        assert first.refresh_token != second.refresh_token


class TestRotate:
    def test_rotation_consumes_old_and_records_new(self, token_service, session, user):
        pair = token_service.issue(user.id)

        rotation = token_service.rotate(pair.refresh_token)

        assert rotation.user_id == user.id
        assert rotation.tokens.refresh_token != pair.refresh_token
        assert _ledger(session, pair.refresh_token).is_valid is False
        assert _ledger(session, rotation.tokens.refresh_token).is_valid is True

    def test_replay_of_rotated_token_is_rejected(self, token_service, user):
        pair = token_service.issue(user.id)
        token_service.rotate(pair.refresh_token)

        with pytest.raises(InvalidRefreshToken, match="Invalid refresh token"):
            token_service.rotate(pair.refresh_token)

    def test_rotation_works_with_expired_access_token(self, session, session_factory, user):
        """Identity comes from the refresh token, not the access token."""
        past = PyJWTTokenProvider(
            access_secret="test-access-secret",
            refresh_secret="test-refresh-secret",
            clock=lambda: datetime.now(UTC) - timedelta(hours=1),
        )
        service = TokenService(token_provider=past, session_factory=session_factory)
        pair = service.issue(user.id)

        with pytest.raises(ExpiredAccessToken):
            service.verify_access(pair.access_token)
        assert service.rotate(pair.refresh_token).user_id == user.id

    def test_unknown_token_is_rejected(self, token_service, user):
        with pytest.raises(InvalidRefreshToken):
            token_service.rotate("never-issued")

    def test_ledger_row_with_bad_signature_is_rejected(self, token_service, session, user):
        """A recorded token must still verify against the refresh secret."""
        forged = PyJWTTokenProvider(access_secret="x", refresh_secret="wrong").create_refresh_token(
            identity=user.id, expires_delta=None, jti="forged"
        )
        session.add(RefreshToken(user_id=user.id, refresh_token=forged))
        session.commit()

        with pytest.raises(InvalidRefreshToken):
            token_service.rotate(forged)
        # The row stays untouched; only a successful rotation consumes it.
        assert _ledger(session, forged).is_valid is True

    def test_identity_must_match_ledger_owner(self, token_service, token_provider, session, user):
        other = UserFactory(id="other@b.com")
        token = token_provider.create_refresh_token(identity=user.id, expires_delta=None, jti="x1")
        session.add(RefreshToken(user_id=other.id, refresh_token=token))
        session.commit()

        with pytest.raises(InvalidRefreshToken):
            token_service.rotate(token)

    def test_expiring_refresh_tokens_are_enforced(self, session, session_factory, user):
        past = PyJWTTokenProvider(
            access_secret="test-access-secret",
            refresh_secret="test-refresh-secret",
            clock=lambda: datetime.now(UTC) - timedelta(days=2),
        )
        service = TokenService(
            token_provider=past,
            session_factory=session_factory,
            token_cfg=TokenConfig(refresh_expires=timedelta(days=1)),
        )
        pair = service.issue(user.id)

        with pytest.raises(InvalidRefreshToken):
            service.rotate(pair.refresh_token)


class TestInvalidateAndSessions:
    def test_invalidate_kills_only_that_session(self, token_service, user):
        a = token_service.issue(user.id)
        b = token_service.issue(user.id)

        assert token_service.invalidate(a.refresh_token) == 1

        assert token_service.is_session_active(user.id, a.refresh_token) is False
        assert token_service.is_session_active(user.id, b.refresh_token) is True

    def test_invalidate_twice_is_harmless(self, token_service, user):
        pair = token_service.issue(user.id)
        token_service.invalidate(pair.refresh_token)
        assert token_service.invalidate(pair.refresh_token) == 0

    def test_invalidated_token_cannot_rotate(self, token_service, user):
        pair = token_service.issue(user.id)
        token_service.invalidate(pair.refresh_token)

        with pytest.raises(InvalidRefreshToken):
            token_service.rotate(pair.refresh_token)


class TestVerifyAccess:
    def test_refresh_token_is_not_an_access_token(self, token_service, user):
        pair = token_service.issue(user.id)
        with pytest.raises(InvalidAccessToken, match="Invalid token"):
            token_service.verify_access(pair.refresh_token)

    def test_garbage_is_invalid_not_expired(self, token_service):
        with pytest.raises(InvalidAccessToken):
            token_service.verify_access("garbage")

    def test_expired_is_distinct_from_invalid(self, session_factory):
        past = PyJWTTokenProvider(
            access_secret="test-access-secret",
            refresh_secret="test-refresh-secret",
            clock=lambda: datetime.now(UTC) - timedelta(minutes=11),
        )
        token = past.create_access_token(
            identity="a@b.com", expires_delta=timedelta(minutes=10), jti="j"
        )
        service = TokenService(token_provider=past, session_factory=session_factory)

        with pytest.raises(ExpiredAccessToken, match="Token expired") as excinfo:
            service.verify_access(token)
        assert not isinstance(excinfo.value, InvalidAccessToken)
