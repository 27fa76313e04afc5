"""Factory Boy definition for :class:`filevault.models.refresh_token.RefreshToken`."""

from __future__ import annotations

import factory
from filevault.models.refresh_token import RefreshToken
from tests.factories import BaseFactory
from tests.factories.user import UserFactory


class RefreshTokenFactory(BaseFactory):
    """Ledger rows with opaque token strings (not real JWTs)."""

    class Meta:
        model = RefreshToken

    user = factory.SubFactory(UserFactory)
    refresh_token = factory.Sequence(lambda n: f"refresh-token-{n}")
    is_valid = True
