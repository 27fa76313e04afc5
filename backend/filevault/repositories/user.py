"""User repository for credential lookups."""

from __future__ import annotations

from sqlalchemy import select

from filevault.models.user import User
from filevault.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    It never mints tokens; it only stores and checks credentials.
    """

    model = User

    def exists_by_id(self, user_id: str) -> bool:
        stmt = select(User.id).where(User.id == user_id)
        return self.session.execute(stmt).first() is not None

    def create(self, *, user_id: str, password: str) -> User:
        """Create a user with a hashed password and flush it.

        :param user_id: Normalized identifier (email or phone).
        :param password: Raw password; the model hashes it.
        :returns: The persisted user.
        :raises sqlalchemy.exc.IntegrityError: If the id is already taken.
        """
        user = User(id=user_id)
        user.password = password
        return self.add(user)

    def authenticate(self, user_id: str, password: str) -> User | None:
        """Return the user when ``password`` matches, otherwise ``None``."""
        user = self.get(user_id)
        if user is None or not user.verify_password(password):
            return None
        return user
