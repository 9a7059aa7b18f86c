"""User repository: credential store lookups."""

from __future__ import annotations

from typing import cast

from sqlalchemy import select

from apihub.models.user import User
from apihub.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Persistence-only repository for :class:`User`.

    Never issues tokens; only DB-level identity management.
    """

    model = User

    # ---------------------------- Whitelists ----------------------------

    def _sortable_fields(self):
        return {"id": User.id, "email": User.email, "created_at": User.created_at}

    def _updatable_fields(self):
        """Profile fields; the password goes through :meth:`set_password`."""
        return {"name"}

    # ---------------------------- Lookup helpers ----------------------------

    def get_by_email(self, email: str) -> User | None:
        """Fetch a user by exact email (case-sensitive, trimmed).

        :param email: Email address as stored.
        :type email: str
        :returns: User instance or ``None`` when not found.
        :rtype: User | None
        """
        stmt = select(User).where(User.email == email.strip())
        return cast(User | None, self.session.execute(stmt).scalars().first())

    def exists_by_email(self, email: str) -> bool:
        stmt = select(User.id).where(User.email == email.strip())
        return self.session.execute(stmt).first() is not None

    def id_for_email(self, email: str) -> int | None:
        """Resolve the primary key for ``email`` without loading the row."""
        stmt = select(User.id).where(User.email == email.strip())
        return cast(int | None, self.session.execute(stmt).scalar_one_or_none())

    # ---------------------------- Password ops ----------------------------

    def set_password(self, user: User, new_password: str) -> None:
        """Replace the password hash (model setter hashes) and flush."""
        user.password = new_password
        self.flush()

    def authenticate(self, email: str, password: str) -> User | None:
        """Return the user when ``password`` matches, else ``None``.

        The same ``None`` covers unknown emails and wrong passwords.
        """
        user = self.get_by_email(email)
        if user is None or not user.verify_password(password):
            return None
        return user
