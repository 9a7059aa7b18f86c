"""Factory Boy definition for :class:`apihub.models.user.User`."""

from __future__ import annotations

import factory

from apihub.models.user import User
from tests.factories import BaseFactory


class UserFactory(BaseFactory):
    """Build persisted users; the raw password defaults to ``Passw0rd!``."""

    class Meta:
        model = User

    id = None  # let autoincrement handle it
    email = factory.Sequence(lambda n: f"user{n}@example.com")
    name = factory.Sequence(lambda n: f"User {n}")
    password = "Passw0rd!"
