"""Unit tests for :mod:`apihub.models.user`."""

import pytest
from sqlalchemy.exc import IntegrityError

from apihub.models.user import User
from tests.factories.user import UserFactory


class TestUserModel:
    def test_password_is_hashed_and_write_only(self):
        user = User(email="hash@example.com", name="Hash")
        user.password = "s3cret!"

        assert user.password_hash != "s3cret!"
        assert user.verify_password("s3cret!")
        assert not user.verify_password("wrong")
        with pytest.raises(AttributeError):
            _ = user.password

    def test_empty_password_rejected(self):
        user = User(email="empty@example.com", name="Empty")
        with pytest.raises(ValueError):
            user.password = ""

    def test_email_is_trimmed_but_case_preserved(self):
        user = User(email="  Mixed.Case@Example.com ", name="Mixed")
        assert user.email == "Mixed.Case@Example.com"

    @pytest.mark.parametrize("email", ["", "no-at-sign", "a@nodot"])
    def test_malformed_email_rejected(self, email):
        with pytest.raises(ValueError):
            User(email=email, name="Bad")

    def test_email_is_unique(self, session):
        UserFactory(email="dup@example.com")
        with pytest.raises(IntegrityError):
            UserFactory(email="dup@example.com")
        session.rollback()
