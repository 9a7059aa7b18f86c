# apihub/services/auth/service.py
from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from apihub.models.user import User
from apihub.services._shared.base import BaseService, ServiceContext
from apihub.services._shared.errors import (
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ValidationFailedError,
    violates,
)
from apihub.services.auth.dto import (
    CredentialPolicy,
    IssuedTokenOut,
    LoginIn,
    ProfileUpdateIn,
    SignupIn,
    UserOut,
)
from apihub.services.tokens.service import TokenService

log = logging.getLogger(__name__)

SIGNUP_TOKEN_DESCRIPTION = "Signup Token"
LOGIN_TOKEN_DESCRIPTION = "Login Token"
EMAIL_TAKEN = "Email already in use"


class AuthService(BaseService):
    """
    Account lifecycle: signup, login, profile.

    Token minting is delegated to :class:`TokenService` and happens in the
    same unit of work as the account write, so a signup never leaves a user
    without its first token (or a token without its user).
    """

    def __init__(
        self,
        *,
        token_service: TokenService,
        policy: CredentialPolicy | None = None,
        ctx: ServiceContext | None = None,
    ) -> None:
        super().__init__(ctx=ctx)
        self.token_service = token_service
        self.policy = policy or CredentialPolicy()

    # ------------------------------------------------------------------ #
    # Policy
    # ------------------------------------------------------------------ #

    def _check_password(self, password: str) -> None:
        if len(password) < self.policy.password_min_length:
            raise ValidationFailedError(
                errors={
                    "password": [
                        f"Password must be at least {self.policy.password_min_length} characters"
                    ]
                }
            )

    def _check_name(self, name: str) -> None:
        if len(name.strip()) < self.policy.name_min_length:
            raise ValidationFailedError(
                errors={"name": [f"Name must be at least {self.policy.name_min_length} characters"]}
            )

    # ------------------------------------------------------------------ #
    # Signup / login
    # ------------------------------------------------------------------ #

    def signup(self, dto: SignupIn) -> IssuedTokenOut:
        """
        Create an account and issue its first token.

        :raises ValidationFailedError: Password or name below policy.
        :raises ConflictError: Email already registered.
        """
        self._check_password(dto.password)
        self._check_name(dto.name)
        try:
            with self.rw_uow() as uow:
                if uow.users.exists_by_email(dto.email):
                    raise ConflictError("User", EMAIL_TAKEN)
                user = User(email=dto.email, name=dto.name)
                user.password = dto.password
                uow.users.add(user)
                token = self.token_service.issue_for(
                    uow, user, description=SIGNUP_TOKEN_DESCRIPTION
                )
                out = IssuedTokenOut(token=token, user=UserOut.from_model(user))
        except IntegrityError as exc:
            # Lost a race against a concurrent signup for the same email
            if violates(exc, "uq_users_email") or violates(exc, "users.email"):
                raise ConflictError("User", EMAIL_TAKEN) from exc
            raise
        log.info("User signed up", extra={"event": "auth.signup", "user_id": out.user.id})
        return out

    def login(self, dto: LoginIn) -> IssuedTokenOut:
        """
        Verify credentials and issue a new token.

        :raises InvalidCredentialsError: Unknown email or wrong password (same
            error for both).
        """
        with self.rw_uow() as uow:
            user = uow.users.authenticate(dto.email, dto.password)
            if user is None:
                raise InvalidCredentialsError()
            token = self.token_service.issue_for(uow, user, description=LOGIN_TOKEN_DESCRIPTION)
            out = IssuedTokenOut(token=token, user=UserOut.from_model(user))
        log.info("User logged in", extra={"event": "auth.login", "user_id": out.user.id})
        return out

    # ------------------------------------------------------------------ #
    # Profile
    # ------------------------------------------------------------------ #

    def get_user(self, email: str) -> UserOut:
        """:raises NotFoundError: If no user has this email."""
        with self.ro_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)
            return UserOut.from_model(user)

    def resolve_user_id(self, email: str) -> int | None:
        with self.ro_uow() as uow:
            return uow.users.id_for_email(email)

    def update_profile(self, email: str, dto: ProfileUpdateIn) -> UserOut:
        """
        Change name and/or password.

        :raises ValidationFailedError: Neither field given, or below policy.
        :raises NotFoundError: If no user has this email.
        """
        if dto.name is None and dto.password is None:
            raise ValidationFailedError("Nothing to update")
        if dto.name is not None:
            self._check_name(dto.name)
        if dto.password is not None:
            self._check_password(dto.password)

        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)
            if dto.name is not None:
                uow.users.assign_updates(user, {"name": dto.name})
            if dto.password is not None:
                uow.users.set_password(user, dto.password)
            out = UserOut.from_model(user)
        log.info("Profile updated", extra={"event": "auth.profile_updated", "user_id": out.id})
        return out
