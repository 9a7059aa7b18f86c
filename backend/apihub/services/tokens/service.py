# apihub/services/tokens/service.py
from __future__ import annotations

import logging

from sqlalchemy.exc import SQLAlchemyError

from apihub.core.logger import token_prefix
from apihub.models.token import DEFAULT_TOKEN_DESCRIPTION, Token
from apihub.models.user import User
from apihub.services._shared.base import BaseService, Clock, ServiceContext
from apihub.services._shared.errors import (
    NotFoundError,
    TokenNotActiveError,
    TokenRevokedError,
    UnavailableError,
)
from apihub.services._shared.ports.token_provider import TokenProvider
from apihub.services.auth.dto import UserOut
from apihub.services.tokens.dto import ChainLinkOut, RotationOut, TokenSummaryOut
from apihub.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)

ROTATED_TOKEN_DESCRIPTION = "Rotated Token"


class TokenService(BaseService):
    """
    Token lifecycle: issue, validate, rotate, revoke.

    State machine per token: ``active -> revoked``, terminal. Every transition
    is a conditional update on ``is_active`` so concurrent callers cannot both
    win; in particular exactly one of two racing rotations of the same token
    succeeds and the other gets :class:`TokenNotActiveError`.
    """

    def __init__(
        self,
        *,
        token_provider: TokenProvider,
        prefix_length: int = 20,
        ctx: ServiceContext | None = None,
        clock: Clock | None = None,
    ) -> None:
        """
        :param token_provider: Adapter minting and verifying signed tokens.
        :param prefix_length: Characters of a token shown by listings.
        :param ctx: Optional request-scoped context.
        :param clock: Time source for ``last_used_at`` / ``revoked_at``.
        """
        super().__init__(ctx=ctx, clock=clock)
        self.provider = token_provider
        self.prefix_length = prefix_length

    # ------------------------------------------------------------------ #
    # Issue
    # ------------------------------------------------------------------ #

    def issue(self, email: str, description: str = DEFAULT_TOKEN_DESCRIPTION) -> str:
        """
        Mint and persist an active token for ``email``.

        :raises NotFoundError: If no user has this email.
        """
        with self.rw_uow() as uow:
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)
            return self.issue_for(uow, user, description=description)

    def issue_for(
        self,
        uow: SQLAlchemyUnitOfWork,
        user: User,
        *,
        description: str = DEFAULT_TOKEN_DESCRIPTION,
        rotated_from: str | None = None,
    ) -> str:
        """Mint a token for ``user`` inside the caller's unit of work."""
        token = self.provider.encode(email=user.email)
        uow.tokens.add(
            Token(
                token=token,
                user_id=user.id,
                email=user.email,
                description=description,
                rotated_from=rotated_from,
            )
        )
        log.info(
            "Token issued",
            extra={"event": "token.issued", "user_id": user.id, "token_prefix": token_prefix(token)},
        )
        return token

    # ------------------------------------------------------------------ #
    # Validate
    # ------------------------------------------------------------------ #

    def validate(self, token: str) -> str:
        """
        Verify ``token`` and return its email claim.

        :raises InvalidTokenError: Malformed token or bad signature.
        :raises TokenRevokedError: Well signed but no active ledger record.
        """
        claims = self.provider.decode(token)
        with self.ro_uow() as uow:
            active = uow.tokens.is_active(token)
        if not active:
            raise TokenRevokedError()
        self._touch(token)
        return str(claims["email"])

    def _touch(self, token: str) -> None:
        # Best-effort: a failed timestamp write never fails the validation
        try:
            with self.rw_uow() as uow:
                uow.tokens.touch(token, now=self.clock())
        except (SQLAlchemyError, UnavailableError):
            log.warning(
                "Could not record token use",
                exc_info=True,
                extra={"event": "token.touch_failed", "token_prefix": token_prefix(token)},
            )

    # ------------------------------------------------------------------ #
    # Rotate
    # ------------------------------------------------------------------ #

    def rotate(self, old_token: str, *, revoke_old: bool = True) -> RotationOut:
        """
        Replace ``old_token`` with a new token for the same identity.

        With ``revoke_old`` the old record is claimed by a conditional update
        (``rotated_to`` set, revoked) and the new one carries ``rotated_from``,
        both in one transaction. Without it, both tokens stay active.

        :raises InvalidTokenError: Malformed token or bad signature.
        :raises TokenNotActiveError: Old token unknown, revoked, or lost a race.
        :raises NotFoundError: The identity no longer resolves to a user.
        """
        claims = self.provider.decode(old_token)
        email = str(claims["email"])
        with self.rw_uow() as uow:
            if not uow.tokens.is_active(old_token):
                raise TokenNotActiveError()
            user = uow.users.get_by_email(email)
            if user is None:
                raise NotFoundError("User", email)

            new_token = self.issue_for(
                uow,
                user,
                description=ROTATED_TOKEN_DESCRIPTION,
                rotated_from=old_token if revoke_old else None,
            )
            # Zero rows means a concurrent rotation or revocation won; the
            # new row is rolled back with the unit of work.
            if revoke_old and not uow.tokens.revoke_if_active(
                old_token, now=self.clock(), rotated_to=new_token
            ):
                raise TokenNotActiveError()
            out = RotationOut(token=new_token, user=UserOut.from_model(user), revoked_old=revoke_old)

        log.info(
            "Token rotated",
            extra={
                "event": "token.rotated",
                "user_id": out.user.id,
                "token_prefix": token_prefix(old_token),
            },
        )
        return out

    # ------------------------------------------------------------------ #
    # Revoke
    # ------------------------------------------------------------------ #

    def revoke(self, token: str, *, email: str | None = None) -> bool:
        """
        Revoke ``token``. Idempotent: an already revoked or unknown token is a
        no-op.

        :param email: When given, only a token owned by this email is revoked.
        :returns: ``True`` if this call transitioned the token.
        """
        with self.rw_uow() as uow:
            changed = uow.tokens.revoke_if_active(token, now=self.clock(), email=email)
        if changed:
            log.info(
                "Token revoked",
                extra={"event": "token.revoked", "token_prefix": token_prefix(token)},
            )
        return changed

    def revoke_all(self, email: str) -> int:
        """
        Revoke every active token of ``email``.

        :returns: Number of tokens transitioned; ``0`` on a repeated call.
        """
        with self.rw_uow() as uow:
            count = uow.tokens.revoke_all_for_email(email, now=self.clock())
        log.info("Tokens revoked", extra={"event": "token.revoked_all", "count": count})
        return count

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def list_active(self, email: str) -> list[TokenSummaryOut]:
        """Active tokens of ``email``, newest first, truncated to a prefix."""
        with self.ro_uow() as uow:
            return [
                TokenSummaryOut(
                    token=t.token[: self.prefix_length] + "...",
                    created_at=t.created_at,
                    last_used_at=t.last_used_at,
                    description=t.description,
                    is_active=t.is_active,
                )
                for t in uow.tokens.list_active_for_email(email)
            ]

    def trace_chain(self, token: str) -> list[ChainLinkOut]:
        """
        Walk the rotation chain containing ``token``, oldest first.

        :raises NotFoundError: If ``token`` is not in the ledger.
        """
        with self.ro_uow() as uow:
            start = uow.tokens.get_by_token(token)
            if start is None:
                raise NotFoundError("Token", token_prefix(token) or "")

            head = start
            seen = {head.token}
            while head.rotated_from:
                prev = uow.tokens.get_by_token(head.rotated_from)
                if prev is None or prev.token in seen:
                    break
                seen.add(prev.token)
                head = prev

            chain: list[ChainLinkOut] = []
            node: Token | None = head
            visited: set[str] = set()
            while node is not None and node.token not in visited:
                visited.add(node.token)
                chain.append(
                    ChainLinkOut(
                        token=node.token[: self.prefix_length] + "...",
                        status=node.status,
                        description=node.description,
                        created_at=node.created_at,
                        revoked_at=node.revoked_at,
                    )
                )
                node = uow.tokens.get_by_token(node.rotated_to) if node.rotated_to else None
            return chain
