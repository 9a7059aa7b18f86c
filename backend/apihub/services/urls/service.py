# apihub/services/urls/service.py
from __future__ import annotations

import logging
import re
import secrets
import string
from collections.abc import Callable
from datetime import timedelta
from urllib.parse import urlparse

from sqlalchemy.exc import IntegrityError

from apihub.models.url import Url
from apihub.services._shared.base import Clock, ServiceContext
from apihub.services._shared.errors import (
    ConflictError,
    GoneError,
    NotFoundError,
    ValidationFailedError,
)
from apihub.services._shared.scoped import Owner, OwnershipScopedService
from apihub.services.urls.dto import ShortenIn, UrlOut
from apihub.uow.sqlalchemy_uow import SQLAlchemyReadOnlyUnitOfWork, SQLAlchemyUnitOfWork

log = logging.getLogger(__name__)

SHORT_CODE_ALPHABET = string.ascii_letters + string.digits
SHORT_CODE_LENGTH = 6
MAX_CODE_ATTEMPTS = 10
MIN_EXPIRES_IN_MS = 60_000  # 1 minute
MAX_EXPIRES_IN_MS = 31_536_000_000  # 365 days
ALIAS_PATTERN = re.compile(r"^[A-Za-z0-9_-]{3,50}$")
ALIAS_TAKEN = "This alias is already taken"


def random_short_code(length: int = SHORT_CODE_LENGTH) -> str:
    return "".join(secrets.choice(SHORT_CODE_ALPHABET) for _ in range(length))


class UrlService(OwnershipScopedService[Url, UrlOut]):
    """
    URL shortener.

    Anonymous callers may shorten links; those links have no owner, are
    always public and can never be mutated or deleted.
    """

    repo_attr = "urls"
    entity_name = "Url"
    allow_anonymous_create = True

    def __init__(
        self,
        *,
        code_factory: Callable[[], str] | None = None,
        ctx: ServiceContext | None = None,
        clock: Clock | None = None,
    ) -> None:
        super().__init__(ctx=ctx, clock=clock)
        self.code_factory = code_factory or random_short_code

    def to_view(self, entity: Url, *, owner: Owner) -> UrlOut:
        return UrlOut(
            id=entity.id,
            short_code=entity.short_code,
            original_url=entity.original_url,
            custom_alias=entity.custom_alias,
            clicks=entity.clicks,
            is_active=entity.is_active,
            is_public=entity.is_public,
            expires_at=entity.expires_at,
            domain=entity.domain,
            last_accessed_at=entity.last_accessed_at,
            owner=owner,
            created_at=entity.created_at,
        )

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    @staticmethod
    def _validate(dto: ShortenIn) -> str | None:
        """Return the link's hostname. :raises ValidationFailedError: On bad input."""
        parsed = urlparse(dto.original_url.strip())
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValidationFailedError("Invalid URL format")
        if dto.custom_alias is not None and not ALIAS_PATTERN.match(dto.custom_alias):
            raise ValidationFailedError(
                "Custom alias can only contain letters, numbers, hyphens, and underscores"
            )
        if dto.expires_in_ms is not None and not (
            MIN_EXPIRES_IN_MS <= dto.expires_in_ms <= MAX_EXPIRES_IN_MS
        ):
            raise ValidationFailedError(
                f"expiresIn must be between {MIN_EXPIRES_IN_MS} and {MAX_EXPIRES_IN_MS} ms"
            )
        return parsed.hostname

    def _free_code(self, uow: SQLAlchemyUnitOfWork) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = self.code_factory()
            if not uow.urls.code_taken(code):
                return code
        raise ConflictError("Url", "Unable to generate unique short code, please try again")

    def _get_by_code(self, uow: SQLAlchemyUnitOfWork | SQLAlchemyReadOnlyUnitOfWork, code: str) -> Url:
        url = uow.urls.get_by_code(code)
        if url is None:
            raise NotFoundError("Url", code)
        return url

    # ------------------------------------------------------------------ #
    # Commands
    # ------------------------------------------------------------------ #

    def shorten(self, dto: ShortenIn) -> UrlOut:
        """
        Create a short link for the caller (or anonymously).

        :raises ValidationFailedError: Bad URL, alias or lifetime.
        :raises ConflictError: Alias already taken.
        """
        domain = self._validate(dto)
        owner_id = self.ctx.actor_id
        expires_at = (
            self.clock() + timedelta(milliseconds=dto.expires_in_ms)
            if dto.expires_in_ms is not None
            else None
        )
        try:
            with self.rw_uow() as uow:
                if dto.custom_alias:
                    if uow.urls.code_taken(dto.custom_alias):
                        raise ConflictError("Url", ALIAS_TAKEN)
                    code = dto.custom_alias
                else:
                    code = self._free_code(uow)
                url = uow.urls.build(
                    {
                        "short_code": code,
                        "original_url": dto.original_url.strip(),
                        "custom_alias": dto.custom_alias or None,
                        "expires_at": expires_at,
                        "domain": domain,
                        # Ownerless links are always public
                        "is_public": True if owner_id is None else dto.is_public,
                    },
                    owner_id=owner_id,
                )
                view = self._view(uow.urls, url)
        except IntegrityError as exc:
            # Lost a race for the same code between the check and the insert
            detail = ALIAS_TAKEN if dto.custom_alias else "Short code collision, please try again"
            raise ConflictError("Url", detail) from exc
        log.info(
            "Short link created",
            extra={"event": "url.created", "resource": "url", "resource_id": view.id},
        )
        return view

    def resolve(self, code: str) -> UrlOut:
        """
        Follow a short code: count the click and return the link.

        :raises NotFoundError: Unknown code.
        :raises PermissionDeniedError: Private link of someone else.
        :raises GoneError: Link deactivated or expired.
        """
        with self.rw_uow() as uow:
            url = self._get_by_code(uow, code)
            self.ensure_readable(uow.urls, url)
            if not url.is_active:
                raise GoneError("This link is no longer active")
            if url.is_expired(self.clock()):
                raise GoneError("This link has expired")
            uow.urls.record_click(url, now=self.clock())
            return self._view(uow.urls, url)

    def delete_by_code(self, code: str) -> None:
        """Owner-only physical delete by short code or alias."""
        actor = self.require_actor()
        with self.rw_uow() as uow:
            url = self._get_by_code(uow, code)
            self.ensure_owner(actor, url.owner_id)
            uow.urls.delete(url)

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def stats(self, code: str) -> UrlOut:
        """Click statistics; private links are visible to their owner only."""
        with self.ro_uow() as uow:
            url = self._get_by_code(uow, code)
            self.ensure_readable(uow.urls, url)
            return self._view(uow.urls, url)

    def list_mine(self, *, limit: int | None = None) -> list[UrlOut]:
        """The caller's active links, newest first."""
        return self.find_mine({"is_active": True}, limit=limit)
