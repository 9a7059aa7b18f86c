"""Short URL repository."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import select, update

from apihub.models.url import Url
from apihub.repositories.owned import OwnedRepository


class UrlRepository(OwnedRepository[Url]):
    model = Url
    searchable_fields = ("original_url", "short_code")
    allowed_updates = frozenset({"original_url", "is_public", "is_active", "expires_at"})

    def get_by_code(self, code: str) -> Url | None:
        """Look up by generated short code or custom alias."""
        stmt = select(Url).where((Url.short_code == code) | (Url.custom_alias == code))
        return cast(Url | None, self.session.execute(stmt).scalars().first())

    def code_taken(self, code: str) -> bool:
        stmt = select(Url.id).where((Url.short_code == code) | (Url.custom_alias == code))
        return self.session.execute(stmt).first() is not None

    def record_click(self, url: Url, *, now: datetime) -> None:
        """Atomically increment ``clicks`` and refresh ``url``."""
        self.session.execute(
            update(Url)
            .where(Url.id == url.id)
            .values(clicks=Url.clicks + 1, last_accessed_at=now, updated_at=Url.updated_at)
            .execution_options(synchronize_session=False)
        )
        self.session.refresh(url)
