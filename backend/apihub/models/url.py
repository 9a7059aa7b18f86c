"""Short URL model."""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import Boolean, DateTime, Integer, String, Text, UniqueConstraint, true
from sqlalchemy.orm import Mapped, mapped_column

from apihub.core.extensions import db

from .base import OwnedResourceMixin, PKMixin, ReprMixin, TimestampMixin


class Url(PKMixin, ReprMixin, TimestampMixin, OwnedResourceMixin, db.Model):
    """
    A shortened link.

    ``owner_id`` is ``None`` for anonymously shortened links, which are always
    public. ``short_code`` is either generated or the caller's custom alias.
    """

    __tablename__ = "urls"
    __public_by_default__ = True

    short_code: Mapped[str] = mapped_column(String(50), nullable=False)
    original_url: Mapped[str] = mapped_column(Text, nullable=False)
    custom_alias: Mapped[str | None] = mapped_column(String(50))
    clicks: Mapped[int] = mapped_column(Integer, nullable=False, default=0, server_default="0")
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True, server_default=true()
    )
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))
    domain: Mapped[str | None] = mapped_column(String(255))
    last_accessed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    __table_args__ = (
        UniqueConstraint("short_code", name="uq_urls_short_code"),
        UniqueConstraint("custom_alias", name="uq_urls_custom_alias"),
    )

    def is_expired(self, now: datetime | None = None) -> bool:
        """Return ``True`` once ``expires_at`` has passed.

        SQLite hands back naive datetimes, which are treated as UTC.
        """
        if self.expires_at is None:
            return False
        expires_at = self.expires_at
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        return expires_at <= (now or datetime.now(UTC))
