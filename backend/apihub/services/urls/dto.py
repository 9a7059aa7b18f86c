"""DTOs for UrlService."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class ShortenIn:
    """
    Input DTO for shortening a link.

    :param original_url: Absolute ``http(s)`` URL.
    :param custom_alias: Optional caller-chosen code.
    :param expires_in_ms: Optional lifetime in milliseconds.
    :param is_public: Visibility; ignored (forced public) for anonymous callers.
    """

    original_url: str
    custom_alias: str | None = None
    expires_in_ms: int | None = None
    is_public: bool = True


@dataclass(frozen=True, slots=True)
class UrlOut:
    id: int
    short_code: str
    original_url: str
    custom_alias: str | None
    clicks: int
    is_active: bool
    is_public: bool
    expires_at: datetime | None
    domain: str | None
    last_accessed_at: datetime | None
    owner: int | str | None
    created_at: datetime
