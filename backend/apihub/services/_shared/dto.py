"""DTOs shared by every resource service."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from apihub.repositories.base import Page


@dataclass(frozen=True, slots=True)
class PageMeta:
    """
    Pagination block returned next to a page of views.

    :param page: Current page (1-based).
    :param limit: Page size actually applied after clamping.
    :param total: Rows visible to the caller across all pages.
    :param pages: ``ceil(total / limit)``.
    :param has_prev: A previous page exists.
    :param has_next: A next page exists.
    """

    page: int
    limit: int
    total: int
    pages: int
    has_prev: bool
    has_next: bool

    @classmethod
    def from_page(cls, page: Page[Any]) -> PageMeta:
        return cls(
            page=page.page,
            limit=page.limit,
            total=page.total,
            pages=page.pages,
            has_prev=page.has_prev,
            has_next=page.has_next,
        )
