"""UrlService: shortening, resolution, expiry and ownership rules."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from apihub.services._shared.base import ServiceContext
from apihub.services._shared.errors import (
    AuthenticationRequiredError,
    ConflictError,
    GoneError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from apihub.services.urls.dto import ShortenIn
from apihub.services.urls.service import ALIAS_TAKEN, UrlService, random_short_code
from tests.factories.url import UrlFactory
from tests.factories.user import UserFactory

NOW = datetime(2026, 8, 1, 12, 0, tzinfo=UTC)


def as_user(user=None, *, clock=None, code_factory=None) -> UrlService:
    return UrlService(
        ctx=ServiceContext(actor_id=user.id if user else None),
        clock=clock or (lambda: NOW),
        code_factory=code_factory,
    )


@pytest.fixture()
def alice():
    return UserFactory()


@pytest.fixture()
def bob():
    return UserFactory()


class TestShorten:
    def test_random_code_shape(self):
        code = random_short_code()
        assert len(code) == 6 and code.isalnum()

    def test_anonymous_links_are_public_and_ownerless(self):
        out = as_user().shorten(ShortenIn("https://example.com/a", is_public=False))

        assert out.is_public is True
        assert out.owner is None
        assert out.domain == "example.com"
        assert out.clicks == 0

    def test_owner_can_make_private_links(self, alice):
        out = as_user(alice).shorten(ShortenIn("https://example.com/b", is_public=False))
        assert out.is_public is False
        assert out.owner == alice.id

    def test_custom_alias_collision(self, alice, bob):
        as_user(alice).shorten(ShortenIn("https://example.com", custom_alias="my-link"))
        with pytest.raises(ConflictError, match=ALIAS_TAKEN):
            as_user(bob).shorten(ShortenIn("https://example.org", custom_alias="my-link"))

    def test_alias_cannot_shadow_generated_code(self):
        UrlFactory(short_code="taken1")
        with pytest.raises(ConflictError):
            as_user().shorten(ShortenIn("https://example.com", custom_alias="taken1"))

    def test_generated_code_retries_on_collision(self):
        UrlFactory(short_code="AAAAAA")
        codes = iter(["AAAAAA", "BBBBBB"])
        out = as_user(code_factory=lambda: next(codes)).shorten(ShortenIn("https://example.com"))
        assert out.short_code == "BBBBBB"

    def test_gives_up_after_repeated_collisions(self):
        UrlFactory(short_code="SAME00")
        with pytest.raises(ConflictError):
            as_user(code_factory=lambda: "SAME00").shorten(ShortenIn("https://example.com"))

    @pytest.mark.parametrize(
        "dto",
        [
            ShortenIn("ftp://example.com"),
            ShortenIn("not a url"),
            ShortenIn("https://example.com", custom_alias="bad alias!"),
            ShortenIn("https://example.com", expires_in_ms=1_000),
            ShortenIn("https://example.com", expires_in_ms=31_536_000_001),
        ],
    )
    def test_validation(self, dto):
        with pytest.raises(ValidationFailedError):
            as_user().shorten(dto)

    def test_expiry_is_relative_to_clock(self):
        out = as_user().shorten(ShortenIn("https://example.com", expires_in_ms=60_000))
        assert out.expires_at == NOW + timedelta(minutes=1)


class TestResolve:
    def test_resolve_counts_clicks(self):
        url = UrlFactory(short_code="click1")
        service = as_user()

        service.resolve("click1")
        out = service.resolve("click1")

        assert out.clicks == 2
        assert out.last_accessed_at is not None
        assert out.original_url == url.original_url

    def test_resolve_by_alias(self):
        UrlFactory(short_code="alias1", custom_alias="alias1")
        assert as_user().resolve("alias1").short_code == "alias1"

    def test_unknown_code(self):
        with pytest.raises(NotFoundError):
            as_user().resolve("nothing")

    def test_inactive_link_is_gone(self):
        UrlFactory(short_code="off001", is_active=False)
        with pytest.raises(GoneError):
            as_user().resolve("off001")

    def test_expired_link_is_gone(self):
        UrlFactory(short_code="old001", expires_at=NOW - timedelta(seconds=1))
        with pytest.raises(GoneError):
            as_user().resolve("old001")

    def test_private_link_owner_only(self, alice, bob):
        UrlFactory(owner=alice, short_code="priv01", is_public=False)
        with pytest.raises(PermissionDeniedError):
            as_user(bob).resolve("priv01")
        with pytest.raises(PermissionDeniedError):
            as_user(bob).stats("priv01")
        assert as_user(alice).resolve("priv01").clicks == 1

    def test_stats_does_not_count(self):
        UrlFactory(short_code="stat01")
        assert as_user().stats("stat01").clicks == 0
        assert as_user().stats("stat01").clicks == 0


class TestOwnership:
    def test_delete_owner_only(self, alice, bob):
        UrlFactory(owner=alice, short_code="del001")
        with pytest.raises(PermissionDeniedError):
            as_user(bob).delete_by_code("del001")
        with pytest.raises(AuthenticationRequiredError):
            as_user().delete_by_code("del001")

        as_user(alice).delete_by_code("del001")
        with pytest.raises(NotFoundError):
            as_user(alice).stats("del001")

    def test_anonymous_links_cannot_be_deleted(self, alice):
        UrlFactory(anonymous=True, short_code="anon01")
        with pytest.raises(PermissionDeniedError):
            as_user(alice).delete_by_code("anon01")

    def test_list_mine_only_active(self, alice, bob):
        UrlFactory(owner=alice, short_code="mine01")
        UrlFactory(owner=alice, short_code="mine02", is_active=False)
        UrlFactory(owner=bob, short_code="theirs")

        assert [u.short_code for u in as_user(alice).list_mine()] == ["mine01"]
