"""NoteService: private-by-default notes, gists and view counting."""

from __future__ import annotations

from datetime import UTC, datetime

import pytest

from apihub.services._shared.base import ServiceContext
from apihub.services._shared.errors import (
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from apihub.services.notes.service import NoteService
from tests.factories.note import NoteFactory
from tests.factories.user import UserFactory

NOW = datetime(2026, 7, 1, 8, 0, tzinfo=UTC)


def as_user(user=None) -> NoteService:
    return NoteService(ctx=ServiceContext(actor_id=user.id if user else None), clock=lambda: NOW)


@pytest.fixture()
def alice():
    return UserFactory()


@pytest.fixture()
def bob():
    return UserFactory()


def test_notes_are_private_by_default(alice, bob):
    out = as_user(alice).create({"title": "Diary", "content": "secret"})

    assert out.is_public is False
    with pytest.raises(PermissionDeniedError):
        as_user(bob).open(out.id)


def test_language_only_for_code(alice):
    with pytest.raises(ValidationFailedError):
        as_user(alice).create({"title": "x", "content": "y", "language": "python"})

    out = as_user(alice).create(
        {"title": "snippet", "content": "print()", "content_type": "code", "language": "python"}
    )
    assert out.language == "python"

    with pytest.raises(ValidationFailedError):
        as_user(alice).update(out.id, {"content_type": "markdown"})


def test_open_counts_views_of_non_owners_only(alice, bob, session):
    note = NoteFactory(owner=alice, gist=True)
    before = note.updated_at

    assert as_user(alice).open(note.id).view_count == 0
    assert as_user(bob).open(note.id).view_count == 1
    viewed = as_user().open(note.id)

    assert viewed.view_count == 2
    assert viewed.last_viewed_at is not None
    session.refresh(note)
    assert note.updated_at == before


def test_open_unknown(bob):
    with pytest.raises(NotFoundError):
        as_user(bob).open(424242)


def test_list_pins_first_and_filters(alice):
    NoteFactory(owner=alice, title="plain", is_public=True)
    NoteFactory(owner=alice, title="pinned", is_public=True, is_pinned=True)
    NoteFactory(owner=alice, title="gist", gist=True, tags=["python"])

    items, _ = as_user().list_notes()
    assert items[0].title == "pinned"

    items, _ = as_user().list_notes(is_gist=True)
    assert [n.title for n in items] == ["gist"]

    items, _ = as_user().list_notes(tag="Python")
    assert [n.title for n in items] == ["gist"]

    items, _ = as_user().list_notes(content_type="code")
    assert [n.title for n in items] == ["gist"]


def test_toggle_pin_owner_only(alice, bob):
    note = NoteFactory(owner=alice, is_public=True)
    assert as_user(alice).toggle_pin(note.id).is_pinned is True
    with pytest.raises(PermissionDeniedError):
        as_user(bob).toggle_pin(note.id)


def test_view_counters_are_not_caller_assignable(alice):
    note = NoteFactory(owner=alice)
    with pytest.raises(ValidationFailedError):
        as_user(alice).update(note.id, {"view_count": 100})


def test_stats(alice, bob):
    NoteFactory(owner=alice, gist=True, view_count=3)
    NoteFactory(owner=alice, is_pinned=True, view_count=2)
    NoteFactory(owner=bob, gist=True, view_count=50)

    stats = as_user(alice).stats()

    assert stats.total == 2
    assert stats.public == 1
    assert stats.gists == 1
    assert stats.pinned == 1
    assert stats.total_views == 5


def test_search_respects_visibility(alice, bob):
    NoteFactory(owner=alice, title="Private recipe")
    NoteFactory(owner=alice, title="Public recipe", is_public=True)

    assert [n.title for n in as_user(bob).search("recipe")] == ["Public recipe"]
    assert len(as_user(alice).search("RECIPE")) == 2
