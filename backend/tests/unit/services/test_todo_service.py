"""TodoService: ownership-scoped CRUD, views and todo-specific operations."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from apihub.services._shared.base import ServiceContext
from apihub.services._shared.errors import (
    AuthenticationRequiredError,
    NotFoundError,
    PermissionDeniedError,
    ValidationFailedError,
)
from apihub.services._shared.scoped import OWNER_PLACEHOLDER
from apihub.services.todos.service import TodoService
from tests.factories.todo import TodoFactory
from tests.factories.user import UserFactory

NOW = datetime(2026, 6, 1, 9, 0, tzinfo=UTC)


@pytest.fixture()
def alice():
    return UserFactory()


@pytest.fixture()
def bob():
    return UserFactory()


def as_user(user=None) -> TodoService:
    ctx = ServiceContext(actor_id=user.id if user else None)
    return TodoService(ctx=ctx, clock=lambda: NOW)


class TestCreate:
    def test_create_sets_owner_and_defaults(self, alice):
        out = as_user(alice).create({"title": "  Write tests ", "tags": ["work"]})

        assert out.title == "Write tests"
        assert out.owner == alice.id
        assert out.is_public is True
        assert out.completed is False
        assert out.priority == "medium"
        assert out.tags == ["work"]

    def test_guest_cannot_create(self):
        with pytest.raises(AuthenticationRequiredError):
            as_user().create({"title": "nope"})

    def test_caller_cannot_choose_owner(self, alice, bob):
        out = as_user(alice).create({"title": "mine", "owner_id": bob.id})
        assert out.owner == alice.id

    def test_invalid_title(self, alice):
        with pytest.raises(ValidationFailedError):
            as_user(alice).create({"title": "   "})


class TestRead:
    def test_owner_is_masked_for_others(self, alice, bob):
        todo = TodoFactory(owner=alice)

        assert as_user(alice).find_by_id(todo.id).owner == alice.id
        assert as_user(bob).find_by_id(todo.id).owner == OWNER_PLACEHOLDER
        assert as_user().find_by_id(todo.id).owner == OWNER_PLACEHOLDER

    def test_private_todo_hidden_from_others(self, alice, bob):
        todo = TodoFactory(owner=alice, private=True)

        assert as_user(alice).find_by_id(todo.id).is_public is False
        with pytest.raises(PermissionDeniedError):
            as_user(bob).find_by_id(todo.id)
        with pytest.raises(PermissionDeniedError):
            as_user().find_by_id(todo.id)

    def test_unknown_id_is_not_found_before_permission(self, bob):
        with pytest.raises(NotFoundError):
            as_user(bob).find_by_id(999_999)

    def test_private_and_foreign_share_one_message(self, alice, bob):
        private = TodoFactory(owner=alice, private=True)
        public = TodoFactory(owner=alice)

        with pytest.raises(PermissionDeniedError) as read_err:
            as_user(bob).find_by_id(private.id)
        with pytest.raises(PermissionDeniedError) as write_err:
            as_user(bob).update(public.id, {"title": "hijack"})
        assert read_err.value.message == write_err.value.message

    def test_list_filters_and_pagination(self, alice):
        TodoFactory(owner=alice, priority="high", tags=["home"])
        TodoFactory(owner=alice, priority="low", completed=True)
        TodoFactory(owner=alice, priority="high", private=True)

        items, meta = as_user().list_todos(priority="high")
        assert len(items) == 1 and meta.total == 1

        items, meta = as_user(alice).list_todos(priority="high")
        assert meta.total == 2

        items, _ = as_user().list_todos(tag="home")
        assert [t.tags for t in items] == [["home"]]

        items, _ = as_user().list_todos(completed=True)
        assert all(t.completed for t in items) and len(items) == 1

        _, meta = as_user(alice).list_todos(page=1, limit=2)
        assert meta.pages == 2 and meta.has_next is True

    def test_find_mine_needs_caller(self, alice):
        TodoFactory(owner=alice, private=True)
        TodoFactory()
        assert len(as_user(alice).find_mine()) == 1
        with pytest.raises(AuthenticationRequiredError):
            as_user().find_mine()

    def test_is_owner(self, alice, bob):
        todo = TodoFactory(owner=alice)
        assert as_user(alice).is_owner(todo.id) is True
        assert as_user(bob).is_owner(todo.id) is False
        assert as_user().is_owner(todo.id) is False
        assert as_user(alice).is_owner(999_999) is False


class TestMutations:
    def test_owner_updates(self, alice):
        todo = TodoFactory(owner=alice)
        out = as_user(alice).update(todo.id, {"title": "Renamed", "is_public": False})
        assert out.title == "Renamed"
        assert out.is_public is False

    def test_non_owner_cannot_update_or_delete_public_todo(self, alice, bob):
        todo = TodoFactory(owner=alice)

        with pytest.raises(PermissionDeniedError):
            as_user(bob).update(todo.id, {"title": "hijack"})
        with pytest.raises(PermissionDeniedError):
            as_user(bob).delete(todo.id)
        with pytest.raises(AuthenticationRequiredError):
            as_user().delete(todo.id)
        assert as_user(alice).find_by_id(todo.id).title == todo.title

    def test_update_rejects_protected_fields(self, alice, bob):
        todo = TodoFactory(owner=alice)
        with pytest.raises(ValidationFailedError):
            as_user(alice).update(todo.id, {"owner_id": bob.id})

    def test_delete(self, alice):
        todo = TodoFactory(owner=alice)
        as_user(alice).delete(todo.id)
        with pytest.raises(NotFoundError):
            as_user(alice).find_by_id(todo.id)

    def test_toggle(self, alice, bob):
        todo = TodoFactory(owner=alice)
        assert as_user(alice).toggle(todo.id).completed is True
        assert as_user(alice).toggle(todo.id).completed is False
        with pytest.raises(PermissionDeniedError):
            as_user(bob).toggle(todo.id)

    def test_bulk_complete_is_owner_scoped(self, alice, bob):
        mine = TodoFactory.create_batch(2, owner=alice)
        TodoFactory(owner=bob)

        assert as_user(alice).bulk_complete() == 2
        assert as_user(alice).bulk_complete([mine[0].id], completed=False) == 1
        assert as_user(bob).find_mine()[0].completed is False


class TestStats:
    def test_stats_cover_only_own_todos(self, alice, bob):
        TodoFactory(owner=alice, completed=True, priority="high")
        TodoFactory(owner=alice, private=True, due_date=NOW - timedelta(days=1))
        TodoFactory(owner=alice, due_date=NOW + timedelta(days=1))
        TodoFactory(owner=bob, priority="high")

        stats = as_user(alice).stats()

        assert stats.total == 3
        assert stats.completed == 1
        assert stats.public == 2
        assert stats.high_priority == 1
        assert stats.overdue == 1

    def test_stats_require_caller(self):
        with pytest.raises(AuthenticationRequiredError):
            as_user().stats()
