"""Unit tests for the ownership-scoped repository (through TodoRepository)."""

import pytest
from sqlalchemy import func

from apihub.models.todo import Todo
from apihub.repositories.todo import TodoRepository
from tests.factories.todo import TodoFactory
from tests.factories.user import UserFactory


@pytest.fixture()
def repo(session):
    return TodoRepository(session=session)


@pytest.fixture()
def owners():
    """Two users, each with one public and one private todo."""
    alice, bob = UserFactory(), UserFactory()
    rows = {
        "alice_public": TodoFactory(owner=alice, title="alice public"),
        "alice_private": TodoFactory(owner=alice, title="alice private", private=True),
        "bob_public": TodoFactory(owner=bob, title="bob public"),
        "bob_private": TodoFactory(owner=bob, title="bob private", private=True),
    }
    return alice, bob, rows


def _titles(rows):
    return sorted(r.title for r in rows)


class TestVisibility:
    def test_guest_sees_only_public(self, repo, owners):
        assert _titles(repo.find()) == ["alice public", "bob public"]

    def test_caller_sees_public_plus_own(self, repo, owners):
        alice, _, _ = owners
        assert _titles(repo.find(caller_id=alice.id)) == [
            "alice private",
            "alice public",
            "bob public",
        ]

    def test_include_private_bypasses_rule(self, repo, owners):
        assert len(repo.find(include_private=True)) == 4

    def test_find_by_owner_returns_private_rows(self, repo, owners):
        _, bob, _ = owners
        assert _titles(repo.find_by_owner(bob.id)) == ["bob private", "bob public"]

    def test_count_honours_visibility(self, repo, owners):
        alice, _, _ = owners
        assert repo.count() == 2
        assert repo.count(caller_id=alice.id) == 3

    def test_entity_helpers(self, repo, owners):
        alice, bob, rows = owners
        row = rows["alice_private"]
        assert repo.owner_of(row) == alice.id
        assert repo.is_public(row) is False
        assert repo.is_owner(row, alice.id) is True
        assert repo.is_owner(row, bob.id) is False
        assert repo.is_owner(row, None) is False


class TestQuerying:
    def test_explicit_sort_and_unknown_tokens(self, repo, owners):
        rows = repo.find(include_private=True, sort=["title", "-nope"])
        assert [r.title for r in rows] == sorted(r.title for r in rows)

    def test_filters_ignore_unknown_keys(self, repo, owners):
        TodoFactory(title="done", completed=True)
        rows = repo.find({"completed": True, "bogus": 1})
        assert _titles(rows) == ["done"]

    def test_limit_is_clamped(self, repo):
        assert repo.clamp_limit(None) == repo.default_limit
        assert repo.clamp_limit(0) == repo.default_limit
        assert repo.clamp_limit(10_000) == repo.max_limit

    def test_paginate(self, repo, owners):
        page = repo.paginate(include_private=True, page=2, limit=3, sort=["title"])
        assert page.total == 4
        assert page.pages == 2
        assert page.has_prev is True
        assert page.has_next is False
        assert [r.title for r in page.items] == ["bob public"]

    def test_search_is_case_insensitive_and_scoped(self, repo, owners):
        alice, _, _ = owners
        assert _titles(repo.search("PRIVATE")) == []
        assert _titles(repo.search("PRIVATE", caller_id=alice.id)) == ["alice private"]
        assert repo.search("   ") == []

    def test_aggregate_over_visible_rows(self, repo, owners):
        alice, _, _ = owners
        result = repo.aggregate({"total": func.count(Todo.id)}, caller_id=alice.id)
        assert result == {"total": 3}


class TestWrites:
    def test_build_ignores_protected_fields_and_forced_owner(self, repo):
        alice, bob = UserFactory(), UserFactory()
        todo = repo.build({"title": "x", "id": 999, "owner_id": bob.id}, owner_id=alice.id)
        assert todo.id != 999
        assert todo.owner_id == alice.id

    def test_assign_updates_rejects_non_updatable(self, repo):
        todo = TodoFactory()
        with pytest.raises(ValueError, match="non-updatable"):
            repo.assign_updates(todo, {"owner_id": 5})
        with pytest.raises(ValueError):
            repo.assign_updates(todo, {"created_at": None})

    def test_bulk_update_only_touches_owner_rows(self, repo, session, owners):
        alice, bob, rows = owners
        changed = repo.bulk_update(None, {"completed": True}, owner_id=alice.id)
        assert changed == 2
        session.expire_all()
        assert rows["alice_public"].completed is True
        assert rows["bob_public"].completed is False

    def test_bulk_update_refuses_unknown_fields(self, repo, owners):
        alice, _, _ = owners
        with pytest.raises(ValueError):
            repo.bulk_update(None, {"owner_id": 1}, owner_id=alice.id)
