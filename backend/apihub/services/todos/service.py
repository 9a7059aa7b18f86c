# apihub/services/todos/service.py
from __future__ import annotations

from typing import Any

from sqlalchemy import ColumnElement, String, and_, case, cast, func

from apihub.models.todo import Todo
from apihub.services._shared.dto import PageMeta
from apihub.services._shared.scoped import Owner, OwnershipScopedService
from apihub.services.todos.dto import TodoOut, TodoStatsOut


def tag_clause(tag: str) -> ColumnElement[bool]:
    """Match rows whose JSON ``tags`` list contains ``tag`` (portable text match)."""
    return cast(Todo.tags, String).like(f'%"{tag.strip()}"%')


class TodoService(OwnershipScopedService[Todo, TodoOut]):
    """Todos: public by default, readable by anyone unless hidden by the owner."""

    repo_attr = "todos"
    entity_name = "Todo"

    def to_view(self, entity: Todo, *, owner: Owner) -> TodoOut:
        return TodoOut(
            id=entity.id,
            title=entity.title,
            description=entity.description,
            completed=entity.completed,
            is_public=entity.is_public,
            priority=entity.priority,
            due_date=entity.due_date,
            owner=owner,
            created_at=entity.created_at,
            updated_at=entity.updated_at,
            tags=list(entity.tags or []),
        )

    def list_todos(
        self,
        *,
        completed: bool | None = None,
        priority: str | None = None,
        tag: str | None = None,
        page: int = 1,
        limit: int | None = None,
        sort: list[str] | None = None,
    ) -> tuple[list[TodoOut], PageMeta]:
        """Visible todos with optional equality and tag filters."""
        filters: dict[str, Any] = {}
        if completed is not None:
            filters["completed"] = completed
        if priority:
            filters["priority"] = priority
        where = [tag_clause(tag)] if tag else []
        return self.paginate(filters, page=page, limit=limit, sort=sort, where=where)

    def toggle(self, todo_id: int) -> TodoOut:
        """Flip ``completed`` on a todo the caller owns."""
        self.require_actor()
        with self.rw_uow() as uow:
            todo = self.load_owned(uow, todo_id)
            uow.todos.assign_updates(todo, {"completed": not todo.completed})
            return self._view(uow.todos, todo)

    def bulk_complete(self, ids: list[int] | None = None, *, completed: bool = True) -> int:
        """Mark the caller's todos (all, or only ``ids``) as completed/uncompleted."""
        where = [Todo.id.in_(ids)] if ids else []
        return self.bulk_update(None, {"completed": completed}, where=where)

    def stats(self) -> TodoStatsOut:
        """Counters over the caller's own todos."""
        actor = self.require_actor()
        now = self.clock()
        row = self.aggregate(
            {
                "total": func.count(Todo.id),
                "completed": func.sum(case((Todo.completed.is_(True), 1), else_=0)),
                "public": func.sum(case((Todo.is_public.is_(True), 1), else_=0)),
                "high_priority": func.sum(case((Todo.priority == "high", 1), else_=0)),
                "overdue": func.sum(
                    case(
                        (
                            and_(
                                Todo.due_date.is_not(None),
                                Todo.due_date < now,
                                Todo.completed.is_(False),
                            ),
                            1,
                        ),
                        else_=0,
                    )
                ),
            },
            {"owner_id": actor},
            include_private=True,
        )
        return TodoStatsOut(**{key: int(value or 0) for key, value in row.items()})
