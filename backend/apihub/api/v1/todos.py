"""Todo endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from apihub.api.deps import (
    build_service,
    json_response,
    optional_auth,
    parse_pagination,
    require_auth,
    timing,
)
from apihub.schemas import (
    BulkCompleteSchema,
    SearchQuerySchema,
    TodoCreateSchema,
    TodoFilterSchema,
    TodoSchema,
    TodoStatsSchema,
    TodoUpdateSchema,
    build_meta,
)
from apihub.services.todos.service import TodoService

bp = Blueprint("todos", __name__, url_prefix="/todos")

todo_schema = TodoSchema()
todo_list_schema = TodoSchema(many=True)
todo_create_schema = TodoCreateSchema()
todo_update_schema = TodoUpdateSchema()
todo_filter_schema = TodoFilterSchema()
todo_stats_schema = TodoStatsSchema()
bulk_complete_schema = BulkCompleteSchema()
search_schema = SearchQuerySchema()


@bp.get("")
@optional_auth
@timing
def list_todos():
    """Public todos plus the caller's own, paginated."""

    filters = todo_filter_schema.load(request.args)
    pagination = parse_pagination()
    items, meta = build_service(TodoService).list_todos(
        **filters, page=pagination.page, limit=pagination.limit, sort=pagination.sort
    )
    return json_response({"data": todo_list_schema.dump(items), "meta": build_meta(meta)})


@bp.get("/mine")
@require_auth
@timing
def my_todos():
    """All of the caller's todos, public or private."""

    pagination = parse_pagination()
    items = build_service(TodoService).find_mine(
        sort=pagination.sort,
        limit=pagination.limit,
        skip=(pagination.page - 1) * pagination.limit,
    )
    return json_response({"data": todo_list_schema.dump(items)})


@bp.get("/search")
@optional_auth
@timing
def search_todos():
    query = search_schema.load(request.args)
    items = build_service(TodoService).search(query["q"], limit=query["limit"])
    return json_response({"data": todo_list_schema.dump(items)})


@bp.get("/stats")
@require_auth
@timing
def todo_stats():
    stats = build_service(TodoService).stats()
    return json_response({"data": todo_stats_schema.dump(stats)})


@bp.post("")
@require_auth
@timing
def create_todo():
    payload = todo_create_schema.load(request.get_json(silent=True) or {})
    todo = build_service(TodoService).create(payload)
    return json_response({"data": todo_schema.dump(todo)}, status=201)


@bp.post("/bulk-complete")
@require_auth
@timing
def bulk_complete():
    """Mark the caller's todos (all, or the given ``ids``) as completed."""

    payload = bulk_complete_schema.load(request.get_json(silent=True) or {})
    count = build_service(TodoService).bulk_complete(
        payload["ids"], completed=payload["completed"]
    )
    return json_response({"count": count})


@bp.get("/<int:todo_id>")
@optional_auth
@timing
def get_todo(todo_id: int):
    todo = build_service(TodoService).find_by_id(todo_id)
    return json_response({"data": todo_schema.dump(todo)})


@bp.put("/<int:todo_id>")
@require_auth
@timing
def update_todo(todo_id: int):
    payload = todo_update_schema.load(request.get_json(silent=True) or {})
    todo = build_service(TodoService).update(todo_id, payload)
    return json_response({"data": todo_schema.dump(todo)})


@bp.patch("/<int:todo_id>/toggle")
@require_auth
@timing
def toggle_todo(todo_id: int):
    todo = build_service(TodoService).toggle(todo_id)
    return json_response({"data": todo_schema.dump(todo)})


@bp.delete("/<int:todo_id>")
@require_auth
@timing
def delete_todo(todo_id: int):
    build_service(TodoService).delete(todo_id)
    return json_response({"deleted": True})
