# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import Session

from pftodo.core.errors import NotFound, PermissionDenied, ValidationError
from pftodo.core.utils import clean, iso, parse_iso_datetime
from pftodo.infra.models import Tag, Todo
from pftodo.infra.repo import delete_rows, insert_row, select_one, select_rows, update_rows
from pftodo.permissions import assign_owner_on_create, can_mutate, list_filter

logger = logging.getLogger(__name__)

TODO_TEXT_MAX = 255


def todo_to_dict(todo: Todo) -> Dict[str, Any]:
    return {
        "id": todo.id,
        "todoText": todo.todo_text,
        "isDone": bool(todo.is_done),
        "tagId": todo.tag_id,
        "tagName": todo.tag.name if todo.tag is not None else None,
        "ownerId": todo.owner_id,
        "createdAt": iso(todo.created_at),
        "updatedAt": iso(todo.updated_at),
        "dueDate": iso(todo.due_date),
    }


def _clean_text(value: Any) -> str:
    text = clean(value)
    if not text:
        raise ValidationError("Empty todoText")
    if len(text) > TODO_TEXT_MAX:
        raise ValidationError(f"todoText is longer than {TODO_TEXT_MAX} characters")
    return text


def _clean_due_date(value: Any) -> Optional[datetime]:
    try:
        return parse_iso_datetime(value)
    except ValueError:
        raise ValidationError(f"Invalid dueDate '{value}' (expected an ISO date)") from None


def _clean_tag_id(db: Session, value: Any) -> Optional[str]:
    tag_id = clean(value)
    if not tag_id:
        return None
    if select_one(db, Tag, Tag.id == tag_id) is None:
        raise ValidationError(f"Tag '{tag_id}' does not exist")
    return tag_id


def _load_for_mutation(db: Session, caller_id: Optional[str], todo_id: Any) -> Todo:
    """Existence first, then ownership: a missing row is NotFound for everybody."""
    tid = clean(todo_id)
    if not tid:
        raise ValidationError("Empty id")
    todo = select_one(db, Todo, Todo.id == tid)
    if todo is None:
        raise NotFound(f"Todo '{tid}' not found")
    if not can_mutate(caller_id, todo.owner_id):
        logger.warning("Caller %s denied mutation of todo %s", caller_id or "<anonymous>", tid)
        raise PermissionDenied(f"Not allowed to modify todo '{tid}'")
    return todo


def list_todos(
    db: Session, caller_id: Optional[str], *, tag_id: Optional[str] = None, sort_by: Optional[str] = None
) -> List[Dict[str, Any]]:
    criteria = [list_filter(caller_id).clause(Todo.owner_id)]
    tid = clean(tag_id)
    if tid:
        criteria.append(Todo.tag_id == tid)

    if sort_by == "dueDate":
        order_by = [Todo.due_date.is_(None), Todo.due_date.asc(), Todo.created_at.desc()]
    else:
        order_by = [Todo.created_at.desc()]

    return [todo_to_dict(t) for t in select_rows(db, Todo, *criteria, order_by=order_by)]


def create_todo(
    db: Session, caller_id: Optional[str], *, todo_text: Any, tag_id: Any = None, due_date: Any = None
) -> Dict[str, Any]:
    values = {
        "todo_text": _clean_text(todo_text),
        "tag_id": _clean_tag_id(db, tag_id),
        "due_date": _clean_due_date(due_date),
        "owner_id": assign_owner_on_create(caller_id),
    }
    todo = insert_row(db, Todo, values)
    db.refresh(todo)
    return todo_to_dict(todo)


def update_todo(
    db: Session, caller_id: Optional[str], *, todo_id: Any, todo_text: Any, tag_id: Any = None, due_date: Any = None
) -> Dict[str, Any]:
    # Text is validated before the lookup, like the id itself.
    text = _clean_text(todo_text)
    todo = _load_for_mutation(db, caller_id, todo_id)
    values = {
        "todo_text": text,
        "tag_id": _clean_tag_id(db, tag_id),
        "due_date": _clean_due_date(due_date),
    }
    update_rows(db, Todo, [Todo.id == todo.id], values)
    db.refresh(todo)
    return todo_to_dict(todo)


def set_status(db: Session, caller_id: Optional[str], *, todo_id: Any, is_done: Any) -> Dict[str, Any]:
    if not isinstance(is_done, bool):
        raise ValidationError("Missing id or isDone")
    todo = _load_for_mutation(db, caller_id, todo_id)
    update_rows(db, Todo, [Todo.id == todo.id], {"is_done": is_done})
    return {"id": todo.id, "isDone": is_done}


def delete_todo(db: Session, caller_id: Optional[str], *, todo_id: Any) -> Dict[str, Any]:
    todo = _load_for_mutation(db, caller_id, todo_id)
    delete_rows(db, Todo, Todo.id == todo.id)
    return {"id": todo.id}


def delete_visible_todos(db: Session, caller_id: Optional[str]) -> int:
    """Delete every todo the caller can see; those are exactly the ones they may mutate."""
    count = delete_rows(db, Todo, list_filter(caller_id).clause(Todo.owner_id))
    logger.info("Bulk-deleted %d todos for %s", count, caller_id or "<anonymous>")
    return count
