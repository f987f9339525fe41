# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Tags are shared labels with no owner; anyone may create or remove them."""

from __future__ import annotations

import logging
from typing import Any, Dict, List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pftodo.core.errors import ConflictError, NotFound, ValidationError
from pftodo.core.utils import clean
from pftodo.infra.models import Tag, Todo
from pftodo.infra.repo import delete_rows, insert_row, select_one, select_rows

logger = logging.getLogger(__name__)

TAG_NAME_MAX = 100


def tag_to_dict(tag: Tag) -> Dict[str, Any]:
    return {"id": tag.id, "name": tag.name}


def list_tags(db: Session) -> List[Dict[str, Any]]:
    return [tag_to_dict(t) for t in select_rows(db, Tag, order_by=[Tag.name.asc()])]


def create_tag(db: Session, name: Any) -> Dict[str, Any]:
    n = clean(name)
    if not n:
        raise ValidationError("Empty tag name")
    if len(n) > TAG_NAME_MAX:
        raise ValidationError(f"Tag name is longer than {TAG_NAME_MAX} characters")
    if select_one(db, Tag, Tag.name == n) is not None:
        raise ConflictError("Tag name already exists")
    try:
        tag = insert_row(db, Tag, {"name": n})
    except IntegrityError:
        db.rollback()
        raise ConflictError("Tag name already exists") from None
    return tag_to_dict(tag)


def delete_tag(db: Session, tag_id: Any) -> Dict[str, Any]:
    tid = clean(tag_id)
    if not tid:
        raise ValidationError("Empty tag id")
    if select_one(db, Tag, Tag.id == tid) is None:
        raise NotFound("Tag not found")
    # Counts todos of every owner, not just the caller's.
    if select_one(db, Todo, Todo.tag_id == tid) is not None:
        raise ConflictError("Cannot delete tag because it is used by some todos")
    delete_rows(db, Tag, Tag.id == tid)
    return {"id": tid}


def delete_unused_tags(db: Session) -> int:
    used = select(Todo.tag_id).where(Todo.tag_id.is_not(None))
    count = delete_rows(db, Tag, Tag.id.not_in(used))
    if count:
        logger.info("Deleted %d unused tags", count)
    return count
