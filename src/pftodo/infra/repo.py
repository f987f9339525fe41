# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""The four data-store operations the services are written against.

Every operation takes plain SQLAlchemy filter criteria, so the ownership
predicate from the visibility policy composes with any other filter.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from sqlalchemy import delete, select, update
from sqlalchemy.orm import Session

M = TypeVar("M")


def select_rows(db: Session, model: Type[M], *criteria: Any, order_by: Sequence[Any] = ()) -> List[M]:
    stmt = select(model).where(*criteria)
    if order_by:
        stmt = stmt.order_by(*order_by)
    return list(db.scalars(stmt))


def select_one(db: Session, model: Type[M], *criteria: Any) -> Optional[M]:
    return db.scalars(select(model).where(*criteria).limit(1)).first()


def insert_row(db: Session, model: Type[M], values: Dict[str, Any]) -> M:
    row = model(**values)
    db.add(row)
    db.flush()
    return row


def update_rows(db: Session, model: Type[M], criteria: Sequence[Any], values: Dict[str, Any]) -> int:
    """Bulk UPDATE; returns the affected row count. Loaded objects are not refreshed."""
    if not values:
        return 0
    result = db.execute(update(model).where(*criteria).values(**values).execution_options(synchronize_session=False))
    return result.rowcount or 0


def delete_rows(db: Session, model: Type[M], *criteria: Any) -> int:
    result = db.execute(delete(model).where(*criteria).execution_options(synchronize_session=False))
    return result.rowcount or 0
