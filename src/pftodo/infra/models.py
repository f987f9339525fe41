# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import uuid
from datetime import timezone

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, String
from sqlalchemy.orm import relationship
from sqlalchemy.types import TypeDecorator

from pftodo.core.utils import utcnow
from pftodo.infra.db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


class UTCDateTime(TypeDecorator):
    """Stores instants in UTC and hands them back timezone-aware.

    SQLite keeps no offset, so values are converted to UTC before writing and
    tagged as UTC after reading.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=_uuid)
    username = Column(String(100), unique=True, nullable=False, index=True)
    password_hash = Column(String(255), nullable=False)
    password_salt = Column(String(255), nullable=False)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)

    todos = relationship("Todo", back_populates="owner")


class Tag(Base):
    __tablename__ = "tag"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(100), unique=True, nullable=False)


class Todo(Base):
    __tablename__ = "todo"

    id = Column(String(36), primary_key=True, default=_uuid)
    todo_text = Column(String(255), nullable=False)
    is_done = Column(Boolean, default=False, nullable=False)
    tag_id = Column(String(36), ForeignKey("tag.id"), nullable=True, index=True)
    # NULL owner = created without a session ("public" todo).
    owner_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    created_at = Column(UTCDateTime(), default=utcnow, nullable=False)
    updated_at = Column(UTCDateTime(), default=utcnow, onupdate=utcnow)
    due_date = Column(UTCDateTime(), nullable=True)

    tag = relationship("Tag")
    owner = relationship("User", back_populates="todos")
