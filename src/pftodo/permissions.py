# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Ownership-based visibility policy and the request dependencies feeding it.

Ownership is the only role: a todo belongs to the user who created it, or to
nobody when it was created without a session. "Unauthenticated caller" and
"no owner" are the same value (None), which makes the policy a plain
equality check.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterator, Optional

from fastapi import Request
from sqlalchemy.orm import Session

from pftodo.auth.session import SessionStore
from pftodo.auth.users import identify
from pftodo.core.config import Settings

NO_OWNER: Optional[str] = None


@dataclass(frozen=True)
class OwnerFilter:
    """Row predicate: owner column equals `owner_id` (IS NULL when None)."""

    owner_id: Optional[str]

    def matches(self, owner_id: Optional[str]) -> bool:
        return owner_id == self.owner_id

    def clause(self, column: Any) -> Any:
        if self.owner_id is None:
            return column.is_(None)
        return column == self.owner_id


def list_filter(caller_id: Optional[str]) -> OwnerFilter:
    # Strict partition: a logged-in user never sees public rows and vice versa.
    return OwnerFilter(owner_id=caller_id)


def can_mutate(caller_id: Optional[str], resource_owner: Optional[str]) -> bool:
    return caller_id == resource_owner


def assign_owner_on_create(caller_id: Optional[str]) -> Optional[str]:
    return caller_id if caller_id else NO_OWNER


@dataclass(frozen=True)
class Caller:
    user_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.user_id is not None


ANONYMOUS = Caller()


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_db(request: Request) -> Iterator[Session]:
    with request.app.state.db.session_scope() as db:
        yield db


def current_caller(request: Request) -> Caller:
    """Identify the caller from the `sid` cookie; anonymous on any failure."""
    settings = get_settings(request)
    user_id = identify(settings, get_sessions(request), request.cookies.get(settings.cookie_name))
    if user_id is None:
        return ANONYMOUS
    return Caller(user_id=user_id)
