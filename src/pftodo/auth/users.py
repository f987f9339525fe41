# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Register / login / logout / identify.

Only this layer turns bad input into user-facing errors; the hasher and the
session store below it answer with booleans and None.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from pftodo.auth.passwords import create_credential, verify_credential
from pftodo.auth.session import SessionStore, clear_session_cookie, set_session_cookie, unsign_session_id
from pftodo.core.config import Settings
from pftodo.core.errors import ConflictError, InvalidCredentials, ValidationError
from pftodo.core.utils import clean, iso
from pftodo.infra.models import User
from pftodo.infra.repo import insert_row, select_one

logger = logging.getLogger(__name__)


def public_user(user: User, *, with_created: bool = False) -> Dict[str, Any]:
    out: Dict[str, Any] = {"id": user.id, "username": user.username}
    if with_created:
        out["createdAt"] = iso(user.created_at)
    return out


def _require_fields(username: Any, password: Any) -> tuple[str, str]:
    u = clean(username)
    p = password if isinstance(password, str) else ""
    if not u or not p:
        raise ValidationError("Username and password are required")
    return u, p


def get_user(db: Session, username: str) -> Optional[User]:
    u = clean(username)
    if not u:
        return None
    return select_one(db, User, User.username == u)


def register(db: Session, settings: Settings, username: Any, password: Any) -> Dict[str, Any]:
    u, p = _require_fields(username, password)
    if get_user(db, u) is not None:
        raise ConflictError(f"Username '{u}' is already taken")

    pw_hash, pw_salt = create_credential(p, iterations=settings.kdf_iterations)
    try:
        user = insert_row(db, User, {"username": u, "password_hash": pw_hash, "password_salt": pw_salt})
    except IntegrityError:
        # Lost a race with a concurrent registration of the same name.
        db.rollback()
        raise ConflictError(f"Username '{u}' is already taken") from None

    logger.info("Registered user %s (%s)", u, user.id)
    return public_user(user, with_created=True)


def authenticate(db: Session, settings: Settings, username: str, password: str) -> Optional[User]:
    user = get_user(db, username)
    if user is None:
        return None
    if not verify_credential(password, user.password_salt, user.password_hash, iterations=settings.kdf_iterations):
        return None
    return user


def login(
    db: Session, settings: Settings, sessions: SessionStore, response: Response, username: Any, password: Any
) -> Dict[str, Any]:
    u, p = _require_fields(username, password)
    user = authenticate(db, settings, u, p)
    if user is None:
        logger.warning("Failed login for %s", u)
        raise InvalidCredentials()

    session_id = sessions.issue(user.id)
    set_session_cookie(response, settings, session_id)
    logger.info("User %s logged in", u)
    return public_user(user)


def logout(settings: Settings, sessions: SessionStore, response: Response, cookie_value: Optional[str]) -> None:
    session_id = unsign_session_id(settings, cookie_value)
    if session_id:
        sessions.revoke(session_id)
        logger.info("Session revoked")
    clear_session_cookie(response, settings)


def identify(settings: Settings, sessions: SessionStore, cookie_value: Optional[str]) -> Optional[str]:
    """Resolve a raw `sid` cookie value to a user id. Never raises."""
    return sessions.resolve(unsign_session_id(settings, cookie_value))
