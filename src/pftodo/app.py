# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import time
from typing import Any, Optional

from fastapi import Depends, FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel
from sqlalchemy.orm import Session

from pftodo.auth import users
from pftodo.auth.session import SessionStore
from pftodo.core.config import Settings, load_settings
from pftodo.core.errors import register_error_handlers
from pftodo.core.logs import configure_logging
from pftodo.infra.db import Database
from pftodo.infra.models import User
from pftodo.infra.repo import select_one
from pftodo.permissions import Caller, current_caller, get_db, get_sessions, get_settings
from pftodo.services import tag_service, todo_service

logger = logging.getLogger(__name__)


# Emptiness and types are checked in the services, not here.
class Credentials(BaseModel):
    username: Any = None
    password: Any = None


class TodoCreate(BaseModel):
    todoText: Any = None
    tagId: Optional[str] = None
    dueDate: Optional[str] = None


class TodoUpdate(TodoCreate):
    id: Any = None


class TodoStatus(BaseModel):
    id: Any = None
    isDone: Any = None


class TodoRef(BaseModel):
    id: Any = None


class TagCreate(BaseModel):
    name: Any = None


def create_app(settings: Optional[Settings] = None, *, sessions: Optional[SessionStore] = None) -> FastAPI:
    settings = settings or load_settings()
    configure_logging(settings.log_level, structured=settings.log_json)

    app = FastAPI(title="pf-todo")
    app.state.settings = settings
    app.state.sessions = sessions if sessions is not None else SessionStore(settings.session_ttl_seconds)
    app.state.db = Database(settings.database_url)
    app.state.db.create_all()

    register_error_handlers(app)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(settings.cors_origins),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def _access_log(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        logger.info(
            "%s %s %s %.1fms",
            request.method,
            request.url.path,
            response.status_code,
            (time.perf_counter() - started) * 1000,
        )
        return response

    @app.get("/health")
    def health():
        return {"status": "ok"}

    # --- auth ---

    @app.post("/auth/register")
    def register(
        body: Credentials, db: Session = Depends(get_db), settings: Settings = Depends(get_settings)
    ):
        return users.register(db, settings, body.username, body.password)

    @app.post("/auth/login")
    def login(
        body: Credentials,
        response: Response,
        db: Session = Depends(get_db),
        settings: Settings = Depends(get_settings),
        sessions: SessionStore = Depends(get_sessions),
    ):
        return users.login(db, settings, sessions, response, body.username, body.password)

    @app.post("/auth/logout")
    def logout(
        request: Request,
        response: Response,
        settings: Settings = Depends(get_settings),
        sessions: SessionStore = Depends(get_sessions),
    ):
        users.logout(settings, sessions, response, request.cookies.get(settings.cookie_name))
        return {"msg": "Logged out"}

    @app.get("/auth/me")
    def me(caller: Caller = Depends(current_caller), db: Session = Depends(get_db)):
        if not caller.is_authenticated:
            return {"user": None}
        user = select_one(db, User, User.id == caller.user_id)
        return {"user": users.public_user(user) if user else None}

    # --- todos ---

    @app.get("/todo")
    def list_todos(
        tagId: Optional[str] = None,
        sortBy: Optional[str] = None,
        caller: Caller = Depends(current_caller),
        db: Session = Depends(get_db),
    ):
        return todo_service.list_todos(db, caller.user_id, tag_id=tagId, sort_by=sortBy)

    @app.put("/todo")
    def create_todo(body: TodoCreate, caller: Caller = Depends(current_caller), db: Session = Depends(get_db)):
        data = todo_service.create_todo(
            db, caller.user_id, todo_text=body.todoText, tag_id=body.tagId, due_date=body.dueDate
        )
        return {"msg": "Insert successfully", "data": data}

    @app.patch("/todo")
    def update_todo(body: TodoUpdate, caller: Caller = Depends(current_caller), db: Session = Depends(get_db)):
        data = todo_service.update_todo(
            db,
            caller.user_id,
            todo_id=body.id,
            todo_text=body.todoText,
            tag_id=body.tagId,
            due_date=body.dueDate,
        )
        return {"msg": "Update successfully", "data": data}

    @app.patch("/todo/status")
    def update_status(body: TodoStatus, caller: Caller = Depends(current_caller), db: Session = Depends(get_db)):
        data = todo_service.set_status(db, caller.user_id, todo_id=body.id, is_done=body.isDone)
        return {"msg": "Updated status", "data": data}

    @app.delete("/todo")
    def delete_todo(body: TodoRef, caller: Caller = Depends(current_caller), db: Session = Depends(get_db)):
        data = todo_service.delete_todo(db, caller.user_id, todo_id=body.id)
        return {"msg": "Delete successfully", "data": data}

    @app.post("/todo/all")
    def delete_all_todos(caller: Caller = Depends(current_caller), db: Session = Depends(get_db)):
        count = todo_service.delete_visible_todos(db, caller.user_id)
        return {"msg": "Delete all rows successfully", "data": {"deletedCount": count}}

    # --- tags ---

    @app.get("/tags")
    def list_tags(db: Session = Depends(get_db)):
        return tag_service.list_tags(db)

    @app.post("/tags")
    def create_tag(body: TagCreate, db: Session = Depends(get_db)):
        return {"msg": "Tag added", "data": tag_service.create_tag(db, body.name)}

    @app.delete("/tags/{tag_id}")
    def delete_tag(tag_id: str, db: Session = Depends(get_db)):
        return {"msg": "Delete tag successfully", "data": tag_service.delete_tag(db, tag_id)}

    @app.post("/tags/unused")
    def delete_unused_tags(db: Session = Depends(get_db)):
        count = tag_service.delete_unused_tags(db)
        return {"msg": "Deleted unused tags successfully", "deletedCount": count}

    return app
