# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Error taxonomy shared by services and the HTTP boundary.

Services raise an AppError subclass; the kind decides the HTTP status in
exactly one place (STATUS_BY_KIND), never the message text.
"""

from __future__ import annotations

import logging
from enum import Enum

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ErrorKind(str, Enum):
    VALIDATION = "ValidationError"
    CONFLICT = "ConflictError"
    INVALID_CREDENTIALS = "InvalidCredentials"
    NOT_FOUND = "NotFound"
    PERMISSION_DENIED = "PermissionDenied"
    INTERNAL = "InternalError"


STATUS_BY_KIND = {
    ErrorKind.VALIDATION: 400,
    ErrorKind.INVALID_CREDENTIALS: 401,
    ErrorKind.PERMISSION_DENIED: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.CONFLICT: 409,
    ErrorKind.INTERNAL: 500,
}


class AppError(Exception):
    kind = ErrorKind.INTERNAL

    def __init__(self, message: str = "Internal Server Error"):
        super().__init__(message)
        self.message = message

    @property
    def status_code(self) -> int:
        return STATUS_BY_KIND[self.kind]


class ValidationError(AppError):
    kind = ErrorKind.VALIDATION


class ConflictError(AppError):
    kind = ErrorKind.CONFLICT


class InvalidCredentials(AppError):
    kind = ErrorKind.INVALID_CREDENTIALS

    def __init__(self, message: str = "Invalid username or password"):
        super().__init__(message)


class NotFound(AppError):
    kind = ErrorKind.NOT_FOUND


class PermissionDenied(AppError):
    kind = ErrorKind.PERMISSION_DENIED

    def __init__(self, message: str = "Permission denied"):
        super().__init__(message)


def error_body(kind: ErrorKind, message: str) -> dict:
    return {"error": {"type": kind.value, "message": message}}


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(AppError)
    async def _app_error(request: Request, exc: AppError):
        if exc.kind is ErrorKind.INTERNAL:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
        else:
            logger.info("%s %s -> %s: %s", request.method, request.url.path, exc.kind.value, exc.message)
        return JSONResponse(error_body(exc.kind, exc.message), status_code=exc.status_code)

    @app.exception_handler(RequestValidationError)
    async def _request_validation(request: Request, exc: RequestValidationError):
        parts = []
        for err in exc.errors():
            loc = ".".join(str(x) for x in err.get("loc", ()) if x != "body")
            parts.append(f"{loc}: {err.get('msg')}" if loc else str(err.get("msg")))
        message = "; ".join(parts) or "Invalid request"
        return JSONResponse(error_body(ErrorKind.VALIDATION, message), status_code=400)

    @app.exception_handler(Exception)
    async def _unhandled(request: Request, exc: Exception):
        # Full traceback stays in the server log only.
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(
            error_body(ErrorKind.INTERNAL, "Internal Server Error"),
            status_code=STATUS_BY_KIND[ErrorKind.INTERNAL],
        )
