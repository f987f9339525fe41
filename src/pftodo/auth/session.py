# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Server-side sessions and the `sid` cookie that carries them.

Sessions live in process memory only: a restart logs everybody out.
"""

from __future__ import annotations

import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional

from fastapi import Response
from itsdangerous import BadData, URLSafeSerializer

from pftodo.core.config import SESSION_TTL_SECONDS, Settings

SESSION_ID_BYTES = 24
SWEEP_INTERVAL_SECONDS = 300
COOKIE_SALT = "pftodo.sid"


@dataclass
class SessionData:
    user_id: str
    expires_at: float


class _Shard:
    __slots__ = ("lock", "entries")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.entries: Dict[str, SessionData] = {}


class SessionStore:
    """Thread-safe session map, sharded so unrelated ids don't contend.

    All operations on one session id go through the same shard lock, so an
    expiry refresh can never race a revoke of the same id.
    """

    def __init__(
        self,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
        shards: int = 16,
        sweep_interval: float = SWEEP_INTERVAL_SECONDS,
    ):
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if shards <= 0:
            raise ValueError("shards must be positive")
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._shards: List[_Shard] = [_Shard() for _ in range(shards)]
        self._sweep_interval = sweep_interval
        self._sweep_lock = threading.Lock()
        self._next_sweep = clock() + sweep_interval

    def _shard(self, session_id: str) -> _Shard:
        return self._shards[hash(session_id) % len(self._shards)]

    def _maybe_sweep(self) -> None:
        # Sessions whose cookie never comes back are only dropped here.
        if self._clock() < self._next_sweep:
            return
        if not self._sweep_lock.acquire(blocking=False):
            return
        try:
            self._next_sweep = self._clock() + self._sweep_interval
            self.purge_expired()
        finally:
            self._sweep_lock.release()

    def issue(self, user_id: str) -> str:
        self._maybe_sweep()
        session_id = secrets.token_hex(SESSION_ID_BYTES)
        shard = self._shard(session_id)
        with shard.lock:
            shard.entries[session_id] = SessionData(user_id=user_id, expires_at=self._clock() + self.ttl_seconds)
        return session_id

    def resolve(self, session_id: Optional[str]) -> Optional[str]:
        """Return the session's user id and slide its expiry, or None."""
        if not session_id:
            return None
        shard = self._shard(session_id)
        with shard.lock:
            data = shard.entries.get(session_id)
            if data is None:
                return None
            now = self._clock()
            if now > data.expires_at:
                del shard.entries[session_id]
                return None
            data.expires_at = now + self.ttl_seconds
            return data.user_id

    def revoke(self, session_id: Optional[str]) -> None:
        if not session_id:
            return
        shard = self._shard(session_id)
        with shard.lock:
            shard.entries.pop(session_id, None)

    def purge_expired(self) -> int:
        removed = 0
        for shard in self._shards:
            with shard.lock:
                now = self._clock()
                dead = [sid for sid, data in shard.entries.items() if now > data.expires_at]
                for sid in dead:
                    del shard.entries[sid]
                removed += len(dead)
        return removed

    def __len__(self) -> int:
        total = 0
        for shard in self._shards:
            with shard.lock:
                total += len(shard.entries)
        return total


def _serializer(settings: Settings) -> URLSafeSerializer:
    return URLSafeSerializer(secret_key=settings.secret_key, salt=COOKIE_SALT)


def sign_session_id(settings: Settings, session_id: str) -> str:
    return _serializer(settings).dumps(session_id)


def unsign_session_id(settings: Settings, token: Optional[str]) -> Optional[str]:
    if not token:
        return None
    try:
        value = _serializer(settings).loads(token)
    except BadData:
        return None
    if not isinstance(value, str) or not value:
        return None
    return value


def set_session_cookie(response: Response, settings: Settings, session_id: str) -> None:
    response.set_cookie(
        settings.cookie_name,
        sign_session_id(settings, session_id),
        max_age=settings.session_ttl_seconds,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )


def clear_session_cookie(response: Response, settings: Settings) -> None:
    response.set_cookie(
        settings.cookie_name,
        "",
        max_age=0,
        path="/",
        httponly=True,
        samesite="lax",
        secure=settings.cookie_secure,
    )
