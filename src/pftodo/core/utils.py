# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional


def clean(s: Any) -> str:
    """Normalise free-text input for comparisons and storage (str + trim)."""
    if s is None:
        return ""
    return str(s).strip()


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_iso_datetime(value: Any) -> Optional[datetime]:
    """Parse an ISO date ("2026-10-19") or datetime string into an aware UTC datetime.

    Naive values are taken as UTC. Empty values map to None. Raises ValueError
    on anything unparseable so the caller can turn it into a validation error.
    """
    s = clean(value)
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    dt = datetime.fromisoformat(s)
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def iso(dt: Optional[datetime]) -> Optional[str]:
    return dt.isoformat() if dt is not None else None
