# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Runtime settings.

Resolution order: built-in defaults, then an optional YAML file pointed to by
PF_CONFIG, then PF_* environment variables.
"""

from __future__ import annotations

import os
import secrets
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml

SESSION_TTL_SECONDS = 7 * 24 * 60 * 60
KDF_ITERATIONS = 120_000

_TRUE = {"1", "true", "yes", "y", "on"}


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///data/pftodo.db"
    session_ttl_seconds: int = SESSION_TTL_SECONDS
    kdf_iterations: int = KDF_ITERATIONS
    cookie_name: str = "sid"
    cookie_secure: bool = False
    secret_key: str = field(default_factory=lambda: secrets.token_hex(32), repr=False)
    cors_origins: Tuple[str, ...] = ("http://localhost:5173",)
    log_level: str = "INFO"
    log_json: bool = False
    host: str = "0.0.0.0"
    port: int = 8000
    reload: bool = False

    def __post_init__(self) -> None:
        if self.session_ttl_seconds <= 0:
            raise ValueError("session_ttl_seconds must be positive")
        if self.kdf_iterations <= 0:
            raise ValueError("kdf_iterations must be positive")
        if not self.cookie_name:
            raise ValueError("cookie_name must not be empty")


# env var -> settings field
ENV_KEYS: Dict[str, str] = {
    "PF_DATABASE_URL": "database_url",
    "PF_SESSION_TTL": "session_ttl_seconds",
    "PF_KDF_ITERATIONS": "kdf_iterations",
    "PF_COOKIE_NAME": "cookie_name",
    "PF_COOKIE_SECURE": "cookie_secure",
    "PF_SECRET_KEY": "secret_key",
    "PF_CORS_ORIGINS": "cors_origins",
    "PF_LOG_LEVEL": "log_level",
    "PF_LOG_JSON": "log_json",
    "PF_HOST": "host",
    "PF_PORT": "port",
    "PF_RELOAD": "reload",
}

_FIELD_TYPES = {f.name: f.type for f in fields(Settings)}


def _coerce(name: str, value: Any) -> Any:
    kind = _FIELD_TYPES[name]
    if kind == "bool":
        if isinstance(value, bool):
            return value
        return str(value).strip().lower() in _TRUE
    if kind == "int":
        try:
            return int(value)
        except (TypeError, ValueError):
            raise ValueError(f"Invalid integer for '{name}': {value!r}") from None
    if kind.startswith("Tuple"):
        if isinstance(value, (list, tuple)):
            items = value
        else:
            items = str(value).split(",")
        return tuple(str(x).strip() for x in items if str(x).strip())
    return str(value)


def _load_yaml(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    raw = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(raw, dict):
        raise ValueError(f"Config file must contain a mapping: {path}")
    unknown = sorted(set(raw) - set(_FIELD_TYPES))
    if unknown:
        raise ValueError(f"Unknown config keys in {path}: {', '.join(unknown)}")
    return raw


def load_settings(
    *, path: Optional[Path] = None, environ: Optional[Dict[str, str]] = None, **overrides: Any
) -> Settings:
    env = os.environ if environ is None else environ
    values: Dict[str, Any] = {}

    cfg_path = path or (Path(env["PF_CONFIG"]) if env.get("PF_CONFIG") else None)
    if cfg_path is not None:
        values.update(_load_yaml(Path(cfg_path)))

    for var, name in ENV_KEYS.items():
        if env.get(var) not in (None, ""):
            values[name] = env[var]

    values.update(overrides)
    return Settings(**{k: _coerce(k, v) for k, v in values.items()})
