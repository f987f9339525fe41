#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from pftodo.auth.users import register
from pftodo.core.config import load_settings
from pftodo.core.errors import AppError
from pftodo.infra.db import Database


def main() -> None:
    settings = load_settings()
    db = Database(settings.database_url)
    db.create_all()

    username = input("Username: ").strip()
    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")

    try:
        with db.session_scope() as s:
            user = register(s, settings, username, pw1)
    except AppError as e:
        raise SystemExit(f"{e.kind.value}: {e.message}")
    print(f"OK -> {user['username']} ({user['id']}) in {settings.database_url}")


if __name__ == "__main__":
    main()
