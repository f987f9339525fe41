# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from typing import Tuple

from cryptography.exceptions import InvalidKey
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

from pftodo.core.config import KDF_ITERATIONS

SALT_BYTES = 16
HASH_BYTES = 32


def _kdf(salt: bytes, iterations: int) -> PBKDF2HMAC:
    return PBKDF2HMAC(algorithm=hashes.SHA256(), length=HASH_BYTES, salt=salt, iterations=iterations)


def create_credential(password: str, *, iterations: int = KDF_ITERATIONS) -> Tuple[str, str]:
    """Return (hash_hex, salt_hex) for a password.

    Empty passwords are hashed like any other; rejecting them is up to the caller.
    """
    salt = os.urandom(SALT_BYTES)
    digest = _kdf(salt, iterations).derive((password or "").encode("utf-8"))
    return digest.hex(), salt.hex()


def verify_credential(
    password: str, salt_hex: str, expected_hash_hex: str, *, iterations: int = KDF_ITERATIONS
) -> bool:
    try:
        salt = bytes.fromhex(salt_hex or "")
        expected = bytes.fromhex(expected_hash_hex or "")
    except ValueError:
        return False
    if not expected:
        return False
    try:
        # PBKDF2HMAC.verify compares in constant time.
        _kdf(salt, iterations).verify((password or "").encode("utf-8"), expected)
    except InvalidKey:
        return False
    return True
