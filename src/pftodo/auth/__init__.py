# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification (PBKDF2-HMAC-SHA256 via cryptography)
- The in-memory session store and signed `sid` cookies (itsdangerous)
- The register/login/logout/identify pipeline backed by the users table
"""
