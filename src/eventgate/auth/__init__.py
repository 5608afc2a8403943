# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Authentication helpers.

This package provides:
- Password hashing/verification (argon2)
- The credential store backed by the users table (SQLAlchemy)
- Server-side sessions carried in signed cookies (itsdangerous)
"""
