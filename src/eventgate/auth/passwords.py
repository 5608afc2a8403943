# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

_PH = PasswordHasher()


def hash_password(plain: str) -> str:
    if not isinstance(plain, str):
        raise TypeError("password must be a string")
    return _PH.hash(plain)


def verify_password(plain: str, hash_value: str) -> bool:
    if not isinstance(plain, str) or not hash_value:
        return False
    try:
        return _PH.verify(hash_value, plain)
    except (VerifyMismatchError, VerificationError, InvalidHashError, UnicodeEncodeError):
        return False
