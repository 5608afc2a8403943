# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Registration, login and logout flows.

These functions only orchestrate the hasher, the credential store and the
session store; turning their exceptions into pages and redirects is the HTTP
layer's job.
"""

from __future__ import annotations

from loguru import logger

from eventgate.auth.passwords import hash_password, verify_password
from eventgate.auth.session import SessionStore
from eventgate.auth.users import UserRecord, UserStore
from eventgate.errors import InvalidCredentials


async def register(store: UserStore, username: str, password: str) -> UserRecord:
    """Create a user; raises DuplicateUsername, StorageUnavailable or ValueError."""
    hashed = hash_password(password)
    user = await store.create_user(username, hashed)
    logger.info(f"Registered user {user.username!r}")
    return user


async def login(store: UserStore, sessions: SessionStore, username: str, password: str) -> str:
    """Check credentials and open a session, returning its token.

    An unknown username raises NotFound, which the caller treats as a new user.
    """
    user = await store.find_by_username(username)
    if not verify_password(password, user.password_hash):
        raise InvalidCredentials(user.username)
    return sessions.create(user)


def logout(sessions: SessionStore, token: str) -> None:
    if not token:
        return
    try:
        sessions.destroy(token)
    except Exception as e:
        # the client is logged out once its cookie is cleared either way
        logger.error(f"Error destroying session: {e}")
