# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass

from loguru import logger
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from eventgate.errors import DuplicateUsername, NotFound, StorageUnavailable
from eventgate.infra.db import UserRow


@dataclass(frozen=True)
class UserRecord:
    username: str
    password_hash: str


def _to_record(row: UserRow) -> UserRecord:
    return UserRecord(username=row.username, password_hash=row.password)


def _is_unique_violation(e: IntegrityError) -> bool:
    # postgres reports SQLSTATE 23505, sqlite only says so in the message
    orig = e.orig
    code = getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)
    if code:
        return code == "23505"
    return "unique" in str(orig).lower()


class UserStore:
    """Credential store over the ``users`` table.

    Username uniqueness is left to the table's unique index: an insert that
    collides fails inside the database and surfaces as ``DuplicateUsername``.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def create_user(self, username: str, password_hash: str) -> UserRecord:
        u = (username or "").strip()
        if not u:
            raise ValueError("username must not be empty")
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    row = UserRow(username=u, password=password_hash)
                    session.add(row)
                return _to_record(row)
        except IntegrityError as e:
            if _is_unique_violation(e):
                raise DuplicateUsername(u) from e
            logger.error(f"Integrity error while creating user {u!r}: {e}")
            raise StorageUnavailable(str(e)) from e
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Storage error while creating user {u!r}: {e}")
            raise StorageUnavailable(str(e)) from e

    async def find_by_username(self, username: str) -> UserRecord:
        u = (username or "").strip()
        if not u:
            raise NotFound(username)
        try:
            async with self._session_factory() as session:
                row = await session.scalar(select(UserRow).where(UserRow.username == u))
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Storage error while looking up user {u!r}: {e}")
            raise StorageUnavailable(str(e)) from e
        if row is None:
            raise NotFound(u)
        return _to_record(row)
