# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Callable, Dict, Optional, Protocol

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

from eventgate.auth.users import UserRecord

SESSION_SALT = "eventgate.session.v1"


@dataclass(frozen=True)
class Session:
    token: str
    user: UserRecord
    created_at: datetime


class SessionStore(Protocol):
    def create(self, user: UserRecord) -> str: ...

    def get(self, token: str) -> Optional[Session]: ...

    def destroy(self, token: str) -> None: ...


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemorySessionStore:
    """Process-local session table keyed by an opaque random token."""

    def __init__(self, max_age_seconds: int, *, clock: Callable[[], datetime] = _utcnow):
        self._max_age = timedelta(seconds=max_age_seconds)
        self._clock = clock
        self._sessions: Dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def _expired(self, sess: Session) -> bool:
        return self._clock() - sess.created_at >= self._max_age

    def purge_expired(self) -> int:
        stale = [t for t, s in self._sessions.items() if self._expired(s)]
        for t in stale:
            self._sessions.pop(t, None)
        return len(stale)

    def create(self, user: UserRecord) -> str:
        self.purge_expired()
        token = secrets.token_urlsafe(32)
        while token in self._sessions:
            token = secrets.token_urlsafe(32)
        self._sessions[token] = Session(token=token, user=user, created_at=self._clock())
        return token

    def get(self, token: str) -> Optional[Session]:
        if not token:
            return None
        sess = self._sessions.get(token)
        if sess is None or self._expired(sess):
            return None
        return sess

    def destroy(self, token: str) -> None:
        if token:
            self._sessions.pop(token, None)


def _serializer(secret: str) -> URLSafeTimedSerializer:
    if not secret:
        raise RuntimeError("Session secret is empty")
    return URLSafeTimedSerializer(secret_key=secret, salt=SESSION_SALT)


def sign_token(token: str, secret: str) -> str:
    return _serializer(secret).dumps({"t": token})


def unsign_token(value: str, secret: str, *, max_age: int) -> Optional[str]:
    """Return the session token carried by a cookie value, or None if it was tampered with or is stale."""
    if not value:
        return None
    try:
        data = _serializer(secret).loads(value, max_age=max_age)
    except (BadSignature, BadTimeSignature):
        return None
    t = (data or {}).get("t") if isinstance(data, dict) else None
    t = str(t or "").strip()
    return t or None
