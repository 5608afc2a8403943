# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request

from eventgate.auth.session import Session, unsign_token
from eventgate.auth.users import UserRecord
from eventgate.config import Settings

LOGIN_URL = "/login"


def load_session_from_request(request: Request) -> Optional[Session]:
    settings: Settings = request.app.state.settings
    raw = request.cookies.get(settings.cookie_name, "")
    token = unsign_token(raw, settings.session_secret, max_age=settings.session_max_age)
    if not token:
        return None
    return request.app.state.sessions.get(token)


def current_user_optional(request: Request) -> Optional[UserRecord]:
    if hasattr(request.state, "session"):
        sess = request.state.session
    else:
        sess = load_session_from_request(request)
    return sess.user if sess else None


def require_user(request: Request) -> UserRecord:
    u = current_user_optional(request)
    if u:
        return u
    raise HTTPException(status_code=303, headers={"Location": LOGIN_URL})


def cookie_settings(settings: Settings) -> dict:
    return {"httponly": True, "samesite": "lax", "secure": settings.cookie_secure}
