# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from contextlib import asynccontextmanager
from pathlib import Path
from typing import Optional

import httpx
from fastapi import Depends, FastAPI, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.staticfiles import StaticFiles
from fastapi.templating import Jinja2Templates
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError

from eventgate.auth.session import InMemorySessionStore, SessionStore, sign_token
from eventgate.auth.users import UserRecord, UserStore
from eventgate.config import Settings
from eventgate.errors import DuplicateUsername, InvalidCredentials, NotFound, StorageUnavailable
from eventgate.infra.db import check_connection, init_db, make_engine, make_session_factory
from eventgate.logging_setup import setup_logging
from eventgate.permissions import cookie_settings, current_user_optional, load_session_from_request, require_user
from eventgate.services import auth_service
from eventgate.services.discover_service import EventDiscoveryClient

BASE_DIR = Path(__file__).resolve().parent

templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

REGISTER_FAILED = "Registration failed. Please try again."
LOGIN_FAILED = "Login failed. Please try again."
BAD_CREDENTIALS = "Incorrect username or password."
LOGGED_OUT = "Logged out successfully."
GENERIC_FAILURE = "Something went wrong. Please try again later."


def _render(request: Request, template_name: str, ctx: Optional[dict] = None, status_code: int = 200):
    """TemplateResponse wrapper injecting the current user."""
    base_ctx = {"current_user": current_user_optional(request), "message": "", "error": False}
    return templates.TemplateResponse(request, template_name, {**base_ctx, **(ctx or {})}, status_code=status_code)


def _redirect(url: str) -> RedirectResponse:
    return RedirectResponse(url=url, status_code=303)


def create_app(
    settings: Optional[Settings] = None,
    *,
    sessions: Optional[SessionStore] = None,
    discovery: Optional[EventDiscoveryClient] = None,
    events_transport: Optional[httpx.AsyncBaseTransport] = None,
) -> FastAPI:
    settings = settings or Settings.from_env()
    setup_logging(settings.log_level)

    engine = make_engine(settings.database_url)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            await check_connection(engine)
            await init_db(engine)
            logger.info("Database connection successful")
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database connection failed: {e}")
        yield
        await engine.dispose()

    app = FastAPI(lifespan=lifespan)
    app.state.settings = settings
    app.state.users = UserStore(make_session_factory(engine))
    app.state.sessions = sessions if sessions is not None else InMemorySessionStore(settings.session_max_age)
    app.state.discovery = discovery or EventDiscoveryClient.from_settings(settings, transport=events_transport)

    app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

    @app.middleware("http")
    async def _auth_middleware(request: Request, call_next):
        request.state.session = load_session_from_request(request)
        return await call_next(request)

    @app.exception_handler(Exception)
    async def _unexpected_error(request: Request, exc: Exception):
        logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
        return _render(request, "error.html", {"message": GENERIC_FAILURE, "error": True}, status_code=500)

    # ------------------ Routes ------------------

    @app.get("/")
    async def home():
        return _redirect("/login")

    @app.get("/login", response_class=HTMLResponse)
    async def login_get(request: Request):
        return _render(request, "login.html")

    @app.post("/login")
    async def login_post(request: Request, username: str = Form(""), password: str = Form("")):
        try:
            token = await auth_service.login(app.state.users, app.state.sessions, username, password)
        except NotFound:
            return _redirect("/register")
        except InvalidCredentials:
            return _render(request, "login.html", {"message": BAD_CREDENTIALS, "error": True})
        except StorageUnavailable:
            return _render(request, "login.html", {"message": LOGIN_FAILED, "error": True})
        resp = _redirect("/discover")
        resp.set_cookie(
            settings.cookie_name,
            sign_token(token, settings.session_secret),
            max_age=settings.session_max_age,
            **cookie_settings(settings),
        )
        return resp

    @app.get("/register", response_class=HTMLResponse)
    async def register_get(request: Request):
        return _render(request, "register.html")

    @app.post("/register")
    async def register_post(request: Request, username: str = Form(""), password: str = Form("")):
        try:
            await auth_service.register(app.state.users, username, password)
        except DuplicateUsername as e:
            logger.info(f"Registration rejected: {e}")
            return _render(request, "register.html", {"message": REGISTER_FAILED, "error": True})
        except (StorageUnavailable, ValueError) as e:
            logger.error(f"Error during registration: {e}")
            return _render(request, "register.html", {"message": REGISTER_FAILED, "error": True})
        return _redirect("/login")

    @app.get("/discover", response_class=HTMLResponse)
    async def discover(request: Request, user: UserRecord = Depends(require_user)):
        result = await app.state.discovery.search()
        return _render(
            request,
            "discover.html",
            {"events": result.events, "message": result.message, "error": result.error},
        )

    @app.get("/logout", response_class=HTMLResponse)
    async def logout(request: Request):
        sess = request.state.session
        auth_service.logout(app.state.sessions, sess.token if sess else "")
        request.state.session = None
        resp = _render(request, "logout.html", {"message": LOGGED_OUT})
        resp.delete_cookie(settings.cookie_name)
        return resp

    return app
