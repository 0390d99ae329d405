# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
from typing import Optional

from fastapi import Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from jobassist.auth.cookies import SessionCookieSigner
from jobassist.auth.errors import AuthError
from jobassist.auth.models import PublicUser
from jobassist.auth.passwords import CredentialHasher
from jobassist.auth.secret_provider import ChainSecretProvider, EnvSecretProvider, YamlSecretProvider, resolve_pepper
from jobassist.auth.session import SessionService
from jobassist.config import Settings
from jobassist.infra.db import init_db, make_engine
from jobassist.infra.session_repo import SqlSessionStore
from jobassist.infra.user_repo import SqlUserStore
from jobassist.permissions import cookie_settings, extract_token, require_user

logger = logging.getLogger(__name__)


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    email: str
    name: str
    password: str = Field(min_length=1)
    phone: Optional[str] = None
    location: Optional[str] = None
    current_salary: Optional[int] = Field(default=None, alias="currentSalary")


class LoginRequest(BaseModel):
    email: str
    password: str


class SessionTokenRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    session_token: str = Field(alias="sessionToken")


def build_auth_service(settings: Settings) -> SessionService:
    """Wire stores, pepper and hasher. The pepper is read once, here."""
    engine = make_engine(settings.database_url)
    init_db(engine)

    pepper = settings.pepper
    if pepper is None:
        pepper = resolve_pepper(
            ChainSecretProvider(EnvSecretProvider(), YamlSecretProvider(settings.secrets_path))
        )

    return SessionService(
        SqlUserStore(engine),
        SqlSessionStore(engine),
        CredentialHasher(pepper),
        session_lifetime=settings.session_lifetime,
    )


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or Settings.from_env()

    # Raises on a missing SECRET_KEY before any store is opened.
    cookies = SessionCookieSigner(settings.secret_key, max_age=int(settings.session_lifetime.total_seconds()))

    app = FastAPI(title="jobassist")
    app.state.settings = settings
    app.state.cookies = cookies
    app.state.auth = build_auth_service(settings)

    @app.exception_handler(AuthError)
    async def _auth_error_handler(request: Request, exc: AuthError):
        if exc.status_code >= 500:
            logger.error("request failed", exc_info=exc, extra={"event": "internal_error", "path": request.url.path})
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    # ------------------ Routes ------------------
    # Plain ``def`` endpoints: FastAPI runs them on its thread pool, which
    # keeps Argon2 work off the event loop.

    @app.post("/auth/register", status_code=201)
    def register(req: RegisterRequest):
        user = app.state.auth.register(
            req.email,
            req.name,
            req.password,
            phone=req.phone,
            location=req.location,
            current_salary=req.current_salary,
        )
        return user.to_dict()

    @app.post("/auth/login")
    def login(req: LoginRequest):
        result = app.state.auth.login(req.email, req.password)
        resp = JSONResponse({"user": result.user.identity(), "sessionToken": result.session_token})
        resp.set_cookie(
            settings.cookie_name,
            app.state.cookies.sign(result.session_token),
            max_age=app.state.cookies.max_age,
            **cookie_settings(settings.cookie_secure),
        )
        return resp

    @app.post("/auth/verify")
    def verify(req: SessionTokenRequest):
        user = app.state.auth.verify_session(req.session_token)
        return {"user": user.identity()}

    @app.post("/auth/logout")
    def logout(request: Request, req: Optional[SessionTokenRequest] = None):
        token = req.session_token if req else extract_token(request)
        if token:
            app.state.auth.logout(token)
        resp = JSONResponse({"success": True})
        resp.delete_cookie(settings.cookie_name)
        return resp

    @app.get("/auth/me")
    def me(user: PublicUser = Depends(require_user)):
        return user.to_dict()

    @app.get("/users/{user_id}")
    def get_user(user_id: int, user: PublicUser = Depends(require_user)):
        if user.id != user_id:
            raise HTTPException(status_code=403, detail="Forbidden")
        return app.state.auth.get_user(user_id).to_dict()

    return app
