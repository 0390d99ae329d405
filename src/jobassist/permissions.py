# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, Request

from jobassist.auth.errors import InvalidSession
from jobassist.auth.models import PublicUser


def extract_token(request: Request) -> Optional[str]:
    """Session token from the signed cookie, else from ``Authorization: Bearer``."""
    state = request.app.state
    cookie = request.cookies.get(state.settings.cookie_name, "")
    if cookie:
        token = state.cookies.unsign(cookie)
        if token:
            return token
    auth_header = request.headers.get("Authorization") or ""
    if auth_header.lower().startswith("bearer "):
        return auth_header[7:].strip() or None
    return None


def load_user_from_request(request: Request) -> Optional[PublicUser]:
    """User behind the request token. SessionExpired propagates to the caller."""
    token = extract_token(request)
    if not token:
        return None
    try:
        return request.app.state.auth.verify_session(token)
    except InvalidSession:
        return None


def current_user_optional(request: Request) -> Optional[PublicUser]:
    u = getattr(request.state, "user", None)
    if u is not None:
        return u
    u = load_user_from_request(request)
    request.state.user = u
    return u


def require_user(request: Request) -> PublicUser:
    u = current_user_optional(request)
    if u:
        return u
    raise HTTPException(status_code=401, detail="Not authenticated")


def cookie_settings(secure: bool) -> dict:
    return {"httponly": True, "samesite": "lax", "secure": secure}
