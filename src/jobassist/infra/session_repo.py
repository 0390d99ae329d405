# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError

from jobassist.auth.errors import StoreError
from jobassist.auth.models import SessionRow
from jobassist.infra.db import as_utc, user_sessions


class SqlSessionStore:
    """Session Store over the ``user_sessions`` table. Rows are never updated."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def insert(self, *, user_id: int, token: str, expires_at: datetime) -> None:
        stmt = sa.insert(user_sessions).values(
            user_id=user_id,
            session_token=token,
            expires_at=as_utc(expires_at),
            created_at=datetime.now(timezone.utc),
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc

    def find_by_token(self, token: str) -> Optional[SessionRow]:
        stmt = sa.select(user_sessions.c.user_id, user_sessions.c.session_token, user_sessions.c.expires_at).where(
            user_sessions.c.session_token == token
        )
        try:
            with self.engine.connect() as conn:
                r = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        if r is None:
            return None
        return SessionRow(
            user_id=int(r["user_id"]),
            session_token=str(r["session_token"]),
            expires_at=as_utc(r["expires_at"]),
        )

    def delete_by_token(self, token: str) -> None:
        try:
            with self.engine.begin() as conn:
                conn.execute(sa.delete(user_sessions).where(user_sessions.c.session_token == token))
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
