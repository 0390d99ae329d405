# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Mapping, Optional

import sqlalchemy as sa
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from jobassist.auth.errors import StoreConflict, StoreError
from jobassist.auth.models import UserRow
from jobassist.infra.db import as_utc, users


def _row_to_user(r: Mapping[str, Any]) -> UserRow:
    return UserRow(
        id=int(r["id"]),
        email=str(r["email"]),
        name=str(r["name"]),
        password_hash=str(r["password_hash"] or ""),
        phone=r["phone"],
        location=r["location"],
        current_salary=r["current_salary"],
        created_at=as_utc(r["created_at"]),
        updated_at=as_utc(r["updated_at"]),
    )


class SqlUserStore:
    """User Store over the ``users`` table."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine

    def _fetch_one(self, stmt) -> Optional[UserRow]:
        try:
            with self.engine.connect() as conn:
                r = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        return _row_to_user(r) if r is not None else None

    def find_by_email(self, email: str) -> Optional[UserRow]:
        return self._fetch_one(sa.select(users).where(users.c.email == email))

    def find_by_id(self, user_id: int) -> Optional[UserRow]:
        return self._fetch_one(sa.select(users).where(users.c.id == user_id))

    def insert(
        self,
        *,
        email: str,
        name: str,
        password_hash: str,
        phone: Optional[str] = None,
        location: Optional[str] = None,
        current_salary: Optional[int] = None,
    ) -> UserRow:
        now = datetime.now(timezone.utc)
        stmt = sa.insert(users).values(
            email=email,
            name=name,
            password_hash=password_hash,
            phone=phone or None,
            location=location or None,
            current_salary=current_salary,
            created_at=now,
            updated_at=now,
        )
        try:
            with self.engine.begin() as conn:
                new_id = conn.execute(stmt).inserted_primary_key[0]
                r = conn.execute(sa.select(users).where(users.c.id == new_id)).mappings().one()
        except IntegrityError as exc:
            raise StoreConflict(f"email already registered: {email}") from exc
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
        return _row_to_user(r)

    def update_hash(self, user_id: int, new_hash: str) -> None:
        stmt = (
            sa.update(users)
            .where(users.c.id == user_id)
            .values(password_hash=new_hash, updated_at=datetime.now(timezone.utc))
        )
        try:
            with self.engine.begin() as conn:
                conn.execute(stmt)
        except SQLAlchemyError as exc:
            raise StoreError(str(exc)) from exc
