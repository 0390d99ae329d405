# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Protocol


@dataclass(frozen=True)
class UserRow:
    id: int
    email: str
    name: str
    password_hash: str
    phone: Optional[str] = None
    location: Optional[str] = None
    current_salary: Optional[int] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass(frozen=True)
class SessionRow:
    user_id: int
    session_token: str
    expires_at: datetime


@dataclass(frozen=True)
class PublicUser:
    """User fields that may leave the service. Never carries the hash."""

    id: int
    name: str
    email: str
    phone: Optional[str] = None
    location: Optional[str] = None
    current_salary: Optional[int] = None

    @classmethod
    def from_row(cls, row: UserRow) -> "PublicUser":
        return cls(
            id=row.id,
            name=row.name,
            email=row.email,
            phone=row.phone,
            location=row.location,
            current_salary=row.current_salary,
        )

    def identity(self) -> dict:
        """Minimal identity returned by login and session checks."""
        return {"id": self.id, "name": self.name, "email": self.email}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "location": self.location,
            "currentSalary": self.current_salary,
        }


@dataclass(frozen=True)
class LoginResult:
    user: PublicUser
    session_token: str


class UserStore(Protocol):
    def find_by_email(self, email: str) -> Optional[UserRow]: ...

    def find_by_id(self, user_id: int) -> Optional[UserRow]: ...

    def insert(
        self,
        *,
        email: str,
        name: str,
        password_hash: str,
        phone: Optional[str] = None,
        location: Optional[str] = None,
        current_salary: Optional[int] = None,
    ) -> UserRow: ...

    def update_hash(self, user_id: int, new_hash: str) -> None: ...


class SessionStore(Protocol):
    def insert(self, *, user_id: int, token: str, expires_at: datetime) -> None: ...

    def find_by_token(self, token: str) -> Optional[SessionRow]: ...

    def delete_by_token(self, token: str) -> None: ...
