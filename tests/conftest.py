import sys
from pathlib import Path as _Path
sys.path.insert(0, str(_Path(__file__).resolve().parents[1] / "src"))

from dataclasses import replace
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Optional

import pytest
from fastapi.testclient import TestClient

from jobassist.app import build_auth_service, create_app
from jobassist.auth.errors import StoreConflict
from jobassist.auth.models import SessionRow, UserRow
from jobassist.config import Settings


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return Settings(
        database_url=f"sqlite:///{tmp_path / 'jobassist.db'}",
        secrets_path=tmp_path / "secrets.yml",
        pepper="PEPPER",
        secret_key="test-secret-key",
    )


@pytest.fixture()
def service(settings: Settings):
    return build_auth_service(settings)


@pytest.fixture()
def unpeppered_service(settings: Settings):
    return build_auth_service(replace(settings, pepper=""))


@pytest.fixture()
def client(settings: Settings) -> TestClient:
    return TestClient(create_app(settings))


class FakeUserStore:
    """In-memory User Store. Tests swap methods to inject faults."""

    def __init__(self) -> None:
        self.rows: Dict[int, UserRow] = {}
        self._next_id = 1

    def find_by_email(self, email: str) -> Optional[UserRow]:
        return next((r for r in self.rows.values() if r.email == email), None)

    def find_by_id(self, user_id: int) -> Optional[UserRow]:
        return self.rows.get(user_id)

    def insert(self, *, email, name, password_hash, phone=None, location=None, current_salary=None) -> UserRow:
        if self.find_by_email(email) is not None:
            raise StoreConflict(email)
        row = UserRow(
            id=self._next_id,
            email=email,
            name=name,
            password_hash=password_hash,
            phone=phone,
            location=location,
            current_salary=current_salary,
            created_at=datetime.now(timezone.utc),
        )
        self.rows[row.id] = row
        self._next_id += 1
        return row

    def update_hash(self, user_id: int, new_hash: str) -> None:
        self.rows[user_id] = replace(self.rows[user_id], password_hash=new_hash)


class FakeSessionStore:
    def __init__(self) -> None:
        self.rows: Dict[str, SessionRow] = {}

    def insert(self, *, user_id: int, token: str, expires_at: datetime) -> None:
        self.rows[token] = SessionRow(user_id=user_id, session_token=token, expires_at=expires_at)

    def find_by_token(self, token: str) -> Optional[SessionRow]:
        return self.rows.get(token)

    def delete_by_token(self, token: str) -> None:
        self.rows.pop(token, None)


@pytest.fixture()
def fake_users() -> FakeUserStore:
    return FakeUserStore()


@pytest.fixture()
def fake_sessions() -> FakeSessionStore:
    return FakeSessionStore()
