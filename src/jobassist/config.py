# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from pathlib import Path
from typing import Optional


def _env_bool(name: str, default: str = "false") -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "y"}


@dataclass(frozen=True)
class Settings:
    database_url: str = "sqlite:///data/jobassist.db"
    secrets_path: Path = Path("data/secrets.yml")
    # None means "ask the secret providers"; a value here wins over them.
    pepper: Optional[str] = None
    secret_key: Optional[str] = None
    session_days: int = 30
    cookie_name: str = "jobassist_session"
    cookie_secure: bool = False

    @property
    def session_lifetime(self) -> timedelta:
        return timedelta(days=self.session_days)

    @classmethod
    def from_env(cls) -> "Settings":
        return cls(
            database_url=os.getenv("JOBASSIST_DATABASE_URL", cls.database_url),
            secrets_path=Path(os.getenv("JOBASSIST_SECRETS_PATH", str(cls.secrets_path))),
            secret_key=os.getenv("SECRET_KEY") or os.getenv("JOBASSIST_SECRET_KEY"),
            session_days=int(os.getenv("JOBASSIST_SESSION_DAYS", str(cls.session_days))),
            cookie_name=os.getenv("JOBASSIST_COOKIE_NAME", cls.cookie_name),
            cookie_secure=_env_bool("JOBASSIST_COOKIE_SECURE"),
        )
