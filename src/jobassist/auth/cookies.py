# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional

from itsdangerous import BadSignature, BadTimeSignature, URLSafeTimedSerializer

SESSION_SALT = "jobassist.session.v1"


class SessionCookieSigner:
    """Wraps the opaque session token in a signed, timestamped cookie value."""

    def __init__(self, secret_key: Optional[str], *, max_age: int) -> None:
        if not secret_key:
            raise RuntimeError("Missing SECRET_KEY (or JOBASSIST_SECRET_KEY) in environment")
        self._serializer = URLSafeTimedSerializer(secret_key=secret_key, salt=SESSION_SALT)
        self.max_age = max_age

    def sign(self, token: str) -> str:
        return self._serializer.dumps({"t": token})

    def unsign(self, value: str) -> Optional[str]:
        if not value:
            return None
        try:
            data = self._serializer.loads(value, max_age=self.max_age)
        except (BadSignature, BadTimeSignature):
            return None
        token = str((data or {}).get("t") or "").strip()
        return token or None
