# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Account creation, login and session validation.

Login path: look the user up by email, check the password against the
stored hash (Argon2id, or the legacy SHA-256 digest which is rewritten on
success), then persist a fresh session row and only then hand its token
back. Sessions expire lazily: an expired row is deleted the first time
someone presents its token.
"""

from __future__ import annotations

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Callable, Optional

from jobassist.auth.errors import (
    DuplicateEmail,
    InternalError,
    InvalidCredentials,
    InvalidSession,
    SessionExpired,
    StoreConflict,
    StoreError,
    UserNotFound,
)
from jobassist.auth.models import LoginResult, PublicUser, SessionStore, UserStore
from jobassist.auth.passwords import CredentialHasher

logger = logging.getLogger(__name__)

SESSION_LIFETIME = timedelta(days=30)
TOKEN_BYTES = 32


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_session_token() -> str:
    """64 lowercase hex chars from the OS CSPRNG."""
    return secrets.token_hex(TOKEN_BYTES)


def normalize_email(email: str) -> str:
    return str(email or "").strip().lower()


def _token_hint(token: str) -> str:
    return (token or "")[:8]


class SessionService:
    def __init__(
        self,
        users: UserStore,
        sessions: SessionStore,
        hasher: CredentialHasher,
        *,
        session_lifetime: timedelta = SESSION_LIFETIME,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.users = users
        self.sessions = sessions
        self.hasher = hasher
        self.session_lifetime = session_lifetime
        self.clock = clock
        self._dummy: Optional[str] = None

    def _dummy_hash(self) -> str:
        if self._dummy is None:
            self._dummy = self.hasher.hash(secrets.token_hex(16))
        return self._dummy

    # ------------------ Accounts ------------------

    def create_account(
        self,
        email: str,
        name: str,
        password: str,
        *,
        phone: Optional[str] = None,
        location: Optional[str] = None,
        current_salary: Optional[int] = None,
    ) -> PublicUser:
        email = normalize_email(email)
        try:
            existing = self.users.find_by_email(email)
        except StoreError as exc:
            raise InternalError() from exc
        if existing is not None:
            raise DuplicateEmail()

        password_hash = self.hasher.hash(password)

        try:
            row = self.users.insert(
                email=email,
                name=name,
                password_hash=password_hash,
                phone=phone,
                location=location,
                current_salary=current_salary,
            )
        except StoreConflict as exc:
            # Lost the race against a concurrent registration.
            raise DuplicateEmail() from exc
        except StoreError as exc:
            raise InternalError() from exc

        logger.info("account created", extra={"event": "account_created", "user_id": row.id})
        return PublicUser.from_row(row)

    def get_user(self, user_id: int) -> PublicUser:
        try:
            row = self.users.find_by_id(user_id)
        except StoreError as exc:
            raise InternalError() from exc
        if row is None:
            raise UserNotFound()
        return PublicUser.from_row(row)

    # ------------------ Login ------------------

    def authenticate(self, email: str, password: str) -> LoginResult:
        try:
            user = self.users.find_by_email(normalize_email(email))
        except StoreError as exc:
            raise InternalError() from exc
        if user is None:
            # Unknown emails pay the same Argon2 cost as known ones.
            self.hasher.verify(password, self._dummy_hash())
            raise InvalidCredentials()

        check = self.hasher.check(password, user.password_hash)
        if not check.ok:
            logger.info("login rejected", extra={"event": "login_rejected", "user_id": user.id})
            raise InvalidCredentials()

        if check.needs_upgrade:
            self._upgrade_hash(user.id, password)

        token = new_session_token()
        expires_at = self.clock() + self.session_lifetime
        try:
            self.sessions.insert(user_id=user.id, token=token, expires_at=expires_at)
        except StoreError as exc:
            raise InternalError() from exc

        logger.info(
            "session issued",
            extra={"event": "session_issued", "user_id": user.id, "scheme": check.scheme},
        )
        return LoginResult(user=PublicUser.from_row(user), session_token=token)

    def _upgrade_hash(self, user_id: int, password: str) -> None:
        """Rewrite a legacy hash as Argon2id. A failed write leaves the login intact."""
        new_hash = self.hasher.hash(password)
        try:
            self.users.update_hash(user_id, new_hash)
        except StoreError:
            logger.warning(
                "legacy password hash upgrade failed",
                extra={"event": "hash_upgrade_failed", "user_id": user_id},
                exc_info=True,
            )
            return
        logger.info("legacy password hash upgraded", extra={"event": "hash_upgraded", "user_id": user_id})

    # ------------------ Sessions ------------------

    def verify_session(self, token: str) -> PublicUser:
        if not token:
            raise InvalidSession()
        try:
            session = self.sessions.find_by_token(token)
        except StoreError as exc:
            raise InternalError() from exc
        if session is None:
            raise InvalidSession()

        if self.clock() > session.expires_at:
            try:
                self.sessions.delete_by_token(token)
            except StoreError as exc:
                raise InternalError() from exc
            logger.info(
                "expired session removed",
                extra={"event": "session_expired", "user_id": session.user_id, "token": _token_hint(token)},
            )
            raise SessionExpired()

        try:
            user = self.users.find_by_id(session.user_id)
        except StoreError as exc:
            raise InternalError() from exc
        if user is None:
            logger.warning(
                "session points to a missing user",
                extra={"event": "session_orphaned", "user_id": session.user_id},
            )
            raise InvalidSession()
        return PublicUser.from_row(user)

    def invalidate_session(self, token: str) -> None:
        """Delete the session row for ``token``. Never raises."""
        if not token:
            return
        try:
            self.sessions.delete_by_token(token)
        except StoreError:
            logger.warning(
                "session delete failed on logout",
                extra={"event": "logout_failed", "token": _token_hint(token)},
                exc_info=True,
            )

    # Names used by the HTTP layer.
    register = create_account
    login = authenticate
    logout = invalidate_session
