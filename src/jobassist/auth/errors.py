# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

from typing import Optional


class AuthError(Exception):
    """Base class for errors surfaced by the account/session layer.

    Each subclass carries the HTTP status the web layer answers with and a
    fixed public message. The message never depends on which sub-case
    triggered the error.
    """

    status_code = 500
    message = "Authentication error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)

    @property
    def detail(self) -> str:
        return str(self)


class InvalidCredentials(AuthError):
    status_code = 401
    message = "Invalid email or password"


class InvalidSession(AuthError):
    status_code = 401
    message = "Invalid session token"


class SessionExpired(AuthError):
    status_code = 401
    message = "Session expired"


class DuplicateEmail(AuthError):
    status_code = 409
    message = "User with this email already exists"


class UserNotFound(AuthError):
    status_code = 404
    message = "User not found"


class InternalError(AuthError):
    status_code = 500
    message = "Internal error"


class CredentialHashingError(InternalError):
    message = "Password hashing failed"


class StoreError(Exception):
    """Storage fault raised by a User Store or Session Store."""


class StoreConflict(StoreError):
    """Uniqueness violation reported by a store."""


class SecretUnavailable(Exception):
    """A secret provider has no value for the requested secret."""
