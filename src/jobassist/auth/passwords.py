# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Peppered Argon2id password hashing with legacy SHA-256 recognition.

Stored hashes carry no explicit scheme tag. ``parse_hash_scheme`` derives
one from the shape of the stored string:

- ``$argon2id$...``          -> :class:`Argon2idHash` (current scheme)
- 64 lowercase hex chars     -> :class:`LegacySha256Hash` (retired scheme)
- anything else              -> :class:`UnknownHash` (never verifies)

New hashes are always Argon2id over ``password + pepper``.
"""

from __future__ import annotations

import hashlib
import hmac
import logging
import re
from dataclasses import dataclass
from typing import Union

from argon2 import PasswordHasher, Type
from argon2.exceptions import HashingError, InvalidHashError, VerificationError, VerifyMismatchError

from jobassist.auth.errors import CredentialHashingError

logger = logging.getLogger(__name__)

TIME_COST = 3
MEMORY_COST = 65536  # KiB (64 MiB)
PARALLELISM = 1

ARGON2ID_PREFIX = "$argon2id$"
_LEGACY_RE = re.compile(r"[0-9a-f]{64}")

SCHEME_ARGON2ID = "argon2id"
SCHEME_LEGACY_SHA256 = "legacy_sha256"
SCHEME_UNKNOWN = "unknown"


@dataclass(frozen=True)
class Argon2idHash:
    encoded: str
    scheme = SCHEME_ARGON2ID


@dataclass(frozen=True)
class LegacySha256Hash:
    hexdigest: str
    scheme = SCHEME_LEGACY_SHA256


@dataclass(frozen=True)
class UnknownHash:
    raw: str
    scheme = SCHEME_UNKNOWN


HashScheme = Union[Argon2idHash, LegacySha256Hash, UnknownHash]


@dataclass(frozen=True)
class HashCheck:
    """Outcome of checking a password against a stored hash."""

    ok: bool
    scheme: str
    needs_upgrade: bool = False


def parse_hash_scheme(stored: str) -> HashScheme:
    s = stored or ""
    if s.startswith(ARGON2ID_PREFIX):
        return Argon2idHash(encoded=s)
    if _LEGACY_RE.fullmatch(s):
        return LegacySha256Hash(hexdigest=s)
    return UnknownHash(raw=s)


def legacy_sha256(password: str) -> str:
    """Unsalted, unpeppered SHA-256 hex digest of the retired scheme.

    Only used to recognise old stored values. Never used to store anything.
    """
    return hashlib.sha256(password.encode("utf-8", "surrogatepass")).hexdigest()


class CredentialHasher:
    """Argon2id hashing of ``password + pepper`` with fixed cost parameters."""

    def __init__(
        self,
        pepper: str = "",
        *,
        time_cost: int = TIME_COST,
        memory_cost: int = MEMORY_COST,
        parallelism: int = PARALLELISM,
    ) -> None:
        self._ph = PasswordHasher(
            time_cost=time_cost,
            memory_cost=memory_cost,
            parallelism=parallelism,
            type=Type.ID,
        )
        self._pepper = pepper or ""

    def _with_pepper(self, password: str) -> bytes:
        # Lone surrogates must encode too.
        return f"{password}{self._pepper}".encode("utf-8", "surrogatepass")

    def hash(self, password: str) -> str:
        try:
            return self._ph.hash(self._with_pepper(password))
        except HashingError as exc:
            raise CredentialHashingError() from exc

    def verify(self, password: str, stored_hash: str) -> bool:
        """Return True only when ``password`` matches ``stored_hash``.

        Mismatches and broken hashes both read as False. Broken hashes are
        logged so a corrupt row is visible without failing the request.
        """
        if not stored_hash:
            return False
        try:
            return self._ph.verify(stored_hash, self._with_pepper(password))
        except VerifyMismatchError:
            return False
        except InvalidHashError:
            logger.warning(
                "stored password hash could not be parsed",
                extra={"event": "credential_verify_error", "reason": "invalid_hash"},
            )
            return False
        except (VerificationError, ValueError) as exc:
            logger.warning(
                "password verification failed internally",
                extra={"event": "credential_verify_error", "reason": type(exc).__name__},
            )
            return False

    def verify_legacy(self, password: str, stored_hash: str) -> bool:
        return hmac.compare_digest(legacy_sha256(password).encode("ascii"), (stored_hash or "").encode("utf-8"))

    def check(self, password: str, stored_hash: str) -> HashCheck:
        """Verify against whichever scheme ``stored_hash`` belongs to.

        A legacy match is reported with ``needs_upgrade=True``; the caller
        owns the rewrite of the stored value.
        """
        parsed = parse_hash_scheme(stored_hash)
        if isinstance(parsed, Argon2idHash):
            return HashCheck(ok=self.verify(password, parsed.encoded), scheme=parsed.scheme)
        if isinstance(parsed, LegacySha256Hash):
            ok = self.verify_legacy(password, parsed.hexdigest)
            return HashCheck(ok=ok, scheme=parsed.scheme, needs_upgrade=ok)
        logger.warning(
            "stored password hash has an unrecognised format",
            extra={"event": "credential_verify_error", "reason": "unknown_scheme"},
        )
        return HashCheck(ok=False, scheme=parsed.scheme)
