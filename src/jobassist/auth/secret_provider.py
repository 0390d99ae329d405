# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Protocol

import yaml

from jobassist.auth.errors import SecretUnavailable

logger = logging.getLogger(__name__)

PEPPER_ENV_VAR = "JOBASSIST_PASSWORD_PEPPER"
PEPPER_KEY = "password_pepper"

# Used when no provider has a pepper configured.
DEFAULT_PEPPER = ""


class SecretProvider(Protocol):
    def get_pepper(self) -> str:
        """Return the password pepper or raise SecretUnavailable."""


class EnvSecretProvider:
    def __init__(self, var: str = PEPPER_ENV_VAR) -> None:
        self.var = var

    def get_pepper(self) -> str:
        value = os.getenv(self.var)
        if value is None:
            raise SecretUnavailable(f"{self.var} is not set")
        return value


class YamlSecretProvider:
    """Reads secrets from a YAML file, e.g.::

        version: 1
        password_pepper: "..."

    A missing file or key means "not configured". A file that exists but
    cannot be parsed is an error.
    """

    def __init__(self, path: Path) -> None:
        self.path = Path(path)

    def _load(self) -> dict:
        if not self.path.exists():
            raise SecretUnavailable(f"secrets file not found: {self.path}")
        raw = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        if not isinstance(raw, dict):
            raise ValueError(f"secrets file must contain a mapping: {self.path}")
        return raw

    def get_pepper(self) -> str:
        value = self._load().get(PEPPER_KEY)
        if value is None:
            raise SecretUnavailable(f"'{PEPPER_KEY}' missing in {self.path}")
        return str(value)


class ChainSecretProvider:
    """Ask each provider in order; the first that has a value wins."""

    def __init__(self, *providers: SecretProvider) -> None:
        self.providers = providers

    def get_pepper(self) -> str:
        for provider in self.providers:
            try:
                return provider.get_pepper()
            except SecretUnavailable:
                continue
        raise SecretUnavailable("no provider has a password pepper")


def resolve_pepper(provider: SecretProvider) -> str:
    """Fetch the pepper once at startup, falling back to DEFAULT_PEPPER."""
    try:
        return provider.get_pepper()
    except SecretUnavailable as exc:
        logger.warning(
            "password pepper not configured, using default",
            extra={"event": "pepper_fallback", "reason": str(exc)},
        )
        return DEFAULT_PEPPER
