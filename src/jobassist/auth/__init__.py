# Copyright (C) 2026 Bernardo Gómez Bey
# SPDX-License-Identifier: AGPL-3.0-or-later

"""Account authentication.

This package provides:
- Peppered Argon2id password hashing with legacy SHA-256 upgrade (argon2)
- Session issuance, validation and lazy expiry
- Pepper lookup from environment or data/secrets.yml
- Signed session cookies (itsdangerous)
"""
