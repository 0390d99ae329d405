#!/usr/bin/env python3
from __future__ import annotations

from getpass import getpass

from jobassist.app import build_auth_service
from jobassist.auth.errors import DuplicateEmail
from jobassist.config import Settings


def main() -> None:
    settings = Settings.from_env()
    service = build_auth_service(settings)

    email = input("Email: ").strip()
    name = input("Name: ").strip()
    location = input("Location (optional): ").strip() or None

    pw1 = getpass("Password: ")
    pw2 = getpass("Repeat password: ")
    if pw1 != pw2:
        raise SystemExit("Passwords do not match")
    if not pw1:
        raise SystemExit("Password must not be empty")

    try:
        user = service.create_account(email, name, pw1, location=location)
    except DuplicateEmail as exc:
        raise SystemExit(str(exc))
    print(f"OK -> user {user.id} <{user.email}> in {settings.database_url}")


if __name__ == "__main__":
    main()
