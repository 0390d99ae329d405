import re
from dataclasses import replace
from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient

from jobassist.app import create_app

TOKEN_RE = re.compile(r"^[a-f0-9]{64}$")


def _register(client, email="alice@example.com", password="CorrectHorse1!", **extra):
    body = {"email": email, "name": "Alice", "password": password, **extra}
    return client.post("/auth/register", json=body)


def test_register_returns_public_user(client):
    r = _register(client, currentSalary=50000, location="Madrid")
    assert r.status_code == 201, r.text
    body = r.json()
    assert body["email"] == "alice@example.com"
    assert body["currentSalary"] == 50000
    assert "password_hash" not in body and "passwordHash" not in body


def test_register_duplicate_is_409(client):
    assert _register(client).status_code == 201
    r = _register(client)
    assert r.status_code == 409
    assert r.json()["detail"] == "User with this email already exists"


def test_login_sets_cookie_and_returns_token(client, settings):
    _register(client)
    r = client.post("/auth/login", json={"email": "alice@example.com", "password": "CorrectHorse1!"})
    assert r.status_code == 200, r.text
    body = r.json()
    assert TOKEN_RE.match(body["sessionToken"])
    assert body["user"]["email"] == "alice@example.com"
    assert settings.cookie_name in r.cookies

    me = client.get("/auth/me")
    assert me.status_code == 200
    assert me.json()["id"] == body["user"]["id"]


def test_bad_login_is_undifferentiated(client):
    _register(client)
    wrong = client.post("/auth/login", json={"email": "alice@example.com", "password": "wrong"})
    unknown = client.post("/auth/login", json={"email": "nobody@example.com", "password": "wrong"})
    assert wrong.status_code == unknown.status_code == 401
    assert wrong.json() == unknown.json() == {"detail": "Invalid email or password"}


def test_verify_and_logout_with_token(client):
    _register(client)
    token = client.post(
        "/auth/login", json={"email": "alice@example.com", "password": "CorrectHorse1!"}
    ).json()["sessionToken"]

    r = client.post("/auth/verify", json={"sessionToken": token})
    assert r.status_code == 200
    assert r.json()["user"]["email"] == "alice@example.com"

    r = client.post("/auth/logout", json={"sessionToken": token})
    assert r.json() == {"success": True}

    r = client.post("/auth/verify", json={"sessionToken": token})
    assert r.status_code == 401
    assert r.json()["detail"] == "Invalid session token"


def test_logout_via_cookie(client):
    _register(client)
    client.post("/auth/login", json={"email": "alice@example.com", "password": "CorrectHorse1!"})
    assert client.get("/auth/me").status_code == 200

    r = client.post("/auth/logout")
    assert r.status_code == 200
    client.cookies.clear()
    assert client.get("/auth/me").status_code == 401


def test_logout_unknown_token_is_ok(client):
    r = client.post("/auth/logout", json={"sessionToken": "0" * 64})
    assert r.status_code == 200


def test_bearer_token_and_user_profile(settings):
    app = create_app(settings)
    with TestClient(app) as c:
        uid = _register(c).json()["id"]
        other = _register(c, email="bob@example.com").json()["id"]
        token = c.post(
            "/auth/login", json={"email": "alice@example.com", "password": "CorrectHorse1!"}
        ).json()["sessionToken"]

    bare = TestClient(app)
    assert bare.get(f"/users/{uid}").status_code == 401

    headers = {"Authorization": f"Bearer {token}"}
    r = bare.get(f"/users/{uid}", headers=headers)
    assert r.status_code == 200
    assert r.json()["email"] == "alice@example.com"
    assert bare.get(f"/users/{other}", headers=headers).status_code == 403


def test_tampered_cookie_is_ignored(client, settings):
    _register(client)
    client.post("/auth/login", json={"email": "alice@example.com", "password": "CorrectHorse1!"})
    client.cookies.clear()
    client.cookies.set(settings.cookie_name, "tampered.value.sig")
    assert client.get("/auth/me").status_code == 401


def test_cookie_signed_with_other_key_is_ignored(client, settings):
    _register(client)
    client.post("/auth/login", json={"email": "alice@example.com", "password": "CorrectHorse1!"})
    cookie = client.cookies.get(settings.cookie_name)

    other = TestClient(create_app(replace(settings, secret_key="another-key")))
    other.cookies.set(settings.cookie_name, cookie)
    assert other.get("/auth/me").status_code == 401


def test_login_and_verify_return_identity_only(client):
    _register(client, currentSalary=50000, phone="+34 600 000 000", location="Madrid")
    r = client.post("/auth/login", json={"email": "alice@example.com", "password": "CorrectHorse1!"})
    assert r.status_code == 200
    assert set(r.json()["user"]) == {"id", "name", "email"}

    r = client.post("/auth/verify", json={"sessionToken": r.json()["sessionToken"]})
    assert r.status_code == 200
    assert set(r.json()["user"]) == {"id", "name", "email"}

    me = client.get("/auth/me").json()
    assert me["currentSalary"] == 50000 and me["location"] == "Madrid"


def test_missing_secret_key_fails_at_startup(settings, tmp_path):
    with pytest.raises(RuntimeError):
        create_app(replace(settings, secret_key=None))
    assert not (tmp_path / "jobassist.db").exists()


def test_expired_bearer_token_reports_session_expired(settings):
    app = create_app(settings)
    c = TestClient(app)
    uid = _register(c).json()["id"]
    token = "e" * 64
    app.state.auth.sessions.insert(
        user_id=uid, token=token, expires_at=datetime.now(timezone.utc) - timedelta(minutes=1)
    )

    r = c.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json() == {"detail": "Session expired"}

    r = c.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 401
    assert r.json() == {"detail": "Not authenticated"}
