"""Signup, email verification, login, account settings and deletion."""

from datetime import datetime, timedelta

from sqlmodel import select

from ciao.models import Board, BoardMember, Task, User, UserRole, UserSettings, VerificationToken
from ciao.security import create_access_token
from tests.conftest import PASSWORD, auth


def _signup(client, email="dana@example.com", **extra):
    payload = {"email": email, "name": "Dana", "password": "s3cret-pass", **extra}
    return client.post("/auth/signup", json=payload)


def _token_for(session, email):
    return session.exec(select(VerificationToken).where(VerificationToken.identifier == email)).all()


# ━━━ signup / verification ━━━


def test_signup_creates_unverified_user_and_mails_link(client, session, mailer):
    resp = _signup(client, email="Dana@Example.com")
    assert resp.status_code == 201
    body = resp.json()
    assert body["email"] == "dana@example.com"
    assert body["role"] == "student"
    assert body["email_verified"] is None
    assert "hashed_password" not in body

    tokens = _token_for(session, "dana@example.com")
    assert len(tokens) == 1
    assert [m.to for m in mailer.outbox] == ["dana@example.com"]
    assert tokens[0].token in mailer.outbox[0].body


def test_signup_rejects_duplicates_and_bad_role(client):
    assert _signup(client).status_code == 201
    assert _signup(client, email="DANA@example.com").status_code == 400
    assert _signup(client, email="eve@example.com", role="lecturer").status_code == 400


def test_login_requires_verified_email(client, session):
    _signup(client)
    resp = client.post("/auth/login", json={"email": "dana@example.com", "password": "s3cret-pass"})
    assert resp.status_code == 403

    token = _token_for(session, "dana@example.com")[0].token
    resp = client.get("/auth/verify-email", params={"token": token})
    assert resp.status_code == 200
    assert resp.json()["success"] is True

    resp = client.post("/auth/login", json={"email": "dana@example.com", "password": "s3cret-pass"})
    assert resp.status_code == 200
    access_token = resp.json()["access_token"]
    me = client.get("/auth/me", headers={"Authorization": f"Bearer {access_token}"})
    assert me.json()["email"] == "dana@example.com"


def test_login_with_wrong_password(client, alice):
    resp = client.post("/auth/login", json={"email": alice.email, "password": "nope"})
    assert resp.status_code == 401
    resp = client.post("/auth/login", json={"email": "ghost@example.com", "password": PASSWORD})
    assert resp.status_code == 401
    assert client.post("/auth/login", json={"email": alice.email, "password": PASSWORD}).status_code == 200


def test_resend_rotates_token(client, session, mailer):
    _signup(client)
    first = _token_for(session, "dana@example.com")[0].token

    resp = client.post("/auth/verify-email/send", json={"email": "dana@example.com"})
    assert resp.status_code == 200
    tokens = _token_for(session, "dana@example.com")
    assert len(tokens) == 1
    assert tokens[0].token != first
    assert len(mailer.outbox) == 2

    assert client.get("/auth/verify-email", params={"token": first}).status_code == 400
    assert client.get("/auth/verify-email", params={"token": tokens[0].token}).status_code == 200


def test_verification_token_is_single_use(client, session):
    _signup(client)
    token = _token_for(session, "dana@example.com")[0].token

    assert client.get("/auth/verify-email", params={"token": token}).status_code == 200
    assert client.get("/auth/verify-email", params={"token": token}).status_code == 400
    assert client.post("/auth/verify-email/send", json={"email": "dana@example.com"}).status_code == 400


def test_expired_token_is_discarded(client, session):
    _signup(client)
    record = _token_for(session, "dana@example.com")[0]
    record.expires = datetime.utcnow() - timedelta(minutes=1)
    session.add(record)
    session.commit()
    token = record.token

    assert client.get("/auth/verify-email", params={"token": token}).status_code == 400
    assert _token_for(session, "dana@example.com") == []
    user = session.exec(select(User).where(User.email == "dana@example.com")).one()
    assert user.email_verified is None


def test_verification_edge_cases(client):
    assert client.get("/auth/verify-email").status_code == 400
    assert client.post("/auth/verify-email/send", json={"email": "ghost@example.com"}).status_code == 404


# ━━━ tokens ━━━


def test_expired_or_orphaned_jwt_is_rejected(client, alice):
    expired = create_access_token({"sub": str(alice.id)}, expires_delta=timedelta(minutes=-1))
    assert client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"}).status_code == 401

    ghost = create_access_token({"sub": "4242"})
    assert client.get("/auth/me", headers={"Authorization": f"Bearer {ghost}"}).status_code == 401


def test_role_is_read_from_database(client, session, alice):
    headers = auth(alice)
    assert client.post("/projects", json={"title": "Site"}, headers=headers).status_code == 403

    resp = client.put("/account/role", json={"role": "freelancer"}, headers=headers)
    assert resp.status_code == 200
    assert resp.json()["role"] == "freelancer"

    # Same token, new role
    assert client.post("/projects", json={"title": "Site"}, headers=headers).status_code == 201
    assert client.put("/account/role", json={"role": "admin"}, headers=headers).status_code == 400


# ━━━ settings / deletion ━━━


def test_settings_defaults_and_update(client, alice):
    resp = client.get("/account/settings", headers=auth(alice))
    assert resp.json()["email_notifications"] is True
    assert resp.json()["theme"] == "system"

    resp = client.patch("/account/settings", json={"email_notifications": False}, headers=auth(alice))
    assert resp.json()["email_notifications"] is False
    assert resp.json()["theme"] == "system"


def test_delete_account_removes_owned_data(client, session, alice, bob):
    alice_headers, alice_id = auth(alice), alice.id
    own = client.post("/boards", json={"title": "Mine"}, headers=alice_headers).json()
    shared = client.post("/boards", json={"title": "Bob's"}, headers=auth(bob)).json()
    client.post(f"/boards/{shared['id']}/members", json={"email": alice.email, "role": "editor"}, headers=auth(bob))
    task = client.post(
        f"/columns/{shared['columns'][0]['id']}/tasks", json={"title": "by alice"}, headers=alice_headers
    ).json()
    kept = client.post(
        f"/columns/{shared['columns'][0]['id']}/tasks",
        json={"title": "by bob", "assignee_ids": [alice_id, bob.id]},
        headers=auth(bob),
    ).json()
    client.post(f"/tasks/{kept['id']}/comments", json={"content": "mine"}, headers=alice_headers)
    client.post("/assignments", json={"title": "Essay"}, headers=alice_headers)
    client.patch("/account/settings", json={"theme": "dark"}, headers=alice_headers)

    assert client.delete("/account", headers=alice_headers).status_code == 200

    assert session.get(User, alice_id) is None
    assert session.get(Board, own["id"]) is None
    assert session.get(Task, task["id"]) is None
    assert session.get(UserSettings, alice_id) is None
    assert session.exec(select(BoardMember).where(BoardMember.user_id == alice_id)).all() == []
    remaining = client.get(f"/tasks/{kept['id']}", headers=auth(bob)).json()
    assert remaining["comments"] == []
    assert [u["id"] for u in remaining["assignees"]] == [bob.id]
    assert client.get("/auth/me", headers=alice_headers).status_code == 401


def test_signup_as_freelancer(client):
    resp = _signup(client, role=UserRole.FREELANCER.value)
    assert resp.json()["role"] == "freelancer"
