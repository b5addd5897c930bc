"""Shared fixtures: in-memory database, API client and ready-made users."""

import os

os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("SECRET_KEY", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from datetime import datetime

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from ciao.database import get_session
from ciao.mailer import LoggingMailer, get_mailer
from ciao.main import app
from ciao.models import User, UserRole
from ciao.security import create_access_token, get_password_hash

PASSWORD = "correct horse"


@pytest.fixture(name="engine")
def engine_fixture():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="mailer")
def mailer_fixture():
    return LoggingMailer()


@pytest.fixture(name="client")
def client_fixture(session, mailer):
    app.dependency_overrides[get_session] = lambda: session
    app.dependency_overrides[get_mailer] = lambda: mailer
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="make_user")
def make_user_fixture(session):
    def _make_user(email, name=None, role=UserRole.STUDENT, verified=True):
        user = User(
            email=email,
            name=name or email.split("@")[0].title(),
            hashed_password=get_password_hash(PASSWORD),
            role=role,
            email_verified=datetime.utcnow() if verified else None,
        )
        session.add(user)
        session.commit()
        session.refresh(user)
        return user
    return _make_user


def auth(user):
    """Bearer header for ``user``."""
    return {"Authorization": f"Bearer {create_access_token({'sub': str(user.id)})}"}


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com")


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com")


@pytest.fixture
def carol(make_user):
    return make_user("carol@example.com")


@pytest.fixture
def board(client, alice):
    """A board created by alice through the API."""
    resp = client.post("/boards", json={"title": "Thesis", "description": "Final year"}, headers=auth(alice))
    assert resp.status_code == 201
    return resp.json()
