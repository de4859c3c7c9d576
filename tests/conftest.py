"""
Shared fixtures: an in-memory SQLite database per test, wired into the app
through the get_db dependency, plus helpers to create accounts and log in.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from maladireta.core.db import Base, get_db
from maladireta.main import app
from maladireta.services import accounts, mailer
from maladireta.services.bootstrap_db import create_all


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    create_all(bind=engine)
    factory = sessionmaker(bind=engine, autoflush=False, autocommit=False, future=True)
    yield factory
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def db(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client(session_factory):
    def _get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = _get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def sent_mail(monkeypatch):
    """Replace SMTP delivery with an in-memory outbox."""
    outbox = []

    def _send(settings, to, subject, body):
        outbox.append({"host": settings.smtp_host, "to": to, "subject": subject, "body": body})

    monkeypatch.setattr(mailer, "send_mail", _send)
    return outbox


def auth_headers(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def register(client, username: str, email: str = None, password: str = "pw123456") -> dict:
    r = client.post(
        "/api/register",
        json={"username": username, "email": email or f"{username}@x.com", "password": password},
    )
    assert r.status_code == 201, r.text
    return auth_headers(r.json()["token"])


def login(client, username: str, password: str = "pw123456") -> dict:
    r = client.post("/api/login", json={"username": username, "password": password})
    assert r.status_code == 200, r.text
    return auth_headers(r.json()["token"])


@pytest.fixture
def admin_headers(client, db):
    accounts.create_account_as_admin(
        db, username="root", email="root@x.com", password="admin123", role="admin"
    )
    return login(client, "root", "admin123")
