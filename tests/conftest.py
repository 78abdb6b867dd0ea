from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bloodlink import database, models, users
from bloodlink.tokens import TokenService, get_token_service


class FakeClock:
    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


@pytest.fixture
def engine():
    eng = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    models.Base.metadata.create_all(bind=eng)
    yield eng
    eng.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def token_service(clock):
    return TokenService("test-secret", ttl=timedelta(hours=5), clock=clock)


@pytest.fixture
def make_user(db):
    counter = {"n": 0}

    def _make(name="Test User", email=None, password="secret1", role="donor", **extra):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        payload = {"name": name, "email": email, "password": password, **extra}
        if role == "admin":
            return users.create_admin(db, payload)
        return users.register(db, {**payload, "role": role})

    return _make


@pytest.fixture
def client(session_factory, token_service):
    from main import app

    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[database.get_db] = override_get_db
    app.dependency_overrides[get_token_service] = lambda: token_service
    yield TestClient(app)
    app.dependency_overrides.clear()
