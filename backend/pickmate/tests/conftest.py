"""
Shared fixtures: an in-memory database per test and an API client bound to it.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
import pickmate.models  # noqa: F401
from pickmate.db.base import Base
from pickmate.db.session import get_db
from pickmate.main import app
from pickmate.models.user import User


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db):
    """Create users directly in the database for service-level tests."""
    counter = {"n": 0}

    def _make_user(display_name=None):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            email=f"user{n}@example.com",
            display_name=display_name or f"User {n}",
            hashed_password="not-a-real-hash"
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture
def auth_headers(client):
    """Sign up and log in through the API; returns bearer headers."""
    def _auth_headers(email, display_name="Tester", password="testpassword123"):
        client.post(
            "/api/auth/signup",
            json={"email": email, "display_name": display_name, "password": password}
        )
        response = client.post("/api/auth/login", json={"email": email, "password": password})
        token = response.json()["access_token"]
        return {"Authorization": f"Bearer {token}"}

    return _auth_headers
