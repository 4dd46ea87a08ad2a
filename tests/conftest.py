import os

# Settings are read on first import of the app modules
os.environ.setdefault("EXPENSO_DATABASE_URL", "sqlite://")
os.environ.setdefault("EXPENSO_BCRYPT_ROUNDS", "4")
os.environ.setdefault("EXPENSO_PURGE_TOKENS", "false")
os.environ.setdefault("EXPENSO_JWT_SECRET", "test-secret")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from database import get_db, init_db
from main import app


@pytest.fixture
def session_factory():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    factory = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    yield factory
    engine.dispose()


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    yield db
    db.close()


@pytest.fixture
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def register(client, name="Ada", email="ada@example.com", password="secret123"):
    response = client.post(
        "/auth/register", json={"name": name, "email": email, "password": password}
    )
    assert response.status_code == 201, response.text
    return response.json()


def auth_headers(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def user(client):
    """A registered user; ``headers`` authenticates as them."""
    data = register(client)
    data["headers"] = auth_headers(data["token"])
    return data


@pytest.fixture
def other_user(client):
    data = register(client, name="Grace", email="grace@example.com")
    data["headers"] = auth_headers(data["token"])
    return data
