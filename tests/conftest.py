import os

# Cheap hashes and a throwaway database for the whole test run
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import get_db, init_db
from app.core.security import Identity
from app.main import app
from app.users.services.user_service import UserService
from tests.helpers.client_helpers import register

@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    init_db(bind=engine)
    yield engine
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
def make_identity(db):
    """Register a user and return its Identity."""
    def _make(username: str, password: str = "secret") -> Identity:
        user = UserService(db).register(username, f"{username}@example.com", password)
        return Identity(user_id=user.user_id, username=user.username)
    return _make

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
def auth_client(client):
    """A client logged in as ``alice``."""
    response = register(client, "alice")
    assert response.status_code == 303
    return client
