import os
import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# must be in place before taskmanager.core.config is imported
os.environ["ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.pop("DB_SSLMODE", None)
os.environ.setdefault("JWT_SECRET_KEY", "test-secret")
os.environ["BCRYPT_ROUNDS"] = "4"

from fastapi.testclient import TestClient  # noqa: E402
from sqlmodel import Session, SQLModel, create_engine  # noqa: E402
from sqlmodel.pool import StaticPool  # noqa: E402

from taskmanager.db.session import get_session  # noqa: E402
from taskmanager.main import app  # noqa: E402
from taskmanager.services import auth_service  # noqa: E402


@pytest.fixture(name="session")
def session_fixture():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        yield session
    engine.dispose()


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        yield session

    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(session: Session):
    """Register a user through the service; returns (token, user)."""

    def _make(username: str = "alice", email: str | None = None, password: str = "password123"):
        return auth_service.register_user(
            session,
            {
                "username": username,
                "email": email or f"{username}@example.com",
                "password": password,
            },
        )

    return _make


@pytest.fixture
def auth_headers(make_user):
    token, _ = make_user()
    return {"Authorization": f"Bearer {token}"}
