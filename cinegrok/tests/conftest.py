"""
Pytest fixtures for CineGrok API tests.
Uses in-memory SQLite, mocks Redis, provides test user, auth token and filmmaker factory.
"""
import os
from datetime import datetime, timedelta

import pytest
from unittest.mock import AsyncMock, patch
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Use in-memory SQLite for tests - set before config/session load
# Must override any .env DATABASE_URL
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["REDIS_URL"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["INGEST_API_KEY"] = ""
os.environ["AWS_ACCESS_KEY_ID"] = ""
os.environ["AWS_SECRET_ACCESS_KEY"] = ""

from cinegrok.app.db.base import Base
from cinegrok.main import app
from cinegrok.app.api.v1.analytics import limiter
from cinegrok.app.core.dependencies import get_db
from cinegrok.app.core.security import create_access_token, get_password_hash
from cinegrok.app.models.filmmaker import Filmmaker
from cinegrok.app.models.user import User
from cinegrok.app.services.field_reconciliation import normalize_profile
from cinegrok.app.services.profile_service import apply_flattened

# In-memory SQLite for tests - StaticPool ensures all sessions share same DB
engine = create_engine(
    "sqlite:///:memory:",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Patch the session module so app uses our test engine
import cinegrok.app.db.session as session_module
session_module.engine = engine
session_module.SessionLocal = TestingSessionLocal
# main.py imports engine directly; patch so startup uses our engine
import cinegrok.main as main_module
main_module.engine = engine


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function")
def db_session():
    """Create tables and a fresh DB session per test."""
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def test_user(db_session):
    """Create a test user in the DB."""
    user = User(
        id=1,
        email="test@example.com",
        full_name="Test User",
        hashed_password=get_password_hash("testpass123"),
        is_active=1,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def other_user(db_session):
    user = User(
        id=2,
        email="producer@example.com",
        full_name="Producer",
        hashed_password=get_password_hash("testpass123"),
        is_active=1,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def auth_headers(test_user):
    """Bearer token for test user."""
    token = create_access_token(data={"sub": str(test_user.id), "email": test_user.email})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(db_session, test_user):
    """TestClient with DB and test user pre-seeded."""
    return TestClient(app)


@pytest.fixture
def make_filmmaker(db_session):
    """
    Factory for published filmmakers. Keyword args are the raw profile blob
    (either naming convention); flattened columns are derived from it.
    """
    counter = {"n": 0}

    def _make(status="published", user_id=None, created_at=None, **raw):
        counter["n"] += 1
        if "name" not in raw:
            raw.setdefault("stageName", f"Filmmaker {counter['n']}")
        profile = normalize_profile(raw)
        filmmaker = Filmmaker(
            user_id=user_id,
            raw_form_data=raw,
            status=status,
            published_at=datetime.utcnow() if status == "published" else None,
            created_at=created_at or datetime(2026, 1, 1) + timedelta(minutes=counter["n"]),
        )
        apply_flattened(filmmaker, profile)
        db_session.add(filmmaker)
        db_session.commit()
        db_session.refresh(filmmaker)
        return filmmaker

    return _make


@pytest.fixture(autouse=True)
def reset_rate_limiter():
    limiter.clear()
    yield
    limiter.clear()


@pytest.fixture(autouse=True)
def mock_redis():
    """Mock Redis cache: get returns None (cache miss), set/delete no-op. Skip connect."""
    with patch("cinegrok.app.utils.cache.get", new_callable=AsyncMock, return_value=None), \
         patch("cinegrok.app.utils.cache.set", new_callable=AsyncMock), \
         patch("cinegrok.app.utils.cache.delete", new_callable=AsyncMock), \
         patch("cinegrok.app.utils.cache.delete_prefix", new_callable=AsyncMock), \
         patch("cinegrok.app.utils.cache.connect", new_callable=AsyncMock):
        yield
