"""
Pytest configuration and fixtures for Postboard API tests.
"""
import os
import tempfile

# Keep module-level engine and static mount away from the working tree
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="postboard-uploads-"))

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from postboard.auth import create_access_token
from postboard.config import Settings, get_settings
from postboard.database import Base, get_db
from postboard.limiter import limiter
from postboard.main import app
from postboard.models.post import Post
from postboard.store.users import CredentialStore

# Disable rate limiting for tests
limiter.enabled = False

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Global session for sharing across requests
_test_session = None

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def get_test_db():
    """Get the shared test database session."""
    yield _test_session


@pytest.fixture(scope="function")
def settings(tmp_path):
    """Settings pointing uploads at a per-test directory."""
    return Settings(
        secret_key="test-secret-key",
        upload_dir=str(tmp_path / "uploads"),
    )


@pytest.fixture(scope="function")
def db(settings):
    """Create a fresh database for each test."""
    global _test_session

    Base.metadata.create_all(bind=engine)
    _test_session = TestingSessionLocal()

    app.dependency_overrides[get_db] = get_test_db
    app.dependency_overrides[get_settings] = lambda: settings

    yield _test_session

    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


@pytest.fixture(scope="function")
def credential_store(db, settings):
    return CredentialStore(db, settings)


@pytest.fixture(scope="function")
def test_user(credential_store):
    """Create a test user."""
    return credential_store.create(
        name="Test User",
        email="test@example.com",
        password="testpassword123",
        role="admin",
    )


@pytest.fixture(scope="function")
def other_user(credential_store):
    """Create a second user."""
    return credential_store.create(
        name="Other User",
        email="other@example.com",
        password="otherpassword123",
    )


@pytest.fixture(scope="function")
def auth_headers(test_user, settings):
    """Get auth headers for the test user."""
    return {"Authorization": f"Bearer {create_access_token(test_user.id, settings)}"}


@pytest.fixture(scope="function")
def other_headers(other_user, settings):
    """Get auth headers for the second user."""
    return {"Authorization": f"Bearer {create_access_token(other_user.id, settings)}"}


@pytest.fixture(scope="function")
def rate_limited():
    """Enable the limiter for one test, starting from empty counters."""
    limiter.reset()
    limiter.enabled = True
    yield limiter
    limiter.enabled = False
    limiter.reset()


@pytest.fixture(scope="function")
def png_image():
    """A multipart PNG upload."""
    return ("photo.png", PNG_BYTES, "image/png")


@pytest.fixture(scope="function")
def make_post(db, test_user):
    """Insert a post directly, bypassing the API."""
    def _make_post(title, created_at=None, user=None, **fields):
        post = Post(
            user_id=(user or test_user).id,
            title=title,
            content=fields.pop("content", f"{title} content"),
            status=fields.pop("status", "published"),
            category=fields.pop("category", []),
            image=fields.pop("image", None),
            comments=fields.pop("comments", []),
            likes=fields.pop("likes", []),
            created_at=created_at or datetime.now(timezone.utc),
        )
        db.add(post)
        db.commit()
        db.refresh(post)
        return post

    return _make_post


@pytest.fixture(scope="function")
def hours_ago():
    def _hours_ago(hours):
        return datetime.now(timezone.utc) - timedelta(hours=hours)

    return _hours_ago
