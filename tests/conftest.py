import os
import tempfile
from pathlib import Path

# Test settings must be in place before anything imports vidshare.core.config
_media_dir = Path(tempfile.mkdtemp(prefix="vidshare-tests-"))
os.environ["ENV"] = "test"
os.environ["DEBUG"] = "false"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ACCESS_TOKEN_SECRET"] = "test-access-secret"
os.environ["REFRESH_TOKEN_SECRET"] = "test-refresh-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["MEDIA_BACKEND"] = "local"
os.environ["MEDIA_ROOT"] = str(_media_dir / "media")
os.environ["MEDIA_UPLOAD_DIR"] = str(_media_dir / "uploads")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from vidshare.core.auth import create_access_token, hash_password  # noqa: E402
from vidshare.core.db.deps import get_db  # noqa: E402
from vidshare.core.db.session import Base  # noqa: E402
from vidshare.core.media.storage import BaseMediaStore, get_media_store  # noqa: E402
from vidshare.main import app  # noqa: E402
from vidshare.models import User  # noqa: E402

TEST_PASSWORD = "test_password_123"


class FakeMediaStore(BaseMediaStore):
    """In-memory media store: records uploads and can be told to fail."""

    def __init__(self, fail: bool = False):
        self.fail = fail
        self.uploaded: list[str] = []
        self.removed: list[str] = []

    async def _store(self, local_path: Path) -> str:
        if self.fail:
            raise ConnectionError("media host unreachable")
        key = self.object_key(local_path)
        self.uploaded.append(key)
        return f"https://media.test/{key}"

    async def _remove(self, key: str) -> None:
        self.removed.append(key)


@pytest.fixture(scope="function")
def db_engine():
    """Fresh in-memory database per test."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(db_engine):
    """Create a database session for a test."""
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=db_engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def media_store():
    return FakeMediaStore()


@pytest.fixture(scope="function")
def client(db_session, media_store):
    """Create a test client with database and media store overrides."""

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_media_store] = lambda: media_store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_user(db_session, username: str, email: str, full_name: str = "Test User") -> User:
    user = User(
        username=username,
        email=email,
        full_name=full_name,
        password_hash=hash_password(TEST_PASSWORD),
        avatar_url=f"https://media.test/{username}.png",
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    # Store plain password for login tests
    user._plain_password = TEST_PASSWORD
    return user


@pytest.fixture(scope="function")
def user_factory(db_session):
    """Create extra users: user_factory(username, email, full_name=...)."""

    def _make(username: str, email: str, full_name: str = "Test User") -> User:
        return make_user(db_session, username, email, full_name)

    return _make


@pytest.fixture(scope="function")
def test_user(db_session):
    """Create a test user."""
    return make_user(db_session, "alice", "alice@example.com", "Alice Liddell")


@pytest.fixture(scope="function")
def other_user(db_session):
    return make_user(db_session, "bob", "bob@example.com", "Bob Builder")


@pytest.fixture(scope="function")
def auth_headers(test_user):
    """Create authentication headers with access token."""
    access_token = create_access_token({"sub": str(test_user.id), "username": test_user.username})
    return {"Authorization": f"Bearer {access_token}"}


@pytest.fixture(scope="function")
def staged_file(tmp_path):
    """A small file standing in for a staged upload."""

    def _make(name: str = "avatar.png", content: bytes = b"\x89PNG fake image") -> str:
        path = tmp_path / name
        path.write_bytes(content)
        return str(path)

    return _make
