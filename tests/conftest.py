"""
Shared test fixtures.

Uses an in-memory SQLite database (one connection shared through
StaticPool) with per-test table create/drop, an image store rooted in a
temp dir that can be told to fail, and a mailer that records instead of
sending.
"""

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("ADMIN_EMAIL", "admin@example.com")
os.environ.setdefault("ADMIN_PASSWORD", "correct-horse")
os.environ.setdefault("UPLOAD_BASE_URL", "https://cdn.example.com/uploads")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.main import app  # noqa: E402
from apps.messages.client import get_mailer  # noqa: E402
from apps.shared.database import Base, get_db  # noqa: E402
from apps.uploads.storage import ImageStore, get_storage  # noqa: E402

ADMIN_EMAIL = os.environ["ADMIN_EMAIL"]
ADMIN_PASSWORD = os.environ["ADMIN_PASSWORD"]
BASE_URL = os.environ["UPLOAD_BASE_URL"]


# ---------------------------------------------------------------------------
# Database
# ---------------------------------------------------------------------------

@pytest.fixture
def db_session():
    """Fresh tables per test: create → yield session → drop."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


# ---------------------------------------------------------------------------
# Storage / mail fakes
# ---------------------------------------------------------------------------

class RecordingImageStore(ImageStore):
    """Real store in a temp dir that records delete attempts and can fail some."""

    def __init__(self, root):
        super().__init__(root=str(root), base_url=BASE_URL, max_bytes=5 * 1024 * 1024)
        self.delete_attempts: list[str] = []
        self.failing: set[str] = set()

    async def delete(self, url: str) -> None:
        self.delete_attempts.append(url)
        if url in self.failing:
            raise OSError(f"storage unavailable for {url}")
        await super().delete(url)


class RecordingMailer:
    def __init__(self):
        self.configured = True
        self.notification_email = "owner@example.com"
        self.sent: list[dict] = []
        self.fail = False

    def send(self, to, subject, text, html):
        if self.fail:
            raise RuntimeError("smtp down")
        self.sent.append({"to": to, "subject": subject, "text": text, "html": html})
        return "msg-id"


@pytest.fixture
def storage(tmp_path):
    return RecordingImageStore(tmp_path)


@pytest.fixture
def mailer():
    return RecordingMailer()


# ---------------------------------------------------------------------------
# Clients
# ---------------------------------------------------------------------------

@pytest.fixture
def client(db_session, storage, mailer):
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    app.dependency_overrides[get_mailer] = lambda: mailer

    yield TestClient(app)

    app.dependency_overrides.clear()


@pytest.fixture
def admin_client(client):
    """Same client, logged in as the admin (session cookie in the jar)."""
    resp = client.post(
        "/auth/login", json={"email": ADMIN_EMAIL, "password": ADMIN_PASSWORD}
    )
    assert resp.status_code == 200
    return client


# ---------------------------------------------------------------------------
# Payload helpers
# ---------------------------------------------------------------------------

def _image_url(name: str) -> str:
    return f"{BASE_URL}/projects/{name}"


@pytest.fixture
def image_url():
    return _image_url


@pytest.fixture
def project_payload():
    """Build a valid project body; keyword arguments override fields."""
    def build(**overrides) -> dict:
        payload = {
            "title": "My Project",
            "description": "A short description",
            "thumbnail": _image_url("thumb.png"),
            "images": [_image_url("one.png"), _image_url("two.png")],
            "technologies": ["Python", " FastAPI "],
            "status": "PUBLISHED",
        }
        payload.update(overrides)
        return payload

    return build
