"""Shared pytest fixtures for all tests."""

from datetime import datetime, timezone
from io import BytesIO
from pathlib import Path

import bcrypt
import pytest
from PIL import Image

from controller.auth import hash_password
from controller.database import init_database
from controller.job_queue import JobQueue
from controller.object_store import LocalObjectStore
from controller.repositories.user_repository import UserRepository


class FakeClock:
    """Settable clock for session and queue timing tests."""

    def __init__(self, start: datetime):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, delta) -> None:
        self.now = self.now + delta


@pytest.fixture(autouse=True)
def fast_bcrypt(monkeypatch):
    """
    Use the minimum bcrypt cost so password hashing doesn't dominate test time.
    """
    original_gensalt = bcrypt.gensalt
    monkeypatch.setattr(bcrypt, "gensalt", lambda *args, **kwargs: original_gensalt(rounds=4))


@pytest.fixture
def test_db(tmp_path, monkeypatch) -> Path:
    """
    Create a temporary test database for each test.
    """
    db_path = tmp_path / "test.db"
    monkeypatch.setattr("controller.database.DATABASE_PATH", str(db_path))
    monkeypatch.setattr("controller.config.DATABASE_PATH", str(db_path))
    init_database()
    return db_path


@pytest.fixture
def storage_dir(tmp_path, monkeypatch) -> Path:
    """
    Point the object store at a temporary directory.
    """
    folder = tmp_path / "files"
    monkeypatch.setattr("controller.config.FOLDER_PATH", str(folder))
    return folder


@pytest.fixture
def object_store(storage_dir) -> LocalObjectStore:
    return LocalObjectStore(str(storage_dir))


@pytest.fixture
def job_queue(test_db) -> JobQueue:
    return JobQueue(max_attempts=3, visibility_timeout=60, poll_interval=0.01)


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc))


@pytest.fixture
def make_user(test_db):
    """
    Factory creating users directly in the repository.
    """
    counter = {"n": 0}

    def _make_user(email=None, password="secret"):
        counter["n"] += 1
        email = email or f"user{counter['n']}@example.com"
        return UserRepository.create_user(
            user_id=f"user-{counter['n']}",
            email=email,
            password_hash=hash_password(password),
            created_at=datetime.now(timezone.utc),
        )

    return _make_user


@pytest.fixture
def png_bytes() -> bytes:
    """
    An 800x600 PNG, wider than every thumbnail width.
    """
    image = Image.new("RGB", (800, 600), color=(200, 30, 30))
    for x in range(0, 800, 40):
        for y in range(0, 600, 40):
            image.putpixel((x, y), (0, 0, 255))
    output = BytesIO()
    image.save(output, format="PNG")
    return output.getvalue()
