"""Integration tests for database repositories."""

import sqlite3
from contextlib import contextmanager
from datetime import datetime, timedelta, timezone

import pytest

from common.constants import ROOT_PARENT_ID
from controller.database import get_db_connection
from controller.exceptions import ParentNotFolderError, ParentNotFoundError
from controller.repositories.file_repository import FileRepository
from controller.repositories.session_repository import SessionRepository
from controller.repositories.user_repository import UserRepository


def _create(file_id, user_id="user-1", type="file", parent_id=ROOT_PARENT_ID, is_public=False):
    return FileRepository.create_file(
        file_id=file_id,
        user_id=user_id,
        name=f"{file_id}.txt",
        type=type,
        is_public=is_public,
        parent_id=parent_id,
        local_path=None if type == "folder" else f"/tmp/{file_id}",
        created_at=datetime.now(timezone.utc),
    )


class TestDatabaseConnection:
    def test_rows_are_addressable_by_column(self, test_db):
        UserRepository.create_user("test-id", "t@example.com", "hash123", datetime.now(timezone.utc))
        with get_db_connection() as conn:
            row = conn.execute("SELECT * FROM users WHERE user_id = ?", ("test-id",)).fetchone()

        assert row["email"] == "t@example.com"

    def test_create_file_releases_its_connection(self, test_db, monkeypatch):
        import controller.repositories.file_repository as file_repository

        closed = []
        real_connection = file_repository.get_db_connection

        @contextmanager
        def tracking_connection():
            with real_connection() as conn:
                yield conn
            closed.append(True)

        monkeypatch.setattr(file_repository, "get_db_connection", tracking_connection)

        _create("f1", type="folder")

        assert closed == [True]
        assert FileRepository.get_by_id("f1") is not None


class TestUserRepository:
    def test_create_and_fetch(self, test_db):
        created_at = datetime.now(timezone.utc)
        UserRepository.create_user("user-123", "bob@example.com", "hash", created_at)

        by_email = UserRepository.get_by_email("bob@example.com")
        by_id = UserRepository.get_by_user_id("user-123")

        assert by_email == by_id
        assert by_email.created_at == created_at

    def test_missing_user(self, test_db):
        assert UserRepository.get_by_email("ghost@example.com") is None
        assert UserRepository.get_by_user_id("ghost") is None

    def test_email_is_unique(self, test_db):
        UserRepository.create_user("u1", "dup@example.com", "h", datetime.now(timezone.utc))
        with pytest.raises(sqlite3.IntegrityError):
            UserRepository.create_user("u2", "dup@example.com", "h", datetime.now(timezone.utc))

    def test_count_users(self, test_db):
        assert UserRepository.count_users() == 0
        UserRepository.create_user("u1", "a@example.com", "h", datetime.now(timezone.utc))
        assert UserRepository.count_users() == 1


class TestSessionRepository:
    def test_create_get_delete(self, test_db):
        now = datetime.now(timezone.utc)
        SessionRepository.create_session("tok", "user-1", now, now + timedelta(hours=24))

        session = SessionRepository.get_by_token("tok")
        assert session.user_id == "user-1"
        assert not session.is_expired(now)
        assert session.is_expired(now + timedelta(hours=24))

        assert SessionRepository.delete_session("tok") is True
        assert SessionRepository.delete_session("tok") is False
        assert SessionRepository.get_by_token("tok") is None


class TestFileRepository:
    def test_create_and_get(self, test_db):
        record = _create("f1")

        fetched = FileRepository.get_by_id("f1")
        assert fetched == record
        assert fetched.is_public is False
        assert fetched.parent_id == ROOT_PARENT_ID

    def test_get_by_id_and_owner(self, test_db):
        _create("f1", user_id="owner")

        assert FileRepository.get_by_id_and_owner("f1", "owner") is not None
        assert FileRepository.get_by_id_and_owner("f1", "someone-else") is None

    def test_rejects_missing_parent(self, test_db):
        with pytest.raises(ParentNotFoundError, match="Parent not found"):
            _create("f1", parent_id="does-not-exist")
        assert FileRepository.get_by_id("f1") is None

    def test_rejects_non_folder_parent(self, test_db):
        _create("plain")
        with pytest.raises(ParentNotFolderError, match="Parent is not a folder"):
            _create("child", parent_id="plain")

    def test_accepts_folder_parent(self, test_db):
        _create("dir", type="folder")
        child = _create("child", parent_id="dir")
        assert child.parent_id == "dir"

    def test_list_is_paginated_in_insertion_order(self, test_db):
        ids = [f"f{i:02d}" for i in range(45)]
        # Reverse-sorted ids so insertion order differs from id order
        for file_id in reversed(ids):
            _create(file_id)

        page0 = FileRepository.list_by_owner_and_parent("user-1", ROOT_PARENT_ID, 0)
        page1 = FileRepository.list_by_owner_and_parent("user-1", ROOT_PARENT_ID, 1)
        page2 = FileRepository.list_by_owner_and_parent("user-1", ROOT_PARENT_ID, 2)
        page3 = FileRepository.list_by_owner_and_parent("user-1", ROOT_PARENT_ID, 3)

        assert [len(p) for p in (page0, page1, page2, page3)] == [20, 20, 5, 0]
        listed = [r.file_id for r in page0 + page1 + page2]
        assert listed == list(reversed(ids))

    def test_list_filters_by_owner_and_parent(self, test_db):
        _create("dir", type="folder")
        _create("top")
        _create("nested", parent_id="dir")
        _create("other-user", user_id="user-2")

        top = FileRepository.list_by_owner_and_parent("user-1", ROOT_PARENT_ID, 0)
        nested = FileRepository.list_by_owner_and_parent("user-1", "dir", 0)

        assert [r.file_id for r in top] == ["dir", "top"]
        assert [r.file_id for r in nested] == ["nested"]

    def test_page_beyond_end_is_empty(self, test_db):
        for i in range(3):
            _create(f"f{i}")
        assert FileRepository.list_by_owner_and_parent("user-1", ROOT_PARENT_ID, 5) == []

    def test_set_public_returns_fresh_record(self, test_db):
        _create("f1")

        published = FileRepository.set_public("f1", True)
        assert published.is_public is True
        assert FileRepository.get_by_id("f1").is_public is True

        unpublished = FileRepository.set_public("f1", False)
        assert unpublished.is_public is False

    def test_set_public_unknown_file(self, test_db):
        assert FileRepository.set_public("missing", True) is None
