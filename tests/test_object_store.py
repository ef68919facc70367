"""Tests for the local object store."""

from pathlib import Path

import pytest

from controller.exceptions import ObjectNotFoundError
from controller.object_store import LocalObjectStore, derivative_path


def test_new_paths_are_unique_and_under_base(object_store, storage_dir):
    first, second = object_store.new_path(), object_store.new_path()

    assert first != second
    assert first.startswith(str(storage_dir))


def test_put_get_overwrite(object_store):
    path = object_store.new_path()

    object_store.put(path, b"one")
    object_store.put(path, b"two")

    assert object_store.get(path) == b"two"
    assert [p.name for p in object_store.base_dir.iterdir()] == [path.rsplit("/", 1)[-1]]


def test_get_missing(object_store):
    with pytest.raises(ObjectNotFoundError):
        object_store.get(object_store.new_path())


def test_delete(object_store):
    path = object_store.put(object_store.new_path(), b"x")

    assert object_store.delete(path) is True
    assert object_store.exists(path) is False
    assert object_store.delete(path) is False


def test_derivative_path():
    assert derivative_path("/tmp/files_manager/abc", 250) == "/tmp/files_manager/abc_250"


def test_default_base_dir_comes_from_config(storage_dir):
    store = LocalObjectStore()

    assert store.base_dir == storage_dir
    assert store.is_writable()
    assert storage_dir.is_dir()


def test_unreadable_object_is_not_found(object_store, monkeypatch):
    path = object_store.put(object_store.new_path(), b"x")

    def denied(self):
        raise PermissionError(13, "Permission denied", str(self))

    monkeypatch.setattr(Path, "read_bytes", denied)

    with pytest.raises(ObjectNotFoundError):
        object_store.get(path)


def test_failed_write_leaves_no_temp_file(object_store, monkeypatch):
    def disk_full(src, dst):
        raise OSError(28, "No space left on device")

    monkeypatch.setattr("controller.object_store.os.replace", disk_full)
    path = object_store.new_path()

    with pytest.raises(OSError, match="No space left"):
        object_store.put(path, b"payload")

    assert list(object_store.base_dir.iterdir()) == []
