"""Manages raw file objects on local disk: write, read, existence and removal."""

import os
from pathlib import Path
from typing import Optional

from controller import config
from controller.exceptions import ObjectNotFoundError
from controller.utils import generate_uuid


def derivative_path(original_path: str, width: int) -> str:
    """
    Path of the thumbnail of an original at the given width.
    """
    return f"{original_path}_{width}"


class LocalObjectStore:
    """
    Object store rooted at a directory. Paths handed out by new_path() are
    absolute and unique; derivatives live beside their original.
    """

    def __init__(self, base_dir: Optional[str] = None):
        self.base_dir = Path(base_dir or config.FOLDER_PATH)

    def ensure_directory(self) -> None:
        self.base_dir.mkdir(parents=True, exist_ok=True)

    def new_path(self) -> str:
        """
        Generate a fresh object path: <base>/<uuid4>.
        """
        return str(self.base_dir / generate_uuid())

    def put(self, path: str, data: bytes) -> str:
        """
        Write object data to disk, replacing any existing object at path.

        Args:
            path: Object path
            data: Raw bytes

        Returns:
            The path written

        Raises:
            OSError: If write operation fails
        """
        target = Path(path)
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp = target.with_name(f".{target.name}.{os.getpid()}.tmp")
        try:
            tmp.write_bytes(data)
            os.replace(tmp, target)
        except OSError:
            tmp.unlink(missing_ok=True)
            raise
        return path

    def get(self, path: str) -> bytes:
        """
        Read an entire object.

        Raises:
            ObjectNotFoundError: If the object is missing or cannot be read
        """
        try:
            return Path(path).read_bytes()
        except OSError as e:
            raise ObjectNotFoundError(path) from e

    def exists(self, path: str) -> bool:
        return Path(path).is_file()

    def delete(self, path: str) -> bool:
        """
        Delete an object.

        Returns:
            True if an object was deleted, False if it didn't exist
        """
        target = Path(path)
        if target.is_file():
            target.unlink()
            return True
        return False

    def is_writable(self) -> bool:
        try:
            self.ensure_directory()
        except OSError:
            return False
        return os.access(self.base_dir, os.W_OK)
