"""File repository for database operations."""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from common.constants import FOLDER_TYPE, PAGE_SIZE, ROOT_PARENT_ID
from common.logging_config import get_logger
from controller.database import get_db_connection
from controller.exceptions import ParentNotFolderError, ParentNotFoundError

logger = get_logger(__name__)

_COLUMNS = "file_id, user_id, name, type, is_public, parent_id, local_path, created_at"


@dataclass
class FileRecord:
    file_id: str
    user_id: str
    name: str
    type: str
    is_public: bool
    parent_id: str
    local_path: Optional[str]
    created_at: datetime

    @property
    def is_folder(self) -> bool:
        return self.type == FOLDER_TYPE


def _row_to_record(row) -> FileRecord:
    return FileRecord(
        file_id=row["file_id"],
        user_id=row["user_id"],
        name=row["name"],
        type=row["type"],
        is_public=bool(row["is_public"]),
        parent_id=row["parent_id"],
        local_path=row["local_path"],
        created_at=datetime.fromisoformat(row["created_at"]),
    )


class FileRepository:
    @staticmethod
    def _check_parent(cursor, parent_id: str) -> None:
        if parent_id == ROOT_PARENT_ID:
            return

        cursor.execute("SELECT type FROM files WHERE file_id = ?", (parent_id,))
        row = cursor.fetchone()
        if row is None:
            raise ParentNotFoundError("Parent not found")
        if row["type"] != FOLDER_TYPE:
            raise ParentNotFolderError("Parent is not a folder")

    @staticmethod
    def validate_parent(parent_id: str) -> None:
        """
        Check that parent_id is the root sentinel or an existing folder.

        Raises:
            ParentNotFoundError: No record with that id
            ParentNotFolderError: The record is not a folder
        """
        with get_db_connection() as conn:
            FileRepository._check_parent(conn.cursor(), parent_id)

    @staticmethod
    def create_file(
        file_id: str,
        user_id: str,
        name: str,
        type: str,
        is_public: bool,
        parent_id: str,
        local_path: Optional[str],
        created_at: datetime
    ) -> FileRecord:
        """
        Insert a record, checking the parent on the same connection.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            FileRepository._check_parent(cursor, parent_id)

            cursor.execute(
                f"""
                INSERT INTO files ({_COLUMNS})
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
                """,
                (file_id, user_id, name, type, int(is_public), parent_id, local_path, created_at.isoformat())
            )
            conn.commit()

        logger.debug(f"File record created [file_id={file_id}] type={type} parent_id={parent_id}")
        return FileRecord(
            file_id=file_id,
            user_id=user_id,
            name=name,
            type=type,
            is_public=is_public,
            parent_id=parent_id,
            local_path=local_path,
            created_at=created_at,
        )

    @staticmethod
    def get_by_id(file_id: str) -> Optional[FileRecord]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(f"SELECT {_COLUMNS} FROM files WHERE file_id = ?", (file_id,))
            row = cursor.fetchone()

            if row is None:
                return None

            return _row_to_record(row)

    @staticmethod
    def get_by_id_and_owner(file_id: str, user_id: str) -> Optional[FileRecord]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"SELECT {_COLUMNS} FROM files WHERE file_id = ? AND user_id = ?",
                (file_id, user_id)
            )
            row = cursor.fetchone()

            if row is None:
                return None

            return _row_to_record(row)

    @staticmethod
    def list_by_owner_and_parent(
        user_id: str,
        parent_id: str,
        page: int,
        page_size: int = PAGE_SIZE
    ) -> List[FileRecord]:
        """
        List one page of a user's records under a parent, in insertion order.
        Pages past the end yield an empty list.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                f"""
                SELECT {_COLUMNS} FROM files
                WHERE user_id = ? AND parent_id = ?
                ORDER BY rowid
                LIMIT ? OFFSET ?
                """,
                (user_id, parent_id, page_size, page * page_size)
            )
            rows = cursor.fetchall()

            return [_row_to_record(row) for row in rows]

    @staticmethod
    def set_public(file_id: str, is_public: bool) -> Optional[FileRecord]:
        """
        Update the visibility flag and return the record as re-read after the update.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            try:
                cursor.execute(
                    "UPDATE files SET is_public = ? WHERE file_id = ?",
                    (int(is_public), file_id)
                )
                conn.commit()
            except Exception as e:
                logger.error(f"Failed to update visibility [file_id={file_id}]: {e}", exc_info=True)
                raise

        logger.info(f"Visibility updated [file_id={file_id}] is_public={is_public}")
        return FileRepository.get_by_id(file_id)

    @staticmethod
    def count_files() -> int:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) FROM files")
            return cursor.fetchone()[0]
