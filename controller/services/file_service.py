"""File service for business logic."""

import mimetypes
from typing import List, Optional, Tuple, Union

from common.constants import FILE_TYPES, FOLDER_TYPE, IMAGE_TYPE, THUMBNAIL_WIDTHS
from common.logging_config import get_logger
from controller.exceptions import (
    FileNotFoundError,
    FolderContentError,
    InvalidDataError,
    InvalidSizeError,
    MissingFieldError,
    ObjectNotFoundError,
)
from controller.job_queue import JobQueue
from controller.object_store import LocalObjectStore, derivative_path
from controller.repositories.file_repository import FileRecord, FileRepository
from controller.utils import decode_base64, generate_uuid, normalize_parent_id, parse_page, utc_now

logger = get_logger(__name__)


class FileService:
    def __init__(self, object_store: Optional[LocalObjectStore] = None, job_queue: Optional[JobQueue] = None):
        self.file_repo = FileRepository()
        self.object_store = object_store or LocalObjectStore()
        self.job_queue = job_queue or JobQueue()

    def create_file(
        self,
        user_id: str,
        name: Optional[str],
        type: Optional[str],
        parent_id: Optional[Union[str, int]] = None,
        is_public: Optional[bool] = False,
        data: Optional[str] = None,
    ) -> FileRecord:
        if not name:
            raise MissingFieldError("Missing name")
        if not type or type not in FILE_TYPES:
            raise MissingFieldError("Missing type")
        if type != FOLDER_TYPE and not data:
            raise MissingFieldError("Missing data")

        parent_id = normalize_parent_id(parent_id)
        self.file_repo.validate_parent(parent_id)

        content = None
        if type != FOLDER_TYPE:
            try:
                content = decode_base64(data)
            except ValueError:
                raise InvalidDataError("Invalid data")

        file_id = generate_uuid()
        local_path = None

        if content is not None:
            local_path = self.object_store.new_path()
            self.object_store.put(local_path, content)
            logger.info(f"Wrote object for file {file_id} ({len(content)} bytes)")

        try:
            record = self.file_repo.create_file(
                file_id=file_id,
                user_id=user_id,
                name=name,
                type=type,
                is_public=bool(is_public),
                parent_id=parent_id,
                local_path=local_path,
                created_at=utc_now(),
            )
        except Exception as e:
            logger.error(f"Metadata insert failed for file {file_id}: {e}")
            if local_path is not None:
                self._remove_orphan(local_path, file_id)
            raise

        logger.info(f"Created {type} {file_id} [user_id={user_id}]")

        if type == IMAGE_TYPE:
            self._enqueue_thumbnails(record)

        return record

    def _remove_orphan(self, local_path: str, file_id: str) -> None:
        try:
            self.object_store.delete(local_path)
            logger.info(f"Removed orphaned object for file {file_id}")
        except OSError as e:
            logger.error(f"Failed to remove orphaned object for file {file_id}: {e}")

    def _enqueue_thumbnails(self, record: FileRecord) -> None:
        # The upload is already committed; a lost job only means no thumbnails.
        try:
            job_id = self.job_queue.enqueue({"userId": record.user_id, "fileId": record.file_id})
            logger.info(f"Queued thumbnail job {job_id} for file {record.file_id}")
        except Exception as e:
            logger.error(
                f"Failed to queue thumbnail job for file {record.file_id}; "
                f"thumbnails will not be generated: {e}",
                exc_info=True
            )

    def get_file(self, user_id: str, file_id: str) -> FileRecord:
        record = self.file_repo.get_by_id_and_owner(file_id, user_id)
        if record is None:
            raise FileNotFoundError("Not found")
        return record

    def list_files(
        self,
        user_id: str,
        parent_id: Optional[Union[str, int]] = None,
        page: Optional[Union[str, int]] = None,
    ) -> List[FileRecord]:
        return self.file_repo.list_by_owner_and_parent(
            user_id=user_id,
            parent_id=normalize_parent_id(parent_id),
            page=parse_page(page),
        )

    def set_visibility(self, user_id: str, file_id: str, is_public: bool) -> FileRecord:
        self.get_file(user_id, file_id)

        record = self.file_repo.set_public(file_id, is_public)
        if record is None:
            raise FileNotFoundError("Not found")
        return record

    def publish(self, user_id: str, file_id: str) -> FileRecord:
        return self.set_visibility(user_id, file_id, True)

    def unpublish(self, user_id: str, file_id: str) -> FileRecord:
        return self.set_visibility(user_id, file_id, False)

    def read_content(
        self,
        user_id: Optional[str],
        file_id: str,
        size: Optional[Union[str, int]] = None,
    ) -> Tuple[bytes, str]:
        """
        Read a file's bytes, or one of its thumbnails when size is given.

        Args:
            user_id: Requester, or None for an anonymous request
            file_id: File to read
            size: Optional thumbnail width (100, 250 or 500)

        Returns:
            (content, mime type)

        Raises:
            FileNotFoundError: Absent, private to someone else, or object not stored (yet)
            FolderContentError: The record is a folder
            InvalidSizeError: Unsupported thumbnail width
        """
        record = self.file_repo.get_by_id(file_id)
        if record is None:
            raise FileNotFoundError("Not found")

        if not record.is_public and record.user_id != user_id:
            raise FileNotFoundError("Not found")

        if record.is_folder:
            raise FolderContentError("A folder doesn't have content")

        path = record.local_path
        if size is not None and size != "":
            width = self._parse_width(size)
            path = derivative_path(record.local_path, width)

        try:
            content = self.object_store.get(path)
        except ObjectNotFoundError:
            logger.info(f"No stored object for file {file_id} (size={size})")
            raise FileNotFoundError("Not found")

        mime_type = mimetypes.guess_type(record.name)[0] or "application/octet-stream"
        return content, mime_type

    @staticmethod
    def _parse_width(size: Union[str, int]) -> int:
        try:
            width = int(size)
        except (TypeError, ValueError):
            raise InvalidSizeError("Invalid size parameter")
        if width not in THUMBNAIL_WIDTHS:
            raise InvalidSizeError("Invalid size parameter")
        return width
