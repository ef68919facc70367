"""Thumbnail worker: consumes upload jobs and writes resized copies of images."""

import asyncio
from typing import Any, Callable, Dict, Iterable, Optional

from common.constants import IMAGE_TYPE, THUMBNAIL_WIDTHS
from common.logging_config import get_logger
from controller.exceptions import FatalJobError
from controller.job_queue import JobQueue
from controller.object_store import LocalObjectStore, derivative_path
from controller.repositories.file_repository import FileRepository
from worker.thumbnails import resize

logger = get_logger(__name__)


class DerivativeWorker:
    """
    Processes thumbnail jobs ({"userId", "fileId"}) from the work queue.

    A job succeeds only if every width is written. Thumbnails are written
    with overwrite semantics, so a redelivered or retried job regenerates
    all of them with the same result.
    """

    def __init__(
        self,
        job_queue: Optional[JobQueue] = None,
        object_store: Optional[LocalObjectStore] = None,
        resizer: Callable[[bytes, int], bytes] = resize,
        widths: Iterable[int] = THUMBNAIL_WIDTHS,
    ):
        self.job_queue = job_queue or JobQueue()
        self.object_store = object_store or LocalObjectStore()
        self.file_repo = FileRepository()
        self.resizer = resizer
        self.widths = tuple(widths)

    async def handle_job(self, payload: Dict[str, Any]) -> None:
        file_id = payload.get("fileId")
        user_id = payload.get("userId")

        if not file_id:
            raise FatalJobError("Missing fileId")
        if not user_id:
            raise FatalJobError("Missing userId")

        record = await asyncio.to_thread(self.file_repo.get_by_id_and_owner, file_id, user_id)
        if record is None or not record.local_path:
            raise FatalJobError("File not found")
        if record.type != IMAGE_TYPE:
            raise FatalJobError(f"File {file_id} is not an image")

        results = await asyncio.gather(
            *(asyncio.to_thread(self._write_thumbnail, record.local_path, width) for width in self.widths),
            return_exceptions=True,
        )

        errors = [(width, result) for width, result in zip(self.widths, results) if isinstance(result, Exception)]
        if errors:
            for width, error in errors:
                logger.warning(f"Thumbnail {width} failed for file {file_id}: {error}")
            raise errors[0][1]

        logger.info(f"Generated {len(self.widths)} thumbnails for file {file_id}")

    def _write_thumbnail(self, original_path: str, width: int) -> str:
        original = self.object_store.get(original_path)
        thumbnail = self.resizer(original, width)
        return self.object_store.put(derivative_path(original_path, width), thumbnail)

    async def run(self, stop_event: Optional[asyncio.Event] = None) -> None:
        released = await asyncio.to_thread(self.job_queue.requeue_stale)
        if released:
            logger.info(f"Recovered {released} interrupted job(s) on startup")

        await self.job_queue.process(self.handle_job, stop_event)
