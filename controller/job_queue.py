"""
Durable work queue backed by the SQLite jobs table.

Producers enqueue JSON payloads; a consumer claims one job at a time,
acknowledges it on success and releases it for retry on failure. Delivery is
at-least-once: a claimed job whose consumer disappears is handed out again
once its visibility timeout elapses, so handlers must be idempotent.
"""

import asyncio
import json
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Awaitable, Callable, Dict, Optional

from common.logging_config import get_logger
from controller import config
from controller.database import get_db_connection
from controller.exceptions import FatalJobError
from controller.utils import generate_uuid, utc_now

logger = get_logger(__name__)

THUMBNAIL_QUEUE = "thumbnails"

JobHandler = Callable[[Dict[str, Any]], Awaitable[None]]


def _ts(value: datetime) -> str:
    return value.isoformat(timespec="microseconds")


@dataclass
class Job:
    job_id: str
    queue: str
    payload: Dict[str, Any]
    status: str
    attempts: int
    last_error: Optional[str]
    enqueued_at: datetime
    available_at: datetime
    claimed_at: Optional[datetime]


def _row_to_job(row) -> Job:
    return Job(
        job_id=row["job_id"],
        queue=row["queue"],
        payload=json.loads(row["payload"]),
        status=row["status"],
        attempts=row["attempts"],
        last_error=row["last_error"],
        enqueued_at=datetime.fromisoformat(row["enqueued_at"]),
        available_at=datetime.fromisoformat(row["available_at"]),
        claimed_at=datetime.fromisoformat(row["claimed_at"]) if row["claimed_at"] else None,
    )


class JobQueue:
    def __init__(
        self,
        name: str = THUMBNAIL_QUEUE,
        max_attempts: Optional[int] = None,
        visibility_timeout: Optional[int] = None,
        poll_interval: Optional[float] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.name = name
        self.max_attempts = max_attempts if max_attempts is not None else config.JOB_MAX_ATTEMPTS
        self.visibility_timeout = visibility_timeout if visibility_timeout is not None else config.JOB_VISIBILITY_TIMEOUT
        self.poll_interval = poll_interval if poll_interval is not None else config.JOB_POLL_INTERVAL
        self.clock = clock

    def enqueue(self, payload: Dict[str, Any]) -> str:
        """
        Add a job to the queue.

        Args:
            payload: JSON-serializable job data

        Returns:
            job_id of the queued job
        """
        job_id = generate_uuid()
        now = _ts(self.clock())

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                INSERT INTO jobs (job_id, queue, payload, status, attempts, enqueued_at, available_at)
                VALUES (?, ?, ?, 'queued', 0, ?, ?)
                """,
                (job_id, self.name, json.dumps(payload), now, now)
            )
            conn.commit()

        logger.debug(f"Enqueued job {job_id} on queue '{self.name}'")
        return job_id

    def get_job(self, job_id: str) -> Optional[Job]:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("SELECT * FROM jobs WHERE job_id = ?", (job_id,))
            row = cursor.fetchone()
            return _row_to_job(row) if row else None

    def pending_count(self) -> int:
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) FROM jobs WHERE queue = ? AND status IN ('queued', 'processing')",
                (self.name,)
            )
            return cursor.fetchone()[0]

    def requeue_stale(self) -> int:
        """
        Return jobs claimed longer ago than the visibility timeout to the queue.

        Returns:
            Number of jobs released
        """
        now = self.clock()
        cutoff = _ts(now - timedelta(seconds=self.visibility_timeout))

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE jobs
                SET status = 'queued', claimed_at = NULL, available_at = ?
                WHERE queue = ? AND status = 'processing' AND claimed_at < ?
                """,
                (_ts(now), self.name, cutoff)
            )
            conn.commit()
            released = cursor.rowcount

        if released:
            logger.warning(f"Released {released} stale job(s) on queue '{self.name}'")
        return released

    def claim(self) -> Optional[Job]:
        """
        Claim the oldest available job, marking it as processing.

        The select and the update run in one write transaction so two
        consumers never claim the same job.
        """
        now = _ts(self.clock())

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("BEGIN IMMEDIATE")
            try:
                cursor.execute(
                    """
                    SELECT * FROM jobs
                    WHERE queue = ? AND status = 'queued' AND available_at <= ?
                    ORDER BY enqueued_at, rowid
                    LIMIT 1
                    """,
                    (self.name, now)
                )
                row = cursor.fetchone()
                if row is None:
                    conn.rollback()
                    return None

                cursor.execute(
                    """
                    UPDATE jobs
                    SET status = 'processing', attempts = attempts + 1, claimed_at = ?
                    WHERE job_id = ?
                    """,
                    (now, row["job_id"])
                )
                conn.commit()
            except Exception:
                conn.rollback()
                raise

        job = _row_to_job(row)
        job.status = "processing"
        job.attempts += 1
        job.claimed_at = datetime.fromisoformat(now)
        return job

    def ack(self, job_id: str) -> None:
        """
        Remove a successfully processed job.
        """
        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute("DELETE FROM jobs WHERE job_id = ?", (job_id,))
            conn.commit()

    def fail(self, job: Job, error: str, retryable: bool = True) -> str:
        """
        Record a failed attempt.

        Retryable failures go back to the queue with exponential backoff until
        max_attempts is reached; the job is then left in the 'failed' state.

        Returns:
            The job's new status ('queued' or 'failed')
        """
        now = self.clock()

        if retryable and job.attempts < self.max_attempts:
            status = "queued"
            available_at = now + timedelta(seconds=2 ** (job.attempts - 1))
        else:
            status = "failed"
            available_at = now

        with get_db_connection() as conn:
            cursor = conn.cursor()
            cursor.execute(
                """
                UPDATE jobs
                SET status = ?, last_error = ?, claimed_at = NULL, available_at = ?
                WHERE job_id = ?
                """,
                (status, error[:2000], _ts(available_at), job.job_id)
            )
            conn.commit()

        return status

    async def process_next(self, handler: JobHandler) -> Optional[Job]:
        """
        Claim and run a single job.

        Returns:
            The job that was processed, or None if the queue had nothing available
        """
        await asyncio.to_thread(self.requeue_stale)
        job = await asyncio.to_thread(self.claim)
        if job is None:
            return None

        logger.info(f"Processing job {job.job_id} (attempt {job.attempts}/{self.max_attempts})")

        try:
            await handler(job.payload)
        except FatalJobError as e:
            job.status = await asyncio.to_thread(self.fail, job, str(e), False)
            logger.error(f"Job {job.job_id} failed permanently: {e}")
        except Exception as e:
            job.status = await asyncio.to_thread(self.fail, job, str(e) or type(e).__name__)
            if job.status == "failed":
                logger.error(f"Job {job.job_id} failed after {job.attempts} attempts: {e}", exc_info=True)
            else:
                logger.warning(f"Job {job.job_id} failed, will retry: {e}")
        else:
            await asyncio.to_thread(self.ack, job.job_id)
            job.status = "done"
            logger.info(f"Job {job.job_id} completed")

        return job

    async def process(self, handler: JobHandler, stop_event: Optional[asyncio.Event] = None) -> None:
        """
        Consume jobs until stop_event is set, polling when the queue is empty.
        """
        logger.info(f"Consumer started on queue '{self.name}'")
        while stop_event is None or not stop_event.is_set():
            try:
                job = await self.process_next(handler)
            except Exception as e:
                logger.error(f"Consumer loop error: {e}", exc_info=True)
                job = None

            if job is None:
                if stop_event is None:
                    await asyncio.sleep(self.poll_interval)
                    continue
                try:
                    await asyncio.wait_for(stop_event.wait(), timeout=self.poll_interval)
                except asyncio.TimeoutError:
                    pass

        logger.info(f"Consumer stopped on queue '{self.name}'")
