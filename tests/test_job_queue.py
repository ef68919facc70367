"""Tests for the SQLite-backed work queue."""

import asyncio
import threading
from datetime import timedelta

import pytest

from controller.exceptions import FatalJobError
from controller.job_queue import JobQueue


@pytest.fixture
def timed_queue(test_db, clock):
    return JobQueue(max_attempts=3, visibility_timeout=60, poll_interval=0.01, clock=clock)


class TestClaimAndAck:
    def test_fifo_order(self, job_queue):
        first = job_queue.enqueue({"n": 1})
        second = job_queue.enqueue({"n": 2})

        assert job_queue.claim().job_id == first
        assert job_queue.claim().job_id == second
        assert job_queue.claim() is None

    def test_claim_marks_processing(self, job_queue):
        job_id = job_queue.enqueue({"fileId": "f1"})

        job = job_queue.claim()

        assert job.payload == {"fileId": "f1"}
        assert job.attempts == 1
        assert job_queue.get_job(job_id).status == "processing"

    def test_ack_removes_job(self, job_queue):
        job_id = job_queue.enqueue({})
        job_queue.claim()

        job_queue.ack(job_id)

        assert job_queue.get_job(job_id) is None
        assert job_queue.pending_count() == 0

    def test_queues_are_isolated(self, test_db):
        thumbnails = JobQueue("thumbnails")
        other = JobQueue("other")
        thumbnails.enqueue({})

        assert other.claim() is None
        assert thumbnails.claim() is not None


class TestFailures:
    def test_retry_with_backoff_then_dead_letter(self, timed_queue, clock):
        job_id = timed_queue.enqueue({})

        job = timed_queue.claim()
        assert timed_queue.fail(job, "boom") == "queued"
        assert timed_queue.claim() is None

        clock.advance(timedelta(seconds=1))
        job = timed_queue.claim()
        assert job.attempts == 2
        assert timed_queue.fail(job, "boom") == "queued"

        clock.advance(timedelta(seconds=2))
        job = timed_queue.claim()
        assert job.attempts == 3
        assert timed_queue.fail(job, "boom again") == "failed"

        clock.advance(timedelta(hours=1))
        assert timed_queue.claim() is None
        stored = timed_queue.get_job(job_id)
        assert stored.status == "failed"
        assert stored.last_error == "boom again"

    def test_non_retryable_failure(self, timed_queue):
        job_id = timed_queue.enqueue({})
        job = timed_queue.claim()

        assert timed_queue.fail(job, "bad payload", retryable=False) == "failed"
        assert timed_queue.get_job(job_id).attempts == 1

    def test_stale_claim_is_redelivered(self, timed_queue, clock):
        job_id = timed_queue.enqueue({})
        timed_queue.claim()

        clock.advance(timedelta(seconds=30))
        assert timed_queue.requeue_stale() == 0
        assert timed_queue.claim() is None

        clock.advance(timedelta(seconds=31))
        assert timed_queue.requeue_stale() == 1

        redelivered = timed_queue.claim()
        assert redelivered.job_id == job_id
        assert redelivered.attempts == 2


class TestProcess:
    @pytest.mark.asyncio
    async def test_process_next_acks_on_success(self, job_queue):
        seen = []

        async def handler(payload):
            seen.append(payload)

        job_id = job_queue.enqueue({"fileId": "f1"})
        job = await job_queue.process_next(handler)

        assert job.status == "done"
        assert seen == [{"fileId": "f1"}]
        assert job_queue.get_job(job_id) is None

    @pytest.mark.asyncio
    async def test_process_next_on_empty_queue(self, job_queue):
        async def handler(payload):
            raise AssertionError("should not be called")

        assert await job_queue.process_next(handler) is None

    @pytest.mark.asyncio
    async def test_fatal_error_is_not_retried(self, job_queue):
        async def handler(payload):
            raise FatalJobError("Missing fileId")

        job_id = job_queue.enqueue({})
        job = await job_queue.process_next(handler)

        assert job.status == "failed"
        assert job_queue.get_job(job_id).last_error == "Missing fileId"

    @pytest.mark.asyncio
    async def test_other_errors_are_retried(self, job_queue):
        async def handler(payload):
            raise OSError("disk hiccup")

        job_id = job_queue.enqueue({})
        job = await job_queue.process_next(handler)

        assert job.status == "queued"
        assert job_queue.get_job(job_id).status == "queued"

    @pytest.mark.asyncio
    async def test_process_loop_stops_on_event(self, job_queue):
        handled = []
        stop_event = asyncio.Event()

        async def handler(payload):
            handled.append(payload["n"])
            if len(handled) == 2:
                stop_event.set()

        job_queue.enqueue({"n": 1})
        job_queue.enqueue({"n": 2})

        await asyncio.wait_for(job_queue.process(handler, stop_event), timeout=5)

        assert handled == [1, 2]
        assert job_queue.pending_count() == 0

    @pytest.mark.asyncio
    async def test_database_calls_run_off_the_event_loop(self, job_queue, monkeypatch):
        loop_thread = threading.get_ident()
        threads = {}

        for name in ("requeue_stale", "claim", "ack"):
            original = getattr(job_queue, name)

            def recording(*args, _name=name, _original=original):
                threads[_name] = threading.get_ident()
                return _original(*args)

            monkeypatch.setattr(job_queue, name, recording)

        async def handler(payload):
            pass

        job_queue.enqueue({})
        job = await job_queue.process_next(handler)

        assert job.status == "done"
        assert set(threads) == {"requeue_stale", "claim", "ack"}
        assert loop_thread not in threads.values()
