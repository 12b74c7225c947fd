"""
Unit Tests for the in-memory job store and the job record shape
"""

from datetime import datetime, timedelta, timezone

import pytest

from transtrack.core.exceptions import NotFoundError, PersistenceError, StaleStatusError
from transtrack.models import JobStatus
from transtrack.store import InMemoryJobStore
from transtrack.store.base import JOBS_TOPIC, JobFilter, JobRecord

pytestmark = pytest.mark.asyncio

T0 = datetime(2024, 3, 1, 9, 30, tzinfo=timezone.utc)


def make_record(job_id="job-1", owner_id="u-1", status=JobStatus.QUEUED, upload_date=T0):
    return JobRecord(
        id=job_id,
        owner_id=owner_id,
        owner_name="alice",
        file_name="slides.pptx",
        file_size=4096,
        source_language="German",
        target_language="English",
        status=status,
        upload_date=upload_date,
    )


class TestJobRecord:
    """External camelCase shape"""

    async def test_to_dict_omits_unset_fields(self):
        data = make_record().to_dict()

        assert data["fileName"] == "slides.pptx"
        assert data["ownerId"] == "u-1"
        assert data["status"] == "queued"
        assert data["uploadDate"] == T0.isoformat()
        assert "completedDate" not in data
        assert "errorMessage" not in data

    async def test_to_dict_includes_terminal_fields(self):
        record = make_record()
        done = JobRecord(**{**record.__dict__, "status": JobStatus.ERROR, "error_message": "boom"})

        assert done.to_dict()["errorMessage"] == "boom"


class TestInMemoryJobStore:
    async def test_insert_and_get(self):
        store = InMemoryJobStore()
        await store.insert(make_record())

        job = await store.get("job-1")
        assert job.status == JobStatus.QUEUED
        assert job.seq == 1
        assert await store.get("missing") is None

    async def test_duplicate_id_rejected(self):
        store = InMemoryJobStore()
        await store.insert(make_record())

        with pytest.raises(PersistenceError):
            await store.insert(make_record())

    async def test_query_filters(self):
        store = InMemoryJobStore()
        await store.insert(make_record("a", owner_id="u-1"))
        await store.insert(make_record("b", owner_id="u-2", status=JobStatus.COMPLETED))
        await store.insert(make_record("c", owner_id="u-1", upload_date=T0 - timedelta(hours=2)))

        assert [j.id for j in await store.query()] == ["a", "b", "c"]
        assert [j.id for j in await store.query(JobFilter(owner_id="u-1"))] == ["a", "c"]
        assert [j.id for j in await store.query(JobFilter(statuses=(JobStatus.COMPLETED,)))] == ["b"]
        assert [j.id for j in await store.query(JobFilter(uploaded_before=T0))] == ["c"]

    async def test_compare_and_write(self):
        store = InMemoryJobStore()
        await store.insert(make_record())

        updated = await store.update("job-1", {"status": "processing"}, expected_status=JobStatus.QUEUED)
        assert updated.status == JobStatus.PROCESSING

        with pytest.raises(StaleStatusError):
            await store.update("job-1", {"status": JobStatus.ERROR}, expected_status=JobStatus.QUEUED)
        assert (await store.get("job-1")).status == JobStatus.PROCESSING

    async def test_update_missing_job(self):
        store = InMemoryJobStore()
        with pytest.raises(NotFoundError):
            await store.update("nope", {"status": JobStatus.ERROR})

    async def test_immutable_fields_rejected(self):
        store = InMemoryJobStore()
        await store.insert(make_record())

        with pytest.raises(ValueError):
            await store.update("job-1", {"owner_id": "someone-else"})

    async def test_writes_publish_without_payload(self):
        store = InMemoryJobStore()
        calls = []
        store.notifier.subscribe(JOBS_TOPIC, lambda: calls.append(True))

        await store.insert(make_record())
        await store.update("job-1", {"status": JobStatus.PROCESSING})

        assert calls == [True, True]
