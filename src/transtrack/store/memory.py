"""In-memory job store."""

import itertools
from dataclasses import replace
from typing import Any, Mapping

from transtrack.core.exceptions import NotFoundError, PersistenceError, StaleStatusError
from transtrack.models.job import JobStatus
from transtrack.store.base import JobFilter, JobRecord, check_changes, notify_changed
from transtrack.store.notifier import LocalNotifier


class InMemoryJobStore:
    """Job store kept in a dict. Single event loop only."""

    def __init__(self, notifier: LocalNotifier | None = None):
        self.notifier = notifier or LocalNotifier()
        self._jobs: dict[str, JobRecord] = {}
        self._seq = itertools.count(1)

    def __len__(self) -> int:
        return len(self._jobs)

    async def insert(self, job: JobRecord) -> str:
        if job.id in self._jobs:
            raise PersistenceError(f"Duplicate job id: {job.id}", operation="insert")
        self._jobs[job.id] = replace(job, seq=next(self._seq))
        await notify_changed(self.notifier)
        return job.id

    async def get(self, job_id: str) -> JobRecord | None:
        return self._jobs.get(job_id)

    async def query(self, job_filter: JobFilter | None = None) -> list[JobRecord]:
        job_filter = job_filter or JobFilter()
        return [job for job in self._jobs.values() if job_filter.matches(job)]

    async def update(
        self,
        job_id: str,
        changes: Mapping[str, Any],
        expected_status: JobStatus | None = None,
    ) -> JobRecord:
        check_changes(changes)
        job = self._jobs.get(job_id)
        if job is None:
            raise NotFoundError("Job", job_id)
        if expected_status is not None and job.status != expected_status:
            raise StaleStatusError(job_id, JobStatus(expected_status).value)

        changes = dict(changes)
        if "status" in changes:
            changes["status"] = JobStatus(changes["status"])
        updated = replace(job, **changes)
        self._jobs[job_id] = updated
        await notify_changed(self.notifier)
        return updated
