"""SQLAlchemy-backed job store."""

import logging
from typing import Any, Mapping

from sqlalchemy import select, update as sql_update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from transtrack.core.exceptions import NotFoundError, PersistenceError, StaleStatusError
from transtrack.models import Job, JobStatus
from transtrack.store.base import JobFilter, JobRecord, check_changes, notify_changed
from transtrack.store.notifier import LocalNotifier

logger = logging.getLogger("transtrack.store")


def to_record(row: Job) -> JobRecord:
    return JobRecord(
        id=row.id,
        owner_id=row.owner_id,
        owner_name=row.owner_name,
        file_name=row.file_name,
        file_size=row.file_size,
        source_language=row.source_language,
        target_language=row.target_language,
        status=JobStatus(row.status),
        upload_date=row.upload_date,
        completed_date=row.completed_date,
        error_message=row.error_message,
        seq=row.seq,
    )


class SqlJobStore:
    """Job store on the ``jobs`` table.

    Each operation runs in its own short session, so the store can be shared
    by request handlers and pipeline tasks.
    """

    def __init__(
        self,
        session_maker: async_sessionmaker[AsyncSession],
        notifier: LocalNotifier | None = None,
    ):
        self._session_maker = session_maker
        self.notifier = notifier or LocalNotifier()

    async def insert(self, job: JobRecord) -> str:
        row = Job(
            id=job.id,
            owner_id=job.owner_id,
            owner_name=job.owner_name,
            file_name=job.file_name,
            file_size=job.file_size,
            source_language=job.source_language,
            target_language=job.target_language,
            status=JobStatus(job.status).value,
            upload_date=job.upload_date,
            completed_date=job.completed_date,
            error_message=job.error_message,
        )
        try:
            async with self._session_maker() as session:
                session.add(row)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Insert of job {job.id} failed: {e}")
            raise PersistenceError("Could not save the job", operation="insert") from e

        await notify_changed(self.notifier)
        return job.id

    async def get(self, job_id: str) -> JobRecord | None:
        try:
            async with self._session_maker() as session:
                result = await session.execute(select(Job).where(Job.id == job_id))
                row = result.scalar_one_or_none()
        except SQLAlchemyError as e:
            raise PersistenceError("Could not load the job", operation="get") from e
        return to_record(row) if row else None

    async def query(self, job_filter: JobFilter | None = None) -> list[JobRecord]:
        job_filter = job_filter or JobFilter()
        query = select(Job)
        if job_filter.owner_id is not None:
            query = query.where(Job.owner_id == job_filter.owner_id)
        if job_filter.statuses is not None:
            query = query.where(Job.status.in_([s.value for s in job_filter.statuses]))
        if job_filter.uploaded_before is not None:
            query = query.where(Job.upload_date < job_filter.uploaded_before)
        query = query.order_by(Job.seq)

        try:
            async with self._session_maker() as session:
                result = await session.execute(query)
                rows = result.scalars().all()
        except SQLAlchemyError as e:
            raise PersistenceError("Could not list jobs", operation="query") from e
        return [to_record(row) for row in rows]

    async def update(
        self,
        job_id: str,
        changes: Mapping[str, Any],
        expected_status: JobStatus | None = None,
    ) -> JobRecord:
        check_changes(changes)
        values = dict(changes)
        if "status" in values:
            values["status"] = JobStatus(values["status"]).value

        stmt = sql_update(Job).where(Job.id == job_id).values(**values)
        if expected_status is not None:
            stmt = stmt.where(Job.status == JobStatus(expected_status).value)

        try:
            async with self._session_maker() as session:
                result = await session.execute(stmt)
                await session.commit()
        except SQLAlchemyError as e:
            logger.error(f"Update of job {job_id} failed: {e}")
            raise PersistenceError("Could not update the job", operation="update") from e

        if result.rowcount == 0:
            current = await self.get(job_id)
            if current is None or expected_status is None:
                raise NotFoundError("Job", job_id)
            raise StaleStatusError(job_id, JobStatus(expected_status).value)

        await notify_changed(self.notifier)
        updated = await self.get(job_id)
        if updated is None:
            raise NotFoundError("Job", job_id)
        return updated
