"""Job records and the job store contract."""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Mapping, Protocol

from transtrack.core.logging import get_logger
from transtrack.models.job import JobStatus

logger = get_logger(__name__)

JOBS_TOPIC = "jobs"

# Only these fields may change after creation
MUTABLE_FIELDS = frozenset({"status", "completed_date", "error_message"})


@dataclass(frozen=True)
class JobRecord:
    """A translation job as seen by the services."""
    id: str
    owner_id: str
    file_name: str
    file_size: int
    source_language: str
    target_language: str
    status: JobStatus
    upload_date: datetime
    owner_name: str = ""
    completed_date: datetime | None = None
    error_message: str | None = None
    seq: int = 0

    def to_dict(self) -> dict[str, Any]:
        """External shape; optional fields are omitted when unset."""
        data: dict[str, Any] = {
            "id": self.id,
            "ownerId": self.owner_id,
            "ownerName": self.owner_name,
            "fileName": self.file_name,
            "fileSize": self.file_size,
            "sourceLanguage": self.source_language,
            "targetLanguage": self.target_language,
            "status": self.status.value,
            "uploadDate": self.upload_date.isoformat(),
        }
        if self.completed_date is not None:
            data["completedDate"] = self.completed_date.isoformat()
        if self.error_message is not None:
            data["errorMessage"] = self.error_message
        return data


@dataclass(frozen=True)
class JobFilter:
    """Query filter. Unset fields match everything."""
    owner_id: str | None = None
    statuses: tuple[JobStatus, ...] | None = None
    uploaded_before: datetime | None = None

    def matches(self, job: JobRecord) -> bool:
        if self.owner_id is not None and job.owner_id != self.owner_id:
            return False
        if self.statuses is not None and job.status not in self.statuses:
            return False
        if self.uploaded_before is not None and job.upload_date >= self.uploaded_before:
            return False
        return True


def check_changes(changes: Mapping[str, Any]) -> None:
    illegal = set(changes) - MUTABLE_FIELDS
    if illegal:
        raise ValueError(f"Immutable job fields cannot be updated: {sorted(illegal)}")


class Subscription(Protocol):
    def cancel(self) -> None:
        ...


class ChangeNotifier(Protocol):
    def subscribe(self, topic: str, callback: Any) -> Subscription:
        ...

    async def publish(self, topic: str) -> None:
        ...


async def notify_changed(notifier: ChangeNotifier, topic: str = JOBS_TOPIC) -> None:
    """Signal a committed write. Best effort: a lost signal never fails the write."""
    try:
        await notifier.publish(topic)
    except Exception:
        logger.exception("Change notification failed", topic=topic)


class JobStore(Protocol):
    """Persistent collection of job records.

    ``update`` with ``expected_status`` is a compare-and-write: it only
    applies when the stored status still equals ``expected_status`` and
    raises ``StaleStatusError`` otherwise.
    """

    notifier: ChangeNotifier

    async def insert(self, job: JobRecord) -> str:
        ...

    async def get(self, job_id: str) -> JobRecord | None:
        ...

    async def query(self, job_filter: JobFilter | None = None) -> list[JobRecord]:
        """Matching jobs in insertion order."""
        ...

    async def update(
        self,
        job_id: str,
        changes: Mapping[str, Any],
        expected_status: JobStatus | None = None,
    ) -> JobRecord:
        ...
