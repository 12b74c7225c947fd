"""Job model for translation request tracking."""

from datetime import datetime
from enum import Enum

from sqlalchemy import BigInteger, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from transtrack.db import Base, UTCDateTime


class JobStatus(str, Enum):
    """Job status. Values are the wire tokens."""
    QUEUED = "queued"
    PROCESSING = "processing"
    TRANSLATING = "translating"
    COMPLETED = "completed"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.ERROR)


ACTIVE_STATUSES = (JobStatus.QUEUED, JobStatus.PROCESSING, JobStatus.TRANSLATING)


class Job(Base):
    """Persisted translation job."""

    __tablename__ = "jobs"

    # Insertion sequence; breaks upload_date ties
    seq: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    id: Mapped[str] = mapped_column(String(36), unique=True, index=True)

    # Owner
    owner_id: Mapped[str] = mapped_column(String(36), index=True)
    owner_name: Mapped[str] = mapped_column(String(150), default="")

    # Document
    file_name: Mapped[str] = mapped_column(String(255))
    file_size: Mapped[int] = mapped_column(BigInteger)
    source_language: Mapped[str] = mapped_column(String(50))
    target_language: Mapped[str] = mapped_column(String(50))

    # Lifecycle
    status: Mapped[str] = mapped_column(String(20), default=JobStatus.QUEUED.value, index=True)
    error_message: Mapped[str | None] = mapped_column(Text)

    # Timestamps
    upload_date: Mapped[datetime] = mapped_column(UTCDateTime, index=True)
    completed_date: Mapped[datetime | None] = mapped_column(UTCDateTime)

    def __repr__(self) -> str:
        return f"<Job {self.id} {self.status}>"
