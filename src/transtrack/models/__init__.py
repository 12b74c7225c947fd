"""Database models."""

from .user import User, UserRole
from .job import Job, JobStatus, ACTIVE_STATUSES

__all__ = [
    "User",
    "UserRole",
    "Job",
    "JobStatus",
    "ACTIVE_STATUSES",
]
