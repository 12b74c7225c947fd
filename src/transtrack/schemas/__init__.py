"""Pydantic schemas for API request/response models.

Job payloads use camelCase keys; snake_case is accepted on input as well.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from transtrack.models import JobStatus, UserRole


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# ─────────────────────────────────────────────────────────────────────────────
# Auth Schemas
# ─────────────────────────────────────────────────────────────────────────────

class UserLogin(BaseModel):
    """Schema for user login."""
    username: str
    password: str


class Token(BaseModel):
    """JWT token response."""
    access_token: str
    token_type: str = "bearer"


class PrincipalResponse(BaseModel):
    """The authenticated caller."""
    id: str
    username: str
    role: UserRole

    model_config = {"from_attributes": True}


# ─────────────────────────────────────────────────────────────────────────────
# User Schemas
# ─────────────────────────────────────────────────────────────────────────────

class UserCreate(BaseModel):
    """Schema for creating a user (admin only)."""
    username: str = Field(..., min_length=1, max_length=150)
    password: str = Field(..., min_length=8)
    role: UserRole = UserRole.USER


class RoleUpdate(BaseModel):
    role: UserRole


class UserResponse(CamelModel):
    """User response schema."""
    id: str
    username: str
    role: UserRole
    created_at: datetime


# ─────────────────────────────────────────────────────────────────────────────
# Job Schemas
# ─────────────────────────────────────────────────────────────────────────────

class JobCreate(CamelModel):
    """One document to translate."""
    file_name: str
    file_size: int
    source_language: str
    target_language: str


class DocumentInfo(CamelModel):
    file_name: str
    file_size: int


class BatchJobCreate(CamelModel):
    """Several documents sharing one language pair."""
    files: list[DocumentInfo]
    source_language: str
    target_language: str


class StatusUpdate(CamelModel):
    """Manual status correction (admin only)."""
    status: JobStatus
    error_message: str | None = None


class JobResponse(CamelModel):
    """Job response schema; unset optional fields are omitted."""
    id: str
    owner_id: str
    owner_name: str
    file_name: str
    file_size: int
    source_language: str
    target_language: str
    status: JobStatus
    upload_date: datetime
    completed_date: datetime | None = None
    error_message: str | None = None


class JobCounts(BaseModel):
    total: int
    active: int
    completed: int
    error: int


class JobListResponse(BaseModel):
    jobs: list[JobResponse]
    counts: JobCounts


class LanguageOptions(BaseModel):
    source: list[str]
    target: list[str]


__all__ = [
    # Auth
    "UserLogin",
    "Token",
    "PrincipalResponse",
    # Users
    "UserCreate",
    "RoleUpdate",
    "UserResponse",
    # Jobs
    "JobCreate",
    "DocumentInfo",
    "BatchJobCreate",
    "StatusUpdate",
    "JobResponse",
    "JobCounts",
    "JobListResponse",
    "LanguageOptions",
]
