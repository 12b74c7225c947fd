"""
Job lifecycle engine.

Owns job creation, role-scoped retrieval and the status state machine, and
drives each job through its pipeline:

    queued -> processing -> translating -> completed | error

The store is the source of truth. Every status write re-reads the stored
status and is applied with a compare-and-write, so concurrent writers for
the same job (driver, admin correction, stale sweep) cannot produce an
impossible sequence.
"""

import asyncio
import os
import uuid
from collections.abc import Awaitable, Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from operator import attrgetter

from transtrack.config import UploadSettings
from transtrack.core.authorization import AuthorizationBoundary
from transtrack.core.exceptions import (
    InvalidTransitionError,
    NotFoundError,
    PersistenceError,
    StaleStatusError,
    TranslationEngineError,
    ValidationError,
)
from transtrack.core.logging import get_logger, job_context
from transtrack.integrations.translation import TranslationEngine
from transtrack.models import ACTIVE_STATUSES, JobStatus, UserRole
from transtrack.services.dispatch import Dispatcher, LocalDispatcher
from transtrack.services.languages import (
    SOURCE_LANGUAGES,
    TARGET_LANGUAGES,
    get_language_options,
)
from transtrack.services.states import is_valid_transition
from transtrack.store.base import JOBS_TOPIC, JobFilter, JobRecord, JobStore
from transtrack.store.notifier import ChangeCallback, Subscription

logger = get_logger(__name__)

# User-facing error messages. Never include exception text.
DEFAULT_ERROR_MESSAGE = "Translation failed."
PROVIDER_ERROR_MESSAGE = "Translation service error. Please try again."
TIMEOUT_ERROR_MESSAGE = "Translation timed out. Please try again."
EMPTY_RESULT_MESSAGE = "Translation service returned an empty result. Please try again."
EXTRACTION_ERROR_MESSAGE = "The document could not be read."
UNEXPECTED_ERROR_MESSAGE = "Unexpected error while processing the document. Please try again."
DISPATCH_ERROR_MESSAGE = "Processing could not be started. Please submit the file again."
STALE_ERROR_MESSAGE = "Processing was interrupted. Please submit the file again."

# Placeholder content until a real extractor is plugged in
SAMPLE_DOCUMENT_TEXT = "This is a sample document content for translation."


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


async def placeholder_extractor(job: JobRecord) -> str:
    return SAMPLE_DOCUMENT_TEXT


Clock = Callable[[], datetime]
Sleep = Callable[[float], Awaitable[None]]
TextExtractor = Callable[[JobRecord], Awaitable[str]]


@dataclass(frozen=True)
class JobDetails:
    """What a user submits for one document."""
    file_name: str
    file_size: int
    source_language: str
    target_language: str


@dataclass(frozen=True)
class UploadLimits:
    max_file_size: int = 10 * 1024 * 1024
    allowed_extensions: tuple[str, ...] = (".pdf", ".docx", ".pptx")
    max_files_per_submission: int = 10

    @classmethod
    def from_settings(cls, upload: UploadSettings) -> "UploadLimits":
        return cls(
            max_file_size=upload.max_file_size,
            allowed_extensions=tuple(ext.lower() for ext in upload.allowed_extensions),
            max_files_per_submission=upload.max_files_per_submission,
        )


def sort_newest_first(jobs: Iterable[JobRecord]) -> list[JobRecord]:
    """Order by upload date descending; equal dates keep insertion order."""
    by_insertion = sorted(jobs, key=attrgetter("seq"))
    return sorted(by_insertion, key=attrgetter("upload_date"), reverse=True)


def matches_search(job: JobRecord, search: str) -> bool:
    needle = search.strip().lower()
    if not needle:
        return True
    haystack = (job.file_name, job.source_language, job.target_language, job.owner_name)
    return any(needle in value.lower() for value in haystack)


def count_by_status(jobs: Iterable[JobRecord]) -> dict[str, int]:
    """Dashboard counters."""
    counts = {"total": 0, "active": 0, "completed": 0, "error": 0}
    for job in jobs:
        counts["total"] += 1
        if job.status in ACTIVE_STATUSES:
            counts["active"] += 1
        elif job.status == JobStatus.COMPLETED:
            counts["completed"] += 1
        else:
            counts["error"] += 1
    return counts


class JobLifecycleEngine:
    """Creates jobs, advances their status and serves role-scoped views."""

    def __init__(
        self,
        store: JobStore,
        translator: TranslationEngine,
        dispatcher: Dispatcher | None = None,
        *,
        limits: UploadLimits | None = None,
        ingest_delay: float = 0.0,
        translation_timeout: float = 60.0,
        extractor: TextExtractor = placeholder_extractor,
        clock: Clock = utcnow,
        sleep: Sleep = asyncio.sleep,
        id_factory: Callable[[], str] = lambda: str(uuid.uuid4()),
    ):
        self.store = store
        self.translator = translator
        self.dispatcher = dispatcher or LocalDispatcher()
        self.limits = limits or UploadLimits()
        self.ingest_delay = ingest_delay
        self.translation_timeout = translation_timeout
        self._extractor = extractor
        self._clock = clock
        self._sleep = sleep
        self._new_id = id_factory

    # ─────────────────────────────────────────────────────────────────────────
    # Creation
    # ─────────────────────────────────────────────────────────────────────────

    def validate(self, details: JobDetails) -> JobDetails:
        """Check one submission; returns it with the file name trimmed."""
        file_name = (details.file_name or "").strip()
        if not file_name:
            raise ValidationError("File name is required", field="fileName")

        size = details.file_size
        if isinstance(size, bool) or not isinstance(size, int) or size <= 0:
            raise ValidationError("File size must be greater than zero", field="fileSize")
        if size > self.limits.max_file_size:
            limit_mb = self.limits.max_file_size // (1024 * 1024)
            raise ValidationError(
                f"File {file_name} exceeds the maximum size limit of {limit_mb}MB.",
                field="fileSize",
            )

        if self.limits.allowed_extensions:
            extension = os.path.splitext(file_name)[1].lower()
            if extension not in self.limits.allowed_extensions:
                raise ValidationError(
                    f"File type {extension or '(none)'} is not supported.",
                    field="fileName",
                )

        if details.source_language not in SOURCE_LANGUAGES:
            raise ValidationError(
                f"Unsupported source language: {details.source_language}",
                field="sourceLanguage",
            )
        if details.target_language not in TARGET_LANGUAGES:
            raise ValidationError(
                f"Unsupported target language: {details.target_language}",
                field="targetLanguage",
            )

        return JobDetails(file_name, size, details.source_language, details.target_language)

    async def add_job(self, auth: AuthorizationBoundary, details: JobDetails) -> str:
        """Insert a queued job for the current user and start its pipeline."""
        owner = auth.require_user()
        details = self.validate(details)
        return await self._create(owner.id, owner.username, details)

    async def add_jobs(
        self,
        auth: AuthorizationBoundary,
        batch: Sequence[JobDetails],
    ) -> list[str]:
        """Submit several documents at once. Nothing is inserted unless all are valid."""
        owner = auth.require_user()
        if not batch:
            raise ValidationError("Please select at least one file to translate", field="files")
        if len(batch) > self.limits.max_files_per_submission:
            raise ValidationError(
                f"You can only upload a maximum of {self.limits.max_files_per_submission} files.",
                field="files",
            )

        validated = [self.validate(details) for details in batch]
        return [await self._create(owner.id, owner.username, d) for d in validated]

    async def _create(self, owner_id: str, owner_name: str, details: JobDetails) -> str:
        job = JobRecord(
            id=self._new_id(),
            owner_id=owner_id,
            owner_name=owner_name,
            file_name=details.file_name,
            file_size=details.file_size,
            source_language=details.source_language,
            target_language=details.target_language,
            status=JobStatus.QUEUED,
            upload_date=self._clock(),
        )
        job_id = await self.store.insert(job)
        logger.info(
            "Job submitted",
            job_id=job_id,
            owner_id=owner_id,
            file_name=details.file_name,
            languages=f"{details.source_language}->{details.target_language}",
        )

        try:
            await self.dispatcher.dispatch(job_id, self.run_pipeline)
        except Exception:
            logger.exception("Pipeline dispatch failed", job_id=job_id)
            await self._advance(job_id, JobStatus.ERROR, DISPATCH_ERROR_MESSAGE)
        return job_id

    # ─────────────────────────────────────────────────────────────────────────
    # State machine
    # ─────────────────────────────────────────────────────────────────────────

    async def update_status(
        self,
        job_id: str,
        new_status: JobStatus | str,
        error_message: str | None = None,
    ) -> JobRecord:
        """Move a job one step forward.

        Raises:
            ValidationError: unknown status token
            InvalidTransitionError: not a forward move from the stored status
            NotFoundError: job does not exist
            PersistenceError: store failure
        """
        try:
            new_status = JobStatus(new_status)
        except ValueError:
            raise ValidationError(f"Unknown status: {new_status}", field="status")

        while True:
            job = await self.store.get(job_id)
            if job is None:
                raise NotFoundError("Job", job_id)
            if not is_valid_transition(job.status, new_status):
                raise InvalidTransitionError(job_id, job.status.value, new_status.value)

            changes: dict = {"status": new_status}
            if new_status == JobStatus.COMPLETED:
                changes["completed_date"] = self._clock()
            elif new_status == JobStatus.ERROR:
                changes["error_message"] = (error_message or "").strip() or DEFAULT_ERROR_MESSAGE

            try:
                updated = await self.store.update(job_id, changes, expected_status=job.status)
            except StaleStatusError:
                # Another writer got there first; validate against the new status
                logger.debug("Status changed concurrently, retrying", job_id=job_id)
                continue

            logger.info(
                "Job status updated",
                job_id=job_id,
                previous=job.status.value,
                status=new_status.value,
            )
            return updated

    async def _advance(
        self,
        job_id: str,
        status: JobStatus,
        error_message: str | None = None,
    ) -> bool:
        """Status write from inside the pipeline. Returns False when the pipeline should stop."""
        try:
            await self.update_status(job_id, status, error_message)
        except (NotFoundError, InvalidTransitionError) as e:
            logger.warning("Pipeline stopped", job_id=job_id, target=status.value, reason=e.message)
            return False
        except PersistenceError as e:
            logger.error("Status write failed, continuing", job_id=job_id, target=status.value, reason=e.message)
        return True

    async def _fail(self, job_id: str, message: str) -> None:
        await self._advance(job_id, JobStatus.ERROR, message)

    # ─────────────────────────────────────────────────────────────────────────
    # Driver pipeline
    # ─────────────────────────────────────────────────────────────────────────

    async def run_pipeline(self, job_id: str) -> None:
        """Drive one job to a terminal status. Never raises, never retries."""
        with job_context(job_id):
            await self._drive(job_id)

    async def _drive(self, job_id: str) -> None:
        try:
            job = await self.store.get(job_id)
            if job is None:
                logger.warning("Pipeline started for unknown job")
                return

            logger.info("Pipeline started")
            if not await self._advance(job_id, JobStatus.PROCESSING):
                return

            await self._sleep(self.ingest_delay)
            try:
                text = await self._extractor(job)
            except Exception:
                logger.exception("Text extraction failed")
                await self._fail(job_id, EXTRACTION_ERROR_MESSAGE)
                return

            if not await self._advance(job_id, JobStatus.TRANSLATING):
                return

            try:
                translated = await asyncio.wait_for(
                    self.translator.translate(text, job.source_language, job.target_language),
                    timeout=self.translation_timeout,
                )
            except asyncio.TimeoutError:
                logger.warning("Translation timed out", timeout=self.translation_timeout)
                await self._fail(job_id, TIMEOUT_ERROR_MESSAGE)
                return
            except TranslationEngineError as e:
                logger.warning("Translation engine failed", reason=e.message)
                await self._fail(job_id, PROVIDER_ERROR_MESSAGE)
                return

            if not translated or not translated.strip():
                await self._fail(job_id, EMPTY_RESULT_MESSAGE)
                return

            await self._advance(job_id, JobStatus.COMPLETED)
            logger.info("Pipeline finished", translated_chars=len(translated))

        except Exception:
            logger.exception("Pipeline crashed")
            await self._fail(job_id, UNEXPECTED_ERROR_MESSAGE)

    # ─────────────────────────────────────────────────────────────────────────
    # Reads
    # ─────────────────────────────────────────────────────────────────────────

    async def get_visible_jobs(
        self,
        auth: AuthorizationBoundary,
        search: str | None = None,
        status: JobStatus | str | None = None,
    ) -> list[JobRecord]:
        """All jobs for admins, own jobs otherwise; newest first."""
        user = auth.require_user()
        if auth.has_role(UserRole.ADMIN):
            job_filter = JobFilter()
        else:
            job_filter = JobFilter(owner_id=user.id)

        if status is not None:
            try:
                job_filter = JobFilter(owner_id=job_filter.owner_id, statuses=(JobStatus(status),))
            except ValueError:
                raise ValidationError(f"Unknown status: {status}", field="status")

        jobs = await self.store.query(job_filter)
        if search:
            jobs = [job for job in jobs if matches_search(job, search)]
        return sort_newest_first(jobs)

    async def get_job(self, auth: AuthorizationBoundary, job_id: str) -> JobRecord:
        """One job, if the caller may see it."""
        user = auth.require_user()
        job = await self.store.get(job_id)
        if job is None:
            raise NotFoundError("Job", job_id)
        if job.owner_id != user.id and not auth.has_role(UserRole.ADMIN):
            raise NotFoundError("Job", job_id)
        return job

    @staticmethod
    def get_language_options() -> dict[str, list[str]]:
        return get_language_options()

    def subscribe(self, callback: ChangeCallback) -> Subscription:
        """Register a no-payload callback fired after every job write."""
        return self.store.notifier.subscribe(JOBS_TOPIC, callback)

    # ─────────────────────────────────────────────────────────────────────────
    # Maintenance
    # ─────────────────────────────────────────────────────────────────────────

    async def reconcile_stale_jobs(self, older_than: timedelta) -> list[str]:
        """Error out non-terminal jobs uploaded more than ``older_than`` ago.

        Their pipeline died with the process that hosted it.
        """
        cutoff = self._clock() - older_than
        stale = await self.store.query(
            JobFilter(statuses=ACTIVE_STATUSES, uploaded_before=cutoff)
        )

        errored = []
        for job in stale:
            try:
                await self.update_status(job.id, JobStatus.ERROR, STALE_ERROR_MESSAGE)
            except (NotFoundError, InvalidTransitionError):
                continue
            except PersistenceError as e:
                # Left for the next sweep
                logger.error("Stale job could not be errored", job_id=job.id, reason=e.message)
                continue
            errored.append(job.id)

        if errored:
            logger.warning("Stale jobs errored", count=len(errored), cutoff=cutoff.isoformat())
        return errored
