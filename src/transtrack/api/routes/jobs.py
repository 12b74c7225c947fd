"""Jobs routes."""

import asyncio
import logging

import orjson
from fastapi import APIRouter, Query, WebSocket, WebSocketDisconnect, status

from transtrack.api.deps import AuthDep, EngineDep, principal_from_token
from transtrack.core.authorization import AuthorizationBoundary
from transtrack.core.exceptions import ValidationError
from transtrack.core.logging import bind_context, clear_context
from transtrack.models import JobStatus, UserRole
from transtrack.schemas import (
    BatchJobCreate,
    JobCounts,
    JobCreate,
    JobListResponse,
    JobResponse,
    StatusUpdate,
)
from transtrack.services.feed import JobFeed
from transtrack.services.lifecycle import JobDetails, count_by_status
from transtrack.store.base import JobRecord

router = APIRouter(prefix="/jobs", tags=["jobs"])
logger = logging.getLogger("transtrack.api.jobs")


def job_listing(jobs: list[JobRecord]) -> JobListResponse:
    return JobListResponse(
        jobs=[JobResponse.model_validate(job) for job in jobs],
        counts=JobCounts(**count_by_status(jobs)),
    )


# ─────────────────────────────────────────────────────────────────────────────
# Live feed
# ─────────────────────────────────────────────────────────────────────────────

async def _pump(websocket: WebSocket, feed: JobFeed) -> None:
    async for jobs in feed.updates():
        payload = job_listing(jobs).model_dump(mode="json", by_alias=True, exclude_none=True)
        await websocket.send_text(orjson.dumps(payload).decode())


async def _receive_until_disconnect(websocket: WebSocket) -> None:
    # Clients never send anything meaningful; reading detects the close
    try:
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        return


@router.websocket("/feed")
async def job_feed(
    websocket: WebSocket,
    token: str | None = None,
    search: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
):
    """Push the caller's visible jobs on connect and after every change."""
    services = websocket.app.state.services
    principal = await principal_from_token(services, token)
    if principal is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    if status_filter is not None and status_filter not in {s.value for s in JobStatus}:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    bind_context(user_id=principal.id, feed=True)
    logger.info(f"Job feed opened for {principal.username}")

    auth = AuthorizationBoundary.for_principal(principal)
    try:
        async with JobFeed(services.engine, auth, search=search, status=status_filter) as feed:
            pump = asyncio.create_task(_pump(websocket, feed))
            receiver = asyncio.create_task(_receive_until_disconnect(websocket))
            done, pending = await asyncio.wait(
                {pump, receiver}, return_when=asyncio.FIRST_COMPLETED
            )
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)

            if pump in done and pump.exception() is not None:
                logger.error("Job feed failed", exc_info=pump.exception())
                await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
    finally:
        logger.info(f"Job feed closed for {principal.username}")
        clear_context()


# ─────────────────────────────────────────────────────────────────────────────
# Routes
# ─────────────────────────────────────────────────────────────────────────────

@router.get("", response_model=JobListResponse, response_model_exclude_none=True)
async def list_jobs(
    engine: EngineDep,
    auth: AuthDep,
    search: str | None = None,
    status_filter: str | None = Query(None, alias="status"),
):
    """List visible jobs, newest first, with dashboard counters."""
    jobs = await engine.get_visible_jobs(auth, search=search, status=status_filter)
    return job_listing(jobs)


@router.post(
    "",
    response_model=JobResponse,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_job(data: JobCreate, engine: EngineDep, auth: AuthDep):
    """Submit one document; its pipeline starts right away."""
    job_id = await engine.add_job(
        auth,
        JobDetails(
            file_name=data.file_name,
            file_size=data.file_size,
            source_language=data.source_language,
            target_language=data.target_language,
        ),
    )
    return JobResponse.model_validate(await engine.get_job(auth, job_id))


@router.post(
    "/batch",
    response_model=list[JobResponse],
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_jobs(data: BatchJobCreate, engine: EngineDep, auth: AuthDep):
    """Submit several documents sharing one language pair."""
    job_ids = await engine.add_jobs(
        auth,
        [
            JobDetails(f.file_name, f.file_size, data.source_language, data.target_language)
            for f in data.files
        ],
    )
    return [JobResponse.model_validate(await engine.get_job(auth, job_id)) for job_id in job_ids]


@router.get("/{job_id}", response_model=JobResponse, response_model_exclude_none=True)
async def get_job(job_id: str, engine: EngineDep, auth: AuthDep):
    """Get job by ID."""
    return JobResponse.model_validate(await engine.get_job(auth, job_id))


@router.patch("/{job_id}/status", response_model=JobResponse, response_model_exclude_none=True)
async def update_job_status(job_id: str, data: StatusUpdate, engine: EngineDep, auth: AuthDep):
    """Manually advance a job (admin only). Only forward moves are accepted."""
    admin = auth.require_role(UserRole.ADMIN)
    if data.status != JobStatus.ERROR and data.error_message:
        raise ValidationError("An error message is only accepted with the error status", field="errorMessage")

    job = await engine.update_status(job_id, data.status, data.error_message)
    logger.info(f"Job {job_id} set to {data.status.value} by {admin.username}")
    return JobResponse.model_validate(job)
