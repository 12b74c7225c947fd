"""ARQ Worker Tasks for TransTrack.

Driver pipelines and maintenance jobs executed in the worker process. The
services are built once per worker in ``on_startup`` and shared through
the ARQ context.
"""

import logging
from typing import Any

from transtrack.core.logging import bind_context
from transtrack.services.container import Services

logger = logging.getLogger("transtrack.workers")


async def run_translation_job(ctx: dict, job_id: str) -> dict[str, Any]:
    """
    Drive one translation job to a terminal status.

    Args:
        ctx: ARQ context (holds the shared services)
        job_id: ID of the job to drive

    Returns:
        Result dict with the final status
    """
    services: Services = ctx["services"]
    bind_context(job_id=job_id)
    logger.info(f"Starting translation job {job_id}")

    await services.engine.run_pipeline(job_id)

    job = await services.engine.store.get(job_id)
    return {"job_id": job_id, "status": job.status.value if job else None}


async def reconcile_stale_jobs(ctx: dict) -> dict[str, Any]:
    """Error out jobs whose pipeline was lost."""
    services: Services = ctx["services"]
    errored = await services.engine.reconcile_stale_jobs(services.stale_after)
    if errored:
        logger.warning(f"Reconciled {len(errored)} stale jobs")
    return {"errored": errored}
