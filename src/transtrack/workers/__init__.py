"""ARQ Worker Configuration for TransTrack.

Run worker with: arq transtrack.workers.WorkerSettings

Use together with PIPELINE_DISPATCHER=arq and PIPELINE_NOTIFIER=redis on the
API side, so that status changes made here reach the API's live feeds.
"""

from arq import cron
from arq.connections import RedisSettings

from transtrack.config import settings
from transtrack.workers.tasks import reconcile_stale_jobs, run_translation_job


def get_redis_settings() -> RedisSettings:
    """Get Redis settings from app config."""
    redis_settings = RedisSettings.from_dsn(settings.redis.url)
    if settings.redis.password:
        redis_settings.password = settings.redis.password
    redis_settings.conn_timeout = settings.redis.timeout
    return redis_settings


class WorkerSettings:
    """ARQ Worker Settings.

    Available tasks:
    - run_translation_job: drive a job through its pipeline
    - reconcile_stale_jobs: error out jobs whose pipeline was lost
    """

    functions = [
        run_translation_job,
        reconcile_stale_jobs,
    ]

    redis_settings = get_redis_settings()

    max_jobs = 20
    # Ingest delay plus translation timeout, with headroom
    job_timeout = int(settings.pipeline.ingest_delay + settings.pipeline.translation_timeout) + 60
    keep_result = 3600

    # Pipelines never retry
    max_tries = 1

    cron_jobs = [
        cron(reconcile_stale_jobs, minute={0, 10, 20, 30, 40, 50}),
    ]

    @staticmethod
    async def on_startup(ctx: dict) -> None:
        """Called when worker starts."""
        from transtrack.core.logging import get_logger, setup_logging
        from transtrack.services.container import build_services

        setup_logging(
            level="DEBUG" if settings.debug else "INFO",
            json_format=settings.is_production(),
            service="worker",
        )

        # Workers never submit jobs, so the local dispatcher stays idle here
        from transtrack.services.dispatch import LocalDispatcher

        ctx["services"] = await build_services(settings, dispatcher=LocalDispatcher())

        logger = get_logger("transtrack.worker")
        logger.info(
            "TransTrack ARQ Worker started",
            env=settings.env,
            max_jobs=WorkerSettings.max_jobs,
            notifier=settings.pipeline.notifier,
        )
        if settings.pipeline.notifier != "redis":
            logger.warning("Local notifier in worker: API feeds will not see status changes")

    @staticmethod
    async def on_shutdown(ctx: dict) -> None:
        """Called when worker shuts down."""
        from transtrack.core.logging import get_logger

        services = ctx.get("services")
        if services is not None:
            await services.close()
        get_logger("transtrack.worker").info("TransTrack ARQ Worker shutting down")

    @staticmethod
    async def on_job_end(ctx: dict) -> None:
        """Called when a job ends."""
        from transtrack.core.logging import clear_context

        clear_context()


__all__ = [
    "WorkerSettings",
    "get_redis_settings",
    "run_translation_job",
    "reconcile_stale_jobs",
]
