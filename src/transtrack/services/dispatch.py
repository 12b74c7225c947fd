"""Driver pipeline dispatchers.

A dispatcher starts the pipeline for a freshly inserted job without making
the submitter wait for it.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, Protocol

from arq import ArqRedis

from transtrack.core.logging import get_logger

logger = get_logger(__name__)

PipelineRunner = Callable[[str], Awaitable[Any]]

TRANSLATION_TASK = "run_translation_job"


class Dispatcher(Protocol):
    async def dispatch(self, job_id: str, runner: PipelineRunner) -> None:
        ...

    async def close(self) -> None:
        ...


class LocalDispatcher:
    """Runs each pipeline as an asyncio task in the current process."""

    def __init__(self, shutdown_grace: float = 5.0):
        self.shutdown_grace = shutdown_grace
        self._tasks: set[asyncio.Task] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def dispatch(self, job_id: str, runner: PipelineRunner) -> None:
        task = asyncio.create_task(runner(job_id), name=f"pipeline-{job_id}")
        # Keep a strong reference until the task finishes
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for running pipelines."""
        if self._tasks:
            await asyncio.wait(set(self._tasks), timeout=timeout)

    async def close(self) -> None:
        await self.drain(timeout=self.shutdown_grace)
        if self._tasks:
            logger.warning("Cancelling unfinished pipelines", count=len(self._tasks))
            for task in list(self._tasks):
                task.cancel()
            await asyncio.gather(*self._tasks, return_exceptions=True)


class ArqDispatcher:
    """Hands pipelines to ARQ workers through Redis."""

    def __init__(self, pool: ArqRedis, function: str = TRANSLATION_TASK):
        self._pool = pool
        self.function = function

    async def dispatch(self, job_id: str, runner: PipelineRunner) -> None:
        # The ARQ job id makes a second enqueue for the same job a no-op
        arq_job = await self._pool.enqueue_job(self.function, job_id, _job_id=f"translate:{job_id}")
        if arq_job is None:
            logger.warning("Pipeline already enqueued", job_id=job_id)
        else:
            logger.info("Pipeline enqueued", job_id=job_id, task_id=arq_job.job_id)

    async def close(self) -> None:
        await self._pool.aclose()
