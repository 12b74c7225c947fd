"""
Unit Tests for ARQ worker tasks
"""

from datetime import timedelta
from types import SimpleNamespace

import pytest

from transtrack.models import JobStatus
from transtrack.services.lifecycle import JobDetails, JobLifecycleEngine
from transtrack.store import InMemoryJobStore
from transtrack.workers import WorkerSettings, reconcile_stale_jobs, run_translation_job

from helpers import FakeClock, RecordingDispatcher, StubTranslator, no_sleep

pytestmark = pytest.mark.asyncio


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def ctx(clock):
    engine = JobLifecycleEngine(
        InMemoryJobStore(), StubTranslator(), RecordingDispatcher(), clock=clock, sleep=no_sleep
    )
    services = SimpleNamespace(engine=engine, stale_after=timedelta(minutes=30))
    return {"services": services}


class TestWorkerTasks:
    async def test_run_translation_job(self, ctx, as_alice):
        engine = ctx["services"].engine
        job_id = await engine.add_job(as_alice, JobDetails("a.pdf", 10, "English", "Polish"))

        result = await run_translation_job(ctx, job_id)

        assert result == {"job_id": job_id, "status": "completed"}

    async def test_run_translation_job_unknown_id(self, ctx):
        assert await run_translation_job(ctx, "ghost") == {"job_id": "ghost", "status": None}

    async def test_reconcile(self, ctx, clock, as_alice):
        engine = ctx["services"].engine
        job_id = await engine.add_job(as_alice, JobDetails("a.pdf", 10, "English", "Polish"))
        clock.advance(hours=1)

        result = await reconcile_stale_jobs(ctx)

        assert result == {"errored": [job_id]}
        assert (await engine.store.get(job_id)).status == JobStatus.ERROR


class TestWorkerSettings:
    async def test_registered_functions(self):
        assert run_translation_job in WorkerSettings.functions
        assert reconcile_stale_jobs in WorkerSettings.functions
        assert WorkerSettings.max_tries == 1
