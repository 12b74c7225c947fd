"""
Unit Tests for logging helpers
"""

import structlog

from transtrack.core.logging import job_context, service_tagger


class TestLoggingContext:
    def test_job_context_binds_and_restores(self):
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(request_id="req-1")

        with job_context("job-7"):
            assert structlog.contextvars.get_contextvars() == {
                "request_id": "req-1",
                "job_id": "job-7",
            }

        assert structlog.contextvars.get_contextvars() == {"request_id": "req-1"}
        structlog.contextvars.clear_contextvars()

    def test_service_tag(self):
        tag = service_tagger("worker")

        assert tag(None, "info", {"event": "started"}) == {"event": "started", "service": "worker"}
        assert tag(None, "info", {"service": "api"})["service"] == "api"
