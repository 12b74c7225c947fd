"""Test doubles shared by the unit tests."""

from datetime import datetime, timedelta, timezone


class FakeClock:
    """Settable clock; every reading advances by ``step``."""

    def __init__(self, start: datetime | None = None, step: timedelta = timedelta(0)):
        self.now = start or datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)
        self.step = step

    def __call__(self) -> datetime:
        current = self.now
        self.now = self.now + self.step
        return current

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


class RecordingDispatcher:
    """Dispatcher that only records job ids; tests run pipelines explicitly."""

    def __init__(self):
        self.dispatched: list[str] = []

    async def dispatch(self, job_id, runner):
        self.dispatched.append(job_id)

    async def close(self):
        pass


class StubTranslator:
    """Translation engine returning a fixed result or raising a fixed error."""

    def __init__(self, result: str = "translated text", error: Exception | None = None):
        self.result = result
        self.error = error
        self.calls: list[tuple[str, str, str]] = []

    async def translate(self, text, source_language, target_language):
        self.calls.append((text, source_language, target_language))
        if self.error is not None:
            raise self.error
        return self.result


async def no_sleep(seconds: float) -> None:
    return None
