"""Live job feed: a read-through cache of one caller's visible jobs."""

import asyncio
from collections.abc import AsyncIterator

from transtrack.core.authorization import AuthorizationBoundary
from transtrack.services.lifecycle import JobLifecycleEngine
from transtrack.store.base import JobRecord
from transtrack.store.notifier import Subscription


class JobFeed:
    """
    Keeps ``jobs`` in sync with the store.

    Change notifications only mark the cache dirty; the next iteration of
    ``updates()`` re-fetches the whole visible list. Bursts of notifications
    collapse into one re-fetch and their order does not matter.
    """

    def __init__(
        self,
        engine: JobLifecycleEngine,
        auth: AuthorizationBoundary,
        search: str | None = None,
        status: str | None = None,
    ):
        self._engine = engine
        self._auth = auth
        self._search = search
        self._status = status
        self._dirty = asyncio.Event()
        self._subscription: Subscription | None = None
        self.jobs: list[JobRecord] = []

    def start(self) -> None:
        self._auth.require_user()
        self._subscription = self._engine.subscribe(self._on_change)
        # First iteration returns the initial snapshot
        self._dirty.set()

    def _on_change(self) -> None:
        self._dirty.set()

    async def refresh(self) -> list[JobRecord]:
        self.jobs = await self._engine.get_visible_jobs(
            self._auth, search=self._search, status=self._status
        )
        return self.jobs

    async def updates(self) -> AsyncIterator[list[JobRecord]]:
        """Yield a fresh snapshot every time something changed."""
        while True:
            await self._dirty.wait()
            self._dirty.clear()
            yield await self.refresh()

    def close(self) -> None:
        if self._subscription is not None:
            self._subscription.cancel()
            self._subscription = None

    async def __aenter__(self) -> "JobFeed":
        self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        self.close()
