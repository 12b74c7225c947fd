"""Async SQLAlchemy engine and session management."""

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from transtrack.config import settings


class Base(DeclarativeBase):
    """Declarative base for all ORM models."""


def make_engine(url: str | None = None, echo: bool | None = None) -> AsyncEngine:
    """Create an async engine for ``url`` (defaults to the configured database)."""
    url = url or settings.database.url
    connect_args = {}
    if url.startswith("sqlite"):
        # API requests and pipeline tasks write concurrently
        connect_args["timeout"] = 30
    return create_async_engine(
        url,
        echo=settings.database.echo if echo is None else echo,
        connect_args=connect_args,
    )


def make_session_maker(bind: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind, expire_on_commit=False)


async def init_db(bind: AsyncEngine) -> None:
    """Create tables that do not exist yet."""
    from transtrack import models  # noqa: F401  (registers tables)

    async with bind.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db(bind: AsyncEngine) -> None:
    await bind.dispose()
