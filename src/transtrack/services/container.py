"""Wiring of the services for the API process and the workers."""

from dataclasses import dataclass
from datetime import timedelta

from arq import create_pool
from redis.asyncio import Redis
from sqlalchemy.ext.asyncio import AsyncEngine

from transtrack.config import Settings
from transtrack.core.logging import get_logger
from transtrack.db import close_db, init_db, make_engine, make_session_maker
from transtrack.integrations.translation import TranslationEngine, build_translation_engine
from transtrack.services.dispatch import ArqDispatcher, Dispatcher, LocalDispatcher
from transtrack.services.lifecycle import JobLifecycleEngine, UploadLimits
from transtrack.services.users import UserService
from transtrack.store.notifier import LocalNotifier, RedisNotifier
from transtrack.store.sql import SqlJobStore

logger = get_logger(__name__)


@dataclass
class Services:
    settings: Settings
    db_engine: AsyncEngine
    notifier: LocalNotifier
    translator: TranslationEngine
    dispatcher: Dispatcher
    engine: JobLifecycleEngine
    users: UserService

    @property
    def stale_after(self) -> timedelta:
        return timedelta(minutes=self.settings.pipeline.stale_after_minutes)

    async def close(self) -> None:
        await self.dispatcher.close()
        await self.notifier.close()
        aclose = getattr(self.translator, "aclose", None)
        if aclose is not None:
            await aclose()
        await close_db(self.db_engine)


async def build_notifier(settings: Settings) -> LocalNotifier:
    if settings.pipeline.notifier == "redis":
        redis = Redis.from_url(
            settings.redis.url,
            password=settings.redis.password,
            decode_responses=True,
        )
        notifier = RedisNotifier(redis, settings.pipeline.notify_channel)
    else:
        notifier = LocalNotifier()
    await notifier.start()
    return notifier


async def build_dispatcher(settings: Settings) -> Dispatcher:
    if settings.pipeline.dispatcher == "arq":
        from transtrack.workers import get_redis_settings

        return ArqDispatcher(await create_pool(get_redis_settings()))
    return LocalDispatcher()


async def build_services(
    settings: Settings,
    *,
    translator: TranslationEngine | None = None,
    dispatcher: Dispatcher | None = None,
    notifier: LocalNotifier | None = None,
) -> Services:
    """Create the database, store, engine and user service from settings."""
    db_engine = make_engine(settings.database.url, echo=settings.database.echo)
    await init_db(db_engine)
    session_maker = make_session_maker(db_engine)

    notifier = notifier or await build_notifier(settings)
    translator = translator or build_translation_engine(settings.translation)
    dispatcher = dispatcher or await build_dispatcher(settings)

    store = SqlJobStore(session_maker, notifier)
    engine = JobLifecycleEngine(
        store,
        translator,
        dispatcher,
        limits=UploadLimits.from_settings(settings.upload),
        ingest_delay=settings.pipeline.ingest_delay,
        translation_timeout=settings.pipeline.translation_timeout,
    )

    logger.info(
        "Services ready",
        dispatcher=settings.pipeline.dispatcher,
        notifier=settings.pipeline.notifier,
        translation_provider=settings.translation.provider,
    )
    return Services(
        settings=settings,
        db_engine=db_engine,
        notifier=notifier,
        translator=translator,
        dispatcher=dispatcher,
        engine=engine,
        users=UserService(session_maker),
    )
