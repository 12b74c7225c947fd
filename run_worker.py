"""ARQ Worker runner script."""

import asyncio
import logging

# Setup logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger("transtrack.worker")


async def main():
    from arq.worker import create_worker
    from transtrack.workers import WorkerSettings

    logger.info("Initializing worker...")

    redis_settings = WorkerSettings.redis_settings
    logger.info(f"Redis: {redis_settings.host}:{redis_settings.port}")

    worker = create_worker(WorkerSettings)

    logger.info("Worker starting...")
    await worker.main()


if __name__ == "__main__":
    print("=" * 50)
    print("TransTrack ARQ Worker")
    print("=" * 50)
    asyncio.run(main())
