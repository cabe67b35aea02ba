"""Karaflow Worker"""

import asyncio
import json
import logging

from redis.asyncio import Redis

from karaflow.config import Settings
from karaflow.pipeline import create_orchestrator
from karaflow.utils.logging_setup import setup_logging
from handlers.task_handler import process_task

TASK_QUEUE = "karaflow:tasks:queue"


async def main():
    """Worker main entry point."""
    settings = Settings()
    setup_logging(settings)
    logger = logging.getLogger("karaflow.worker")
    redis = Redis.from_url(settings.redis_url, decode_responses=True)
    orchestrator = create_orchestrator(settings, redis=redis)

    logger.info(
        "Worker starting (redis=%s, queue_backend=%s, transfer_backend=%s)",
        settings.redis_url,
        settings.queue.backend,
        settings.transfer.backend,
    )

    try:
        while True:
            item = await redis.brpop(TASK_QUEUE, timeout=5)
            if not item:
                continue
            _, raw = item
            try:
                payload = json.loads(raw)
            except ValueError:
                logger.warning("dropping non-JSON task: %r", raw)
                continue
            await process_task(payload, redis, orchestrator, ttl_s=settings.redis_task_ttl_s)
    finally:
        await orchestrator.services.queue.close()
        await orchestrator.services.transfer.close()
        await redis.aclose()


if __name__ == "__main__":
    asyncio.run(main())
