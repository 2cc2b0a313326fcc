"""Procrastinate app and review worker entrypoint."""

import asyncio
import logging

import procrastinate

from ..config import settings
from ..utils.logging import setup_logging

logger = logging.getLogger(__name__)

app = procrastinate.App(
    connector=procrastinate.PsycopgConnector(conninfo=settings.procrastinate_database_url),
    import_paths=["licore.tasks.review_tasks"],
)


async def run_worker() -> None:
    """Process the review queue until cancelled."""
    setup_logging()
    logger.info(
        f"Starting review worker on queue '{settings.review_queue}' "
        f"(concurrency={settings.worker_concurrency})"
    )
    async with app.open_async():
        await app.run_worker_async(
            queues=[settings.review_queue],
            concurrency=settings.worker_concurrency,
        )


if __name__ == "__main__":
    asyncio.run(run_worker())
