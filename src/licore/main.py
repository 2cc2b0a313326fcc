"""FastAPI application: Bitbucket webhooks, health and admin endpoints."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from . import __version__
from .api.admin import router as admin_router
from .api.health import router as health_router
from .api.webhooks import router as webhooks_router
from .config import settings
from .database import init_db
from .tasks.worker import app as procrastinate_app
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging()
    await init_db()
    # Webhooks defer review jobs through the open procrastinate app
    async with procrastinate_app.open_async():
        logger.info(f"Licore {__version__} reviewing {settings.bitbucket_base_url}")
        yield


app = FastAPI(
    title="Licore",
    description="Lint review for Bitbucket pull requests",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(health_router)
app.include_router(webhooks_router)
app.include_router(admin_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "licore.main:app",
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
    )
