"""FastAPI application entrypoint."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.core.config import settings
from src.core.database import AsyncSessionLocal
from src.core.exceptions import register_exception_handlers
from src.core.logging_config import configure_logging
from src.modules.payments.router import public_router as public_payments_router
from src.modules.payments.router import router as payments_router
from src.modules.payments.sweeper import start_expiry_scheduler

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_: FastAPI):
    scheduler = None
    if settings.expiry_sweeper_enabled:
        scheduler = start_expiry_scheduler(AsyncSessionLocal)
    try:
        yield
    finally:
        if scheduler is not None:
            scheduler.shutdown(wait=False)
            logger.info("Expiry scheduler stopped")


def create_app() -> FastAPI:
    configure_logging()
    app = FastAPI(
        title=settings.app_name,
        debug=settings.debug,
        version="0.1.0",
        lifespan=lifespan,
    )
    register_exception_handlers(app)

    @app.get("/health", tags=["system"])
    async def health_check() -> dict[str, str]:
        return {"status": "ok"}

    app.include_router(payments_router)
    app.include_router(public_payments_router)

    return app


app = create_app()
