import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from digest_api.application.scheduler import build_summary_scheduler
from digest_api.config import get_settings
from digest_api.infrastructure.database import engine, initialize_database
from digest_api.interfaces.api.routes import register_routes

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create tables, run the digest scheduler and release resources on shutdown."""

    settings = get_settings()
    initialize_database()
    scheduler = build_summary_scheduler(settings)
    app.state.summary_scheduler = scheduler
    if settings.summary_scheduler_enabled:
        scheduler.start()
    else:
        logger.info("Summary scheduler disabled by configuration")
    try:
        yield
    finally:
        await scheduler.stop()
        engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""

    settings = get_settings()
    app = FastAPI(title="Notification Digest API", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_routes(app)
    return app


app = create_app()
