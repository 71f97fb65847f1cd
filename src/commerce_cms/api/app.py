"""
commerce_cms.api.app

FastAPI app factory for the commerce CMS service.

Responsibilities:
- Build the FastAPI application and register routers, middleware and error handlers.
- Create and dispose shared infrastructure (DB engine, Redis cache, job queues).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from commerce_cms import __version__
from commerce_cms.api.routers.admin import router as admin_router
from commerce_cms.api.routers.dev_auth import router as dev_auth_router
from commerce_cms.api.routers.health import router as health_router
from commerce_cms.api.routers.public import router as public_router
from commerce_cms.cache.redis_cache import RedisCache
from commerce_cms.db.init_db import init_db
from commerce_cms.db.session import create_engine, create_sessionmaker
from commerce_cms.errors import register_error_handlers
from commerce_cms.jobs.celery_app import create_celery_app
from commerce_cms.jobs.queues import CACHE_QUEUE, IMAGE_QUEUE, JobQueue
from commerce_cms.observability.logging import configure_logging, get_logger
from commerce_cms.observability.middleware import RequestContextMiddleware
from commerce_cms.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    configure_logging(service_name=settings.service_name, level=settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Prod uses Alembic migrations.
            await init_db(engine)

        settings.images_dir.mkdir(parents=True, exist_ok=True)
        settings.optimized_dir.mkdir(parents=True, exist_ok=True)

        app.state.cache = RedisCache.from_url(
            settings.redis_url, ttl_seconds=settings.cache_ttl_seconds
        )
        celery = create_celery_app(settings)
        app.state.image_queue = JobQueue(IMAGE_QUEUE, celery=celery)
        app.state.cache_queue = JobQueue(CACHE_QUEUE, celery=celery)
        try:
            yield
        finally:
            await app.state.cache.close()
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Commerce CMS",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    register_error_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(dev_auth_router)
    app.include_router(admin_router)
    app.include_router(public_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Redis and the Celery producer connect lazily, so the app starts without a
# running broker; the first cache read or publish is what needs one.
