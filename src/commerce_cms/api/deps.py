"""
commerce_cms.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Provide dependency functions for settings, DB sessions, cache and job queues.
- Store multipart image uploads before handlers run.
- Gate public routes behind the maintenance switch.
"""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, File, Request, UploadFile
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_503_SERVICE_UNAVAILABLE

from commerce_cms.cache.redis_cache import RedisCache
from commerce_cms.db.repositories.settings import MAINTENANCE_KEY, SettingRepo
from commerce_cms.errors import AppError, ErrorCode
from commerce_cms.jobs.queues import JobQueue
from commerce_cms.settings import Settings
from commerce_cms.storage.uploads import StoredUpload, UploadStorage


def settings_dep(request: Request) -> Settings:
    # Set in `api.app.create_app`.
    return request.app.state.settings  # type: ignore[attr-defined]


def sessionmaker_from_app(request: Request) -> async_sessionmaker[AsyncSession]:
    return request.app.state.sessionmaker  # type: ignore[attr-defined]


async def db_session(
    session_factory: async_sessionmaker[AsyncSession] = Depends(sessionmaker_from_app),
) -> AsyncIterator[AsyncSession]:
    # Request-scoped DB session. Commit/rollback is managed by the service layer.
    async with session_factory() as session:
        yield session


def cache_dep(request: Request) -> RedisCache:
    return request.app.state.cache  # type: ignore[attr-defined]


def image_queue_dep(request: Request) -> JobQueue:
    return request.app.state.image_queue  # type: ignore[attr-defined]


def cache_queue_dep(request: Request) -> JobQueue:
    return request.app.state.cache_queue  # type: ignore[attr-defined]


def storage_dep(settings: Settings = Depends(settings_dep)) -> UploadStorage:
    return UploadStorage(settings)


async def image_upload(
    image: UploadFile | None = File(default=None),
    storage: UploadStorage = Depends(storage_dep),
) -> StoredUpload | None:
    if image is None:
        return None
    return await storage.save(image)


async def image_uploads(
    images: list[UploadFile] | None = File(default=None),
    storage: UploadStorage = Depends(storage_dep),
    settings: Settings = Depends(settings_dep),
) -> list[StoredUpload]:
    if not images:
        return []
    if len(images) > settings.max_product_images:
        raise AppError(
            f"You can upload up to {settings.max_product_images} images.",
            HTTP_400_BAD_REQUEST,
            ErrorCode.invalid,
        )
    stored: list[StoredUpload] = []
    for image in images:
        try:
            upload = await storage.save(image)
        except AppError:
            await storage.discard(stored)
            raise
        if upload is not None:
            stored.append(upload)
    return stored


async def maintenance_guard(
    request: Request,
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
) -> None:
    if await SettingRepo(session).get_value(MAINTENANCE_KEY) != "true":
        return
    client_ip = request.client.host if request.client else ""
    if client_ip in settings.maintenance_whitelist:
        return
    raise AppError(
        "The server is currently under maintenance. Please try again later.",
        HTTP_503_SERVICE_UNAVAILABLE,
        ErrorCode.maintenance,
    )


# --- Module Notes -----------------------------------------------------------
# Upload dependencies run before the handler body, so handlers own the cleanup of
# stored files on every error path after that point.
