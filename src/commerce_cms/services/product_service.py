"""
commerce_cms.services.product_service

Product write lifecycle; same shape as `post_service` with a list of images and
no authorship check.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_404_NOT_FOUND

from commerce_cms.db.models import Product
from commerce_cms.db.repositories.products import ProductRepo
from commerce_cms.db.repositories.taxonomy import TaxonomyRepo
from commerce_cms.errors import AppError, ErrorCode
from commerce_cms.jobs.queues import (
    INVALIDATE_PRODUCT_CACHE,
    PRODUCT_CACHE_PATTERN,
    JobQueue,
    enqueue_cache_invalidation,
    enqueue_image_optimization,
)
from commerce_cms.observability.logging import get_logger
from commerce_cms.settings import Settings
from commerce_cms.storage.uploads import StoredUpload, UploadStorage, optimized_name
from commerce_cms.validation import ProductForm, ProductUpdateForm, parse_form

log = get_logger(__name__)


class ProductService:
    def __init__(
        self,
        *,
        session: AsyncSession,
        settings: Settings,
        storage: UploadStorage,
        image_queue: JobQueue,
        cache_queue: JobQueue,
    ) -> None:
        self._session = session
        self._settings = settings
        self._storage = storage
        self._image_queue = image_queue
        self._cache_queue = cache_queue

        self._products = ProductRepo(session)
        self._taxonomy = TaxonomyRepo(session)

    async def create(self, *, fields: Mapping[str, Any], uploads: list[StoredUpload]) -> Product:
        try:
            form = parse_form(ProductForm, fields)
        except AppError:
            await self._storage.discard(uploads)
            raise
        if not uploads:
            raise AppError("Invalid image.", HTTP_400_BAD_REQUEST, ErrorCode.invalid)

        await self._optimize(uploads)
        product = await self._products.create(
            name=form.name,
            description=form.description,
            price=form.price,
            discount=form.discount,
            inventory=form.inventory,
            category=await self._taxonomy.category(form.category),
            type=await self._taxonomy.type(form.type),
            tags=await self._taxonomy.tags(form.tags or []),
            images=[u.filename for u in uploads],
        )
        await self._session.commit()
        log.info("product_created", product_id=product.id, images=len(uploads))

        await self._invalidate_cache()
        return product

    async def update(self, *, fields: Mapping[str, Any], uploads: list[StoredUpload]) -> Product:
        try:
            form = parse_form(ProductUpdateForm, fields)
            product = await self._load(form.product_id)
        except AppError:
            await self._storage.discard(uploads)
            raise

        replaced: list[str] = []
        if uploads:
            await self._optimize(uploads)
            replaced = [image.path for image in product.images]

        product = await self._products.update(
            product,
            name=form.name,
            description=form.description,
            price=form.price,
            discount=form.discount,
            inventory=form.inventory,
            category=await self._taxonomy.category(form.category),
            type=await self._taxonomy.type(form.type),
            tags=await self._taxonomy.tags(form.tags) if form.tags is not None else None,
            images=[u.filename for u in uploads] if uploads else None,
        )
        await self._session.commit()
        log.info("product_updated", product_id=product.id, images_replaced=len(replaced))

        for path in replaced:
            await self._storage.remove_files(path, optimized_name(path))
        await self._invalidate_cache()
        return product

    async def delete(self, *, product_id: int) -> int:
        product = await self._load(product_id)
        paths = [image.path for image in product.images]

        await self._products.delete(product)
        await self._session.commit()
        log.info("product_deleted", product_id=product_id)

        for path in paths:
            await self._storage.remove_files(path, optimized_name(path))
        await self._invalidate_cache()
        return product_id

    async def _load(self, product_id: int) -> Product:
        product = await self._products.get(product_id)
        if product is None:
            raise AppError("This data does not exist.", HTTP_404_NOT_FOUND, ErrorCode.invalid)
        return product

    async def _optimize(self, uploads: list[StoredUpload]) -> None:
        for upload in uploads:
            await enqueue_image_optimization(
                self._image_queue,
                upload,
                width=self._settings.product_image_width,
                height=self._settings.product_image_height,
                quality=self._settings.image_quality,
            )

    async def _invalidate_cache(self) -> None:
        await enqueue_cache_invalidation(
            self._cache_queue, INVALIDATE_PRODUCT_CACHE, PRODUCT_CACHE_PATTERN
        )
