from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Form
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from commerce_cms.api.deps import (
    cache_queue_dep,
    db_session,
    image_queue_dep,
    image_uploads,
    settings_dep,
    storage_dep,
)
from commerce_cms.auth.deps import require_admin
from commerce_cms.db.models import User
from commerce_cms.jobs.queues import JobQueue
from commerce_cms.services.product_service import ProductService
from commerce_cms.settings import Settings
from commerce_cms.storage.uploads import StoredUpload, UploadStorage
from commerce_cms.validation import ProductDeleteRequest

router = APIRouter(
    prefix="/v1/admin/products",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


def product_service(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    storage: UploadStorage = Depends(storage_dep),
    image_queue: JobQueue = Depends(image_queue_dep),
    cache_queue: JobQueue = Depends(cache_queue_dep),
) -> ProductService:
    return ProductService(
        session=session,
        settings=settings,
        storage=storage,
        image_queue=image_queue,
        cache_queue=cache_queue,
    )


def product_fields(
    name: str | None = Form(default=None),
    description: str | None = Form(default=None),
    price: str | None = Form(default=None),
    discount: str | None = Form(default=None),
    inventory: str | None = Form(default=None),
    category: str | None = Form(default=None),
    type_: str | None = Form(default=None, alias="type"),
    tags: str | None = Form(default=None),
) -> dict[str, Any]:
    return {
        "name": name,
        "description": description,
        "price": price,
        "discount": discount,
        "inventory": inventory,
        "category": category,
        "type": type_,
        "tags": tags,
    }


@router.post("", status_code=HTTP_201_CREATED)
async def create_product(
    _: User = Depends(require_admin),
    uploads: list[StoredUpload] = Depends(image_uploads),
    fields: dict[str, Any] = Depends(product_fields),
    svc: ProductService = Depends(product_service),
) -> dict[str, Any]:
    product = await svc.create(fields=fields, uploads=uploads)
    return {"message": "Successfully created new product.", "productId": product.id}


@router.patch("")
async def update_product(
    _: User = Depends(require_admin),
    uploads: list[StoredUpload] = Depends(image_uploads),
    fields: dict[str, Any] = Depends(product_fields),
    product_id: str | None = Form(default=None, alias="productId"),
    svc: ProductService = Depends(product_service),
) -> dict[str, Any]:
    product = await svc.update(fields={"productId": product_id, **fields}, uploads=uploads)
    return {"message": "Successfully updated product.", "productId": product.id}


@router.delete("")
async def delete_product(
    body: ProductDeleteRequest,
    svc: ProductService = Depends(product_service),
) -> dict[str, Any]:
    product_id = await svc.delete(product_id=body.product_id)
    return {"message": "Product deleted successfully.", "productId": product_id}
