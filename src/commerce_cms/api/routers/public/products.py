"""
commerce_cms.api.routers.public.products

Public, cached product reads with cursor pagination.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from commerce_cms.api.deps import cache_dep, db_session, maintenance_guard
from commerce_cms.api.routers.public.schemas import ProductSummary
from commerce_cms.cache.redis_cache import RedisCache
from commerce_cms.db.repositories.products import ProductRepo
from commerce_cms.errors import AppError, ErrorCode
from commerce_cms.validation import MAX_ID

router = APIRouter(
    prefix="/v1/products", tags=["products"], dependencies=[Depends(maintenance_guard)]
)


@router.get("")
async def list_products(
    cursor: int | None = Query(default=None, ge=1, le=MAX_ID),
    limit: int = Query(default=5, ge=1, le=50),
    session: AsyncSession = Depends(db_session),
    cache: RedisCache = Depends(cache_dep),
) -> dict[str, Any]:
    async def load() -> dict[str, Any]:
        rows = await ProductRepo(session).after_cursor(cursor=cursor, limit=limit + 1)
        items = rows[:limit]
        has_next = len(rows) > limit
        return {
            "products": [ProductSummary.from_row(p).dump() for p in items],
            "hasNextPage": has_next,
            "nextCursor": items[-1].id if has_next else None,
        }

    key = f"products:list:cursor={cursor if cursor is not None else ''}:limit={limit}"
    return await cache.get_or_set(key, load)


@router.get("/{product_id}")
async def get_product(
    product_id: int = Path(ge=1, le=MAX_ID),
    session: AsyncSession = Depends(db_session),
    cache: RedisCache = Depends(cache_dep),
) -> dict[str, Any]:
    async def load() -> dict[str, Any] | None:
        product = await ProductRepo(session).get(product_id)
        if product is None:
            return None
        return {"product": ProductSummary.from_row(product).dump()}

    data = await cache.get_or_set(f"products:detail:{product_id}", load)
    if data is None:
        raise AppError("This data does not exist.", HTTP_404_NOT_FOUND, ErrorCode.invalid)
    return data
