"""
commerce_cms.api.routers.public.posts

Public, cached post reads.

Responsibilities:
- Offset-paginated listing (newest first) and single-post detail.
- Serve both through the Redis read-through cache under `posts:*` keys.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Path, Query
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from commerce_cms.api.deps import cache_dep, db_session, maintenance_guard
from commerce_cms.api.routers.public.schemas import PostDetail, PostSummary
from commerce_cms.cache.redis_cache import RedisCache
from commerce_cms.db.repositories.posts import PostRepo
from commerce_cms.errors import AppError, ErrorCode
from commerce_cms.validation import MAX_ID

_MAX_LIMIT = 50

router = APIRouter(prefix="/v1/posts", tags=["posts"], dependencies=[Depends(maintenance_guard)])


@router.get("")
async def list_posts(
    page: int = Query(default=1, ge=1, le=MAX_ID // _MAX_LIMIT),
    limit: int = Query(default=5, ge=1, le=_MAX_LIMIT),
    session: AsyncSession = Depends(db_session),
    cache: RedisCache = Depends(cache_dep),
) -> dict[str, Any]:
    async def load() -> dict[str, Any]:
        # One extra row tells us whether another page exists.
        rows = await PostRepo(session).page(offset=(page - 1) * limit, limit=limit + 1)
        return {
            "posts": [PostSummary.from_row(p).dump() for p in rows[:limit]],
            "currentPage": page,
            "hasNextPage": len(rows) > limit,
            "previousPage": page - 1 if page > 1 else None,
        }

    return await cache.get_or_set(f"posts:list:page={page}:limit={limit}", load)


@router.get("/{post_id}")
async def get_post(
    post_id: int = Path(ge=1, le=MAX_ID),
    session: AsyncSession = Depends(db_session),
    cache: RedisCache = Depends(cache_dep),
) -> dict[str, Any]:
    async def load() -> dict[str, Any] | None:
        post = await PostRepo(session).get(post_id)
        return {"post": PostDetail.from_row(post).dump()} if post is not None else None

    data = await cache.get_or_set(f"posts:detail:{post_id}", load)
    if data is None:
        raise AppError("This data does not exist.", HTTP_404_NOT_FOUND, ErrorCode.invalid)
    return data
