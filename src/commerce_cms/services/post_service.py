"""
commerce_cms.services.post_service

Post write lifecycle (transaction + side-effect owner).

Responsibilities:
- Validate and sanitize submitted post fields.
- Enforce existence and authorship before writes.
- Persist the post with its category/type/tags connected-or-created by name.
- Enqueue image optimization and `posts:*` cache invalidation.
- Remove uploaded and replaced image files on error paths and deletes.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_400_BAD_REQUEST, HTTP_403_FORBIDDEN, HTTP_404_NOT_FOUND

from commerce_cms.db.models import Post, User
from commerce_cms.db.repositories.posts import PostRepo
from commerce_cms.db.repositories.taxonomy import TaxonomyRepo
from commerce_cms.errors import AppError, ErrorCode
from commerce_cms.jobs.queues import (
    INVALIDATE_POST_CACHE,
    POST_CACHE_PATTERN,
    JobQueue,
    enqueue_cache_invalidation,
    enqueue_image_optimization,
)
from commerce_cms.observability.logging import get_logger
from commerce_cms.settings import Settings
from commerce_cms.storage.uploads import StoredUpload, UploadStorage, optimized_name
from commerce_cms.validation import PostForm, PostUpdateForm, parse_form

log = get_logger(__name__)


class PostService:
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

        self._posts = PostRepo(session)
        self._taxonomy = TaxonomyRepo(session)

    async def create(
        self,
        *,
        author: User,
        fields: Mapping[str, Any],
        upload: StoredUpload | None,
    ) -> Post:
        try:
            form = parse_form(PostForm, fields)
        except AppError:
            await self._discard(upload)
            raise
        if upload is None:
            raise AppError("Invalid image.", HTTP_400_BAD_REQUEST, ErrorCode.invalid)

        await self._optimize(upload)
        post = await self._posts.create(
            title=form.title,
            content=form.content,
            body=form.body,
            image=upload.filename,
            author_id=author.id,
            category=await self._taxonomy.category(form.category),
            type=await self._taxonomy.type(form.type),
            tags=await self._taxonomy.tags(form.tags or []),
        )
        await self._session.commit()
        log.info("post_created", post_id=post.id, author_id=author.id)

        await self._invalidate_cache()
        return post

    async def update(
        self,
        *,
        user: User,
        fields: Mapping[str, Any],
        upload: StoredUpload | None,
    ) -> Post:
        try:
            form = parse_form(PostUpdateForm, fields)
            post = await self._load_owned(form.post_id, user, action="update")
        except AppError:
            await self._discard(upload)
            raise

        replaced_image: str | None = None
        if upload is not None:
            await self._optimize(upload)
            replaced_image = post.image

        post = await self._posts.update(
            post,
            title=form.title,
            content=form.content,
            body=form.body,
            category=await self._taxonomy.category(form.category),
            type=await self._taxonomy.type(form.type),
            image=upload.filename if upload is not None else None,
            tags=await self._taxonomy.tags(form.tags) if form.tags is not None else None,
        )
        await self._session.commit()
        log.info("post_updated", post_id=post.id, image_replaced=replaced_image is not None)

        if replaced_image is not None:
            await self._storage.remove_files(replaced_image, optimized_name(replaced_image))
        await self._invalidate_cache()
        return post

    async def delete(self, *, user: User, post_id: int) -> int:
        post = await self._load_owned(post_id, user, action="delete")
        image = post.image

        await self._posts.delete(post)
        await self._session.commit()
        log.info("post_deleted", post_id=post_id)

        await self._storage.remove_files(image, optimized_name(image))
        await self._invalidate_cache()
        return post_id

    async def _load_owned(self, post_id: int, user: User, *, action: str) -> Post:
        post = await self._posts.get(post_id)
        if post is None:
            raise AppError("This data does not exist.", HTTP_404_NOT_FOUND, ErrorCode.invalid)
        if post.author_id != user.id:
            raise AppError(
                f"You are not allowed to {action} this post.",
                HTTP_403_FORBIDDEN,
                ErrorCode.unauthorized,
            )
        return post

    async def _optimize(self, upload: StoredUpload) -> None:
        await enqueue_image_optimization(
            self._image_queue,
            upload,
            width=self._settings.post_image_width,
            height=self._settings.post_image_height,
            quality=self._settings.image_quality,
        )

    async def _invalidate_cache(self) -> None:
        await enqueue_cache_invalidation(self._cache_queue, INVALIDATE_POST_CACHE, POST_CACHE_PATTERN)

    async def _discard(self, upload: StoredUpload | None) -> None:
        if upload is not None:
            await self._storage.discard([upload])


# --- Module Notes -----------------------------------------------------------
# Replaced image files are removed only after the commit that stops referencing them.
