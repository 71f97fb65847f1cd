"""
commerce_cms.db.repositories.posts

Repository for `Post` entities.

Responsibilities:
- Create, fetch, update and delete posts with their lookups eagerly loaded.
- Page through posts newest-first for the public listing.
"""

from __future__ import annotations

from sqlalchemy import desc, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from commerce_cms.db.models import Category, Post, Tag, Type

# Async sessions cannot lazy-load; every read brings its relationships along.
_POST_LOADS = (
    selectinload(Post.author),
    selectinload(Post.category),
    selectinload(Post.type),
    selectinload(Post.tags),
)


class PostRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        title: str,
        content: str,
        body: str,
        image: str,
        author_id: int,
        category: Category,
        type: Type,
        tags: list[Tag],
    ) -> Post:
        post = Post(
            title=title,
            content=content,
            body=body,
            image=image,
            author_id=author_id,
            category=category,
            type=type,
            tags=tags,
        )
        self._session.add(post)
        await self._session.flush()
        return post

    async def get(self, post_id: int) -> Post | None:
        return await self._session.get(Post, post_id, options=list(_POST_LOADS))

    async def update(
        self,
        post: Post,
        *,
        title: str,
        content: str,
        body: str,
        category: Category,
        type: Type,
        image: str | None = None,
        tags: list[Tag] | None = None,
    ) -> Post:
        post.title = title
        post.content = content
        post.body = body
        post.category = category
        post.type = type
        if image is not None:
            post.image = image
        if tags is not None:
            post.tags = tags
        await self._session.flush()
        return post

    async def delete(self, post: Post) -> None:
        await self._session.delete(post)
        await self._session.flush()

    async def page(self, *, offset: int, limit: int) -> list[Post]:
        stmt = (
            select(Post)
            .options(*_POST_LOADS)
            .order_by(desc(Post.created_at), desc(Post.id))
            .offset(offset)
            .limit(limit)
        )
        return list((await self._session.execute(stmt)).scalars().all())


# --- Module Notes -----------------------------------------------------------
# Deleting a post removes its `post_tags` rows; the tags themselves are shared and stay.
