"""
commerce_cms.api.routers.admin.posts

Admin endpoints for writing posts.

Responsibilities:
- Accept multipart post forms (fields + optional `image`) and JSON deletes.
- Delegate validation, ownership checks, persistence and jobs to `PostService`.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Form
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_201_CREATED

from commerce_cms.api.deps import (
    cache_queue_dep,
    db_session,
    image_queue_dep,
    image_upload,
    settings_dep,
    storage_dep,
)
from commerce_cms.auth.deps import require_admin
from commerce_cms.db.models import User
from commerce_cms.jobs.queues import JobQueue
from commerce_cms.services.post_service import PostService
from commerce_cms.settings import Settings
from commerce_cms.storage.uploads import StoredUpload, UploadStorage
from commerce_cms.validation import PostDeleteRequest

router = APIRouter(
    prefix="/v1/admin/posts",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


def post_service(
    session: AsyncSession = Depends(db_session),
    settings: Settings = Depends(settings_dep),
    storage: UploadStorage = Depends(storage_dep),
    image_queue: JobQueue = Depends(image_queue_dep),
    cache_queue: JobQueue = Depends(cache_queue_dep),
) -> PostService:
    return PostService(
        session=session,
        settings=settings,
        storage=storage,
        image_queue=image_queue,
        cache_queue=cache_queue,
    )


def post_fields(
    title: str | None = Form(default=None),
    content: str | None = Form(default=None),
    body: str | None = Form(default=None),
    category: str | None = Form(default=None),
    type_: str | None = Form(default=None, alias="type"),
    tags: str | None = Form(default=None),
) -> dict[str, Any]:
    # Raw strings; `validation.PostForm` does the trimming, escaping and messages.
    return {
        "title": title,
        "content": content,
        "body": body,
        "category": category,
        "type": type_,
        "tags": tags,
    }


@router.post("", status_code=HTTP_201_CREATED)
async def create_post(
    user: User = Depends(require_admin),
    upload: StoredUpload | None = Depends(image_upload),
    fields: dict[str, Any] = Depends(post_fields),
    svc: PostService = Depends(post_service),
) -> dict[str, Any]:
    post = await svc.create(author=user, fields=fields, upload=upload)
    return {"message": "Successfully created new post.", "postId": post.id}


@router.patch("")
async def update_post(
    user: User = Depends(require_admin),
    upload: StoredUpload | None = Depends(image_upload),
    fields: dict[str, Any] = Depends(post_fields),
    post_id: str | None = Form(default=None, alias="postId"),
    svc: PostService = Depends(post_service),
) -> dict[str, Any]:
    post = await svc.update(user=user, fields={"postId": post_id, **fields}, upload=upload)
    return {"message": "Successfully updated post.", "postId": post.id}


@router.delete("")
async def delete_post(
    body: PostDeleteRequest,
    user: User = Depends(require_admin),
    svc: PostService = Depends(post_service),
) -> dict[str, Any]:
    post_id = await svc.delete(user=user, post_id=body.post_id)
    return {"message": "Post deleted successfully.", "postId": post_id}


# --- Module Notes -----------------------------------------------------------
# `require_admin` is declared before `image_upload` in each handler so an
# unauthenticated request is rejected before its file is written to disk.
