"""
commerce_cms.jobs.tasks

Celery task bodies (consumer side of the job queues).

Responsibilities:
- `optimize_image`: resize an uploaded original into a WebP copy, retried with
  exponential backoff per `IMAGE_JOB_OPTIONS`.
- `invalidate_cache`: delete every Redis key matching a glob pattern.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import redis
from PIL import Image, ImageOps

from commerce_cms.jobs.celery_app import celery_app
from commerce_cms.jobs.queues import (
    IMAGE_JOB_BACKOFF,
    IMAGE_JOB_OPTIONS,
    INVALIDATE_POST_CACHE,
    OPTIMIZE_IMAGE,
    TASKS,
)
from commerce_cms.observability.logging import get_logger
from commerce_cms.settings import get_settings

log = get_logger(__name__)

_BACKOFF_SECONDS = max(1, IMAGE_JOB_BACKOFF.delay_ms // 1000)


def resize_to_webp(source: Path, target: Path, *, width: int, height: int, quality: int) -> Path:
    """
    Cover-fit `source` into exactly `width` x `height` (center crop) and write WebP.
    """

    target.parent.mkdir(parents=True, exist_ok=True)
    with Image.open(source) as img:
        if img.mode not in ("RGB", "RGBA"):
            img = img.convert("RGBA" if "A" in img.getbands() else "RGB")
        fitted = ImageOps.fit(img, (width, height), method=Image.Resampling.LANCZOS)
        fitted.save(target, "WEBP", quality=quality)
    return target


def delete_matching(client: Any, pattern: str, *, batch_size: int = 500) -> int:
    deleted = 0
    batch: list[Any] = []
    for key in client.scan_iter(match=pattern, count=batch_size):
        batch.append(key)
        if len(batch) >= batch_size:
            deleted += client.delete(*batch)
            batch.clear()
    if batch:
        deleted += client.delete(*batch)
    return deleted


@celery_app.task(
    name=TASKS[OPTIMIZE_IMAGE],
    autoretry_for=(Exception,),
    max_retries=IMAGE_JOB_OPTIONS.attempts - 1,
    retry_backoff=_BACKOFF_SECONDS,
    retry_jitter=False,
)
def optimize_image(file_path: str, file_name: str, width: int, height: int, quality: int) -> str:
    target = get_settings().optimized_dir / file_name
    resize_to_webp(Path(file_path), target, width=width, height=height, quality=quality)
    log.info("image_optimized", source=file_path, target=str(target))
    return str(target)


# Serves both the post and the product invalidation jobs.
@celery_app.task(name=TASKS[INVALIDATE_POST_CACHE])
def invalidate_cache(pattern: str) -> int:
    client = redis.Redis.from_url(get_settings().redis_url)
    try:
        deleted = delete_matching(client, pattern)
    finally:
        client.close()
    log.info("cache_invalidated", pattern=pattern, deleted=deleted)
    return deleted


# --- Module Notes -----------------------------------------------------------
# With retry_backoff=1 and no jitter, failed optimizations retry after 1s then 2s.
