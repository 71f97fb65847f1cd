"""
commerce_cms.jobs.queues

Producer side of the background job queues.

Responsibilities:
- Name the queues and jobs the API publishes to.
- Carry per-job options (attempts, backoff, job id, priority).
- Publish jobs to Celery without blocking the event loop.
"""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Literal

from celery import Celery
from starlette.concurrency import run_in_threadpool

from commerce_cms.observability.logging import get_logger
from commerce_cms.storage.uploads import StoredUpload

log = get_logger(__name__)

IMAGE_QUEUE = "image-optimize"
CACHE_QUEUE = "cache-invalidate"

OPTIMIZE_IMAGE = "optimize-image"
INVALIDATE_POST_CACHE = "invalidate-post-cache"
INVALIDATE_PRODUCT_CACHE = "invalidate-product-cache"

POST_CACHE_PATTERN = "posts:*"
PRODUCT_CACHE_PATTERN = "products:*"

# Job name -> registered Celery task name.
TASKS: dict[str, str] = {
    OPTIMIZE_IMAGE: "commerce_cms.jobs.tasks.optimize_image",
    INVALIDATE_POST_CACHE: "commerce_cms.jobs.tasks.invalidate_cache",
    INVALIDATE_PRODUCT_CACHE: "commerce_cms.jobs.tasks.invalidate_cache",
}


@dataclass(frozen=True, slots=True)
class Backoff:
    type: Literal["fixed", "exponential"]
    delay_ms: int


@dataclass(frozen=True, slots=True)
class JobOptions:
    attempts: int = 1
    backoff: Backoff | None = None
    job_id: str | None = None
    priority: int | None = None


IMAGE_JOB_BACKOFF = Backoff(type="exponential", delay_ms=1000)
IMAGE_JOB_OPTIONS = JobOptions(attempts=3, backoff=IMAGE_JOB_BACKOFF)


@dataclass(frozen=True, slots=True)
class Job:
    id: str | None
    name: str
    payload: dict[str, Any]
    options: JobOptions


class JobQueue:
    """
    A named queue backed by Celery. Retry policy is declared on the consuming
    task (see `jobs.tasks`), built from the same `JobOptions` constants.
    """

    def __init__(self, name: str, *, celery: Celery) -> None:
        self.name = name
        self._celery = celery

    async def add(
        self,
        name: str,
        payload: dict[str, Any],
        options: JobOptions | None = None,
    ) -> Job:
        options = options or JobOptions()
        task_name = TASKS[name]
        # send_task talks to the broker synchronously.
        result = await run_in_threadpool(
            self._celery.send_task,
            task_name,
            kwargs=payload,
            queue=self.name,
            task_id=options.job_id,
            priority=options.priority,
        )
        log.info("job_enqueued", queue=self.name, job=name, job_id=result.id)
        return Job(id=result.id, name=name, payload=payload, options=options)


async def enqueue_image_optimization(
    queue: JobQueue,
    upload: StoredUpload,
    *,
    width: int,
    height: int,
    quality: int,
) -> Job:
    return await queue.add(
        OPTIMIZE_IMAGE,
        {
            "file_path": str(upload.path),
            "file_name": upload.optimized_name,
            "width": width,
            "height": height,
            "quality": quality,
        },
        IMAGE_JOB_OPTIONS,
    )


async def enqueue_cache_invalidation(queue: JobQueue, job: str, pattern: str) -> Job:
    return await queue.add(
        job,
        {"pattern": pattern},
        JobOptions(job_id=f"invalidate-{int(time.time() * 1000)}", priority=1),
    )


# --- Module Notes -----------------------------------------------------------
# Tests replace `JobQueue` instances with an in-memory recorder through FastAPI
# dependency overrides (see `api.deps.image_queue_dep` / `cache_queue_dep`).
