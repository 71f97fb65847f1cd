"""
commerce_cms.jobs.celery_app

Celery application for the background workers.

Responsibilities:
- Create the Celery app from `Settings` (Redis broker/backend, JSON only).
- Route tasks to the `image-optimize` and `cache-invalidate` queues.
- Hook Celery's logging and task lifecycle signals into structlog.

Usage:
    celery -A commerce_cms.jobs.celery_app worker -Q image-optimize,cache-invalidate
"""

from __future__ import annotations

from typing import Any

import structlog
from celery import Celery
from celery.signals import setup_logging, task_failure, task_postrun, task_prerun

from commerce_cms.jobs.queues import (
    CACHE_QUEUE,
    IMAGE_QUEUE,
    INVALIDATE_POST_CACHE,
    INVALIDATE_PRODUCT_CACHE,
    OPTIMIZE_IMAGE,
    TASKS,
)
from commerce_cms.observability.logging import configure_logging, get_logger
from commerce_cms.settings import Settings, get_settings

log = get_logger(__name__)


def create_celery_app(settings: Settings) -> Celery:
    app = Celery(
        "commerce_cms",
        broker=settings.celery_broker_url,
        backend=settings.celery_result_backend,
        include=["commerce_cms.jobs.tasks"],
    )
    app.conf.update(
        task_serializer="json",
        result_serializer="json",
        accept_content=["json"],
        task_acks_late=True,
        worker_prefetch_multiplier=1,
        result_expires=3600,
        task_default_queue=IMAGE_QUEUE,
        task_routes={
            TASKS[OPTIMIZE_IMAGE]: {"queue": IMAGE_QUEUE},
            TASKS[INVALIDATE_POST_CACHE]: {"queue": CACHE_QUEUE},
            TASKS[INVALIDATE_PRODUCT_CACHE]: {"queue": CACHE_QUEUE},
        },
        # Lower number runs first on the Redis transport.
        broker_transport_options={
            "priority_steps": list(range(10)),
            "queue_order_strategy": "priority",
        },
        timezone="UTC",
        enable_utc=True,
    )
    return app


celery_app = create_celery_app(get_settings())


@setup_logging.connect
def _setup_logging(**_: Any) -> None:
    settings = get_settings()
    configure_logging(service_name=f"{settings.service_name}-worker", level=settings.log_level)


@task_prerun.connect
def _bind_task_context(task_id: str | None = None, task: Any = None, **_: Any) -> None:
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(task_id=task_id, task_name=getattr(task, "name", None))
    log.info("task_started")


@task_postrun.connect
def _clear_task_context(state: str | None = None, **_: Any) -> None:
    log.info("task_finished", state=state)
    structlog.contextvars.clear_contextvars()


@task_failure.connect
def _log_task_failure(exception: BaseException | None = None, **_: Any) -> None:
    log.error("task_failed", error=str(exception))


# --- Module Notes -----------------------------------------------------------
# The API imports `celery_app` only to publish (`send_task`); task bodies live in
# `jobs.tasks` and are loaded by the worker through `include`.
