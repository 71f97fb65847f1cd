"""
tests.conftest

Shared fixtures: an app bound to a temporary SQLite database and upload directory,
with the job queues and Redis cache replaced by in-memory fakes.
"""

from __future__ import annotations

import io
import json
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import pytest
import pytest_asyncio
from fastapi import FastAPI
from PIL import Image

from commerce_cms.api.app import create_app
from commerce_cms.api.deps import cache_dep, cache_queue_dep, image_queue_dep
from commerce_cms.auth.jwt import JwtConfig, issue_token
from commerce_cms.db.models import Role, Status, User
from commerce_cms.db.repositories.users import UserRepo
from commerce_cms.jobs.queues import CACHE_QUEUE, IMAGE_QUEUE, Job, JobOptions
from commerce_cms.settings import Settings


class FakeQueue:
    def __init__(self, name: str) -> None:
        self.name = name
        self.jobs: list[Job] = []

    async def add(
        self, name: str, payload: dict[str, Any], options: JobOptions | None = None
    ) -> Job:
        options = options or JobOptions()
        job_id = options.job_id or f"{name}-{len(self.jobs) + 1}"
        job = Job(id=job_id, name=name, payload=payload, options=options)
        self.jobs.append(job)
        return job


class FakeCache:
    def __init__(self) -> None:
        self.store: dict[str, str] = {}

    async def get_or_set(self, key: str, loader: Callable[[], Awaitable[Any]]) -> Any:
        if key in self.store:
            return json.loads(self.store[key])
        value = await loader()
        self.store[key] = json.dumps(value)
        return value

    async def close(self) -> None:
        return None


@dataclass
class Users:
    admin: User
    other_admin: User
    member: User
    frozen: User
    headers: dict[int, dict[str, str]] = field(default_factory=dict)

    def auth(self, user: User) -> dict[str, str]:
        return self.headers[user.id]


def png_bytes(size: tuple[int, int] = (64, 48), color: str = "red") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, "PNG")
    return buf.getvalue()


def stored_images(settings: Settings) -> list[str]:
    if not settings.images_dir.exists():
        return []
    return sorted(p.name for p in settings.images_dir.iterdir())


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        env="test",
        database_url=f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        upload_dir=tmp_path / "uploads",
        jwt_secret="test-secret",
        # httpx.ASGITransport reports 127.0.0.1 as the client address.
        maintenance_whitelist=[],
    )


@pytest.fixture
def image_queue() -> FakeQueue:
    return FakeQueue(IMAGE_QUEUE)


@pytest.fixture
def cache_queue() -> FakeQueue:
    return FakeQueue(CACHE_QUEUE)


@pytest.fixture
def cache() -> FakeCache:
    return FakeCache()


@pytest_asyncio.fixture
async def app(
    settings: Settings, image_queue: FakeQueue, cache_queue: FakeQueue, cache: FakeCache
) -> AsyncIterator[FastAPI]:
    app = create_app(settings=settings)
    app.dependency_overrides[image_queue_dep] = lambda: image_queue
    app.dependency_overrides[cache_queue_dep] = lambda: cache_queue
    app.dependency_overrides[cache_dep] = lambda: cache

    # httpx.ASGITransport does not run lifespan events; enter it explicitly.
    async with app.router.lifespan_context(app):
        yield app


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncIterator[httpx.AsyncClient]:
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def users(app: FastAPI, settings: Settings) -> Users:
    async with app.state.sessionmaker() as session:
        repo = UserRepo(session)
        admin = await repo.create(
            phone="0911111111", password="x", first_name="Ada", last_name="Admin", role=Role.admin
        )
        other_admin = await repo.create(
            phone="0922222222", password="x", first_name="Bo", last_name="Boss", role=Role.admin
        )
        member = await repo.create(phone="0933333333", password="x", first_name="Cy", role=Role.user)
        frozen = await repo.create(
            phone="0944444444", password="x", role=Role.admin, status=Status.freeze
        )
        await session.commit()

    cfg = JwtConfig.from_settings(settings)
    seeded = Users(admin=admin, other_admin=other_admin, member=member, frozen=frozen)
    for user in (admin, other_admin, member, frozen):
        token = issue_token(cfg=cfg, user_id=user.id, role=user.role.value)
        seeded.headers[user.id] = {"Authorization": f"Bearer {token}"}
    return seeded


POST_FIELDS = {
    "title": "Launch day",
    "content": "Short summary",
    "body": "<p>Long body</p>",
    "category": "news",
    "type": "blog",
    "tags": "launch, product",
}

PRODUCT_FIELDS = {
    "name": "Desk lamp",
    "description": "<p>Warm light</p>",
    "price": "12.5",
    "discount": "0",
    "inventory": "7",
    "category": "home",
    "type": "lighting",
    "tags": "lamp",
}


async def create_post(
    client: httpx.AsyncClient, headers: dict[str, str], **overrides: str
) -> httpx.Response:
    data = {**POST_FIELDS, **overrides}
    files = {"image": ("photo.png", png_bytes(), "image/png")}
    return await client.post("/v1/admin/posts", data=data, files=files, headers=headers)


async def create_product(
    client: httpx.AsyncClient, headers: dict[str, str], *, images: int = 1, **overrides: str
) -> httpx.Response:
    data = {**PRODUCT_FIELDS, **overrides}
    files = [("images", (f"p{i}.png", png_bytes(), "image/png")) for i in range(images)]
    return await client.post("/v1/admin/products", data=data, files=files or None, headers=headers)
