"""
commerce_cms.api.routers.public.schemas

Response models for the public read API.

Responsibilities:
- Map ORM rows to camelCase JSON payloads that can be stored in the cache as-is.
"""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from commerce_cms.db.models import Post, Product, User


class _Out(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def dump(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class PostSummary(_Out):
    id: int
    title: str
    content: str
    image: str
    author: str
    category: str
    type: str
    tags: list[str]
    updated_at: datetime

    @classmethod
    def from_row(cls, post: Post) -> PostSummary:
        return cls(
            id=post.id,
            title=post.title,
            content=post.content,
            image=post.image,
            author=post.author.full_name,
            category=post.category.name,
            type=post.type.name,
            tags=[t.name for t in post.tags],
            updated_at=post.updated_at,
        )


class PostDetail(PostSummary):
    body: str

    @classmethod
    def from_row(cls, post: Post) -> PostDetail:
        summary = PostSummary.from_row(post)
        return cls(**summary.model_dump(), body=post.body)


class ProductSummary(_Out):
    id: int
    name: str
    description: str
    price: Decimal
    discount: Decimal
    rating: int
    inventory: int
    status: str
    category: str
    type: str
    tags: list[str]
    images: list[str]

    @classmethod
    def from_row(cls, product: Product) -> ProductSummary:
        return cls(
            id=product.id,
            name=product.name,
            description=product.description,
            price=product.price,
            discount=product.discount,
            rating=product.rating,
            inventory=product.inventory,
            status=product.status.value,
            category=product.category.name,
            type=product.type.name,
            tags=[t.name for t in product.tags],
            images=[i.path for i in product.images],
        )


class UserProfile(_Out):
    id: int
    first_name: str | None
    last_name: str | None
    full_name: str
    phone: str
    email: str | None
    role: str
    status: str
    image: str | None

    @classmethod
    def from_row(cls, user: User) -> UserProfile:
        return cls(
            id=user.id,
            first_name=user.first_name,
            last_name=user.last_name,
            full_name=user.full_name,
            phone=user.phone,
            email=user.email,
            role=user.role.value,
            status=user.status.value,
            image=user.image,
        )


# --- Module Notes -----------------------------------------------------------
# Decimals serialize as strings in JSON mode ("12.50"), so cached and fresh
# responses are byte-for-byte the same.
