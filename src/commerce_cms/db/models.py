"""
commerce_cms.db.models

Relational schema for the content/commerce backend.

Responsibilities:
- Define ORM models for accounts (User, Otp), content (Post), catalog
  (Product, Image), commerce (Order, OrderItem), lookups (Category, Type, Tag)
  and key/value settings (Setting).
- Declare uniqueness and cascade-delete constraints at the database level.
"""

from __future__ import annotations

import enum
from datetime import UTC, datetime
from decimal import Decimal

from sqlalchemy import (
    Column,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    SmallInteger,
    String,
    Table,
    Text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from commerce_cms.db.base import Base


def _utcnow() -> datetime:
    # Naive UTC timestamps; SQLite has no tz-aware datetime type.
    return datetime.now(tz=UTC).replace(tzinfo=None)


def _values(enum_cls: type[enum.Enum]) -> list[str]:
    # Persist enum values ("ADMIN"), not member names.
    return [member.value for member in enum_cls]


class Role(enum.StrEnum):
    user = "USER"
    author = "AUTHOR"
    admin = "ADMIN"


class Status(enum.StrEnum):
    active = "ACTIVE"
    inactive = "INACTIVE"
    freeze = "FREEZE"


post_tags = Table(
    "post_tags",
    Base.metadata,
    Column("post_id", ForeignKey("posts.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

product_tags = Table(
    "product_tags",
    Base.metadata,
    Column("product_id", ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
    Column("tag_id", ForeignKey("tags.id", ondelete="CASCADE"), primary_key=True),
)

favourites = Table(
    "favourites",
    Base.metadata,
    Column("user_id", ForeignKey("users.id", ondelete="CASCADE"), primary_key=True),
    Column("product_id", ForeignKey("products.id", ondelete="CASCADE"), primary_key=True),
)


class User(Base):
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    first_name: Mapped[str | None] = mapped_column(String(52), nullable=True)
    last_name: Mapped[str | None] = mapped_column(String(52), nullable=True)
    phone: Mapped[str] = mapped_column(String(15), nullable=False, unique=True)
    password: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str | None] = mapped_column(String(52), nullable=True, unique=True)
    role: Mapped[Role] = mapped_column(
        Enum(Role, values_callable=_values), nullable=False, default=Role.user
    )
    status: Mapped[Status] = mapped_column(
        Enum(Status, values_callable=_values), nullable=False, default=Status.active
    )
    last_login: Mapped[datetime | None] = mapped_column(nullable=True)
    error_login_count: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    rand_token: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    image: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    posts: Mapped[list[Post]] = relationship(back_populates="author", passive_deletes=True)
    orders: Mapped[list[Order]] = relationship(back_populates="user", passive_deletes=True)
    favourite_products: Mapped[list[Product]] = relationship(
        secondary=favourites, back_populates="favourited_by", passive_deletes=True
    )

    @property
    def full_name(self) -> str:
        return " ".join(p for p in (self.first_name, self.last_name) if p)


class Otp(Base):
    __tablename__ = "otps"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    phone: Mapped[str] = mapped_column(String(15), nullable=False, unique=True)
    otp: Mapped[str] = mapped_column(String(255), nullable=False)
    remember_token: Mapped[str] = mapped_column(String(255), nullable=False)
    verify_token: Mapped[str | None] = mapped_column(String(255), nullable=True)
    count: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    error: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)


class Category(Base):
    __tablename__ = "categories"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(52), nullable=False, unique=True)


class Type(Base):
    __tablename__ = "types"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(52), nullable=False, unique=True)


class Tag(Base):
    __tablename__ = "tags"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(52), nullable=False, unique=True)


class Post(Base):
    __tablename__ = "posts"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    body: Mapped[str] = mapped_column(Text, nullable=False)
    image: Mapped[str] = mapped_column(String(255), nullable=False)

    author_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), nullable=False)
    type_id: Mapped[int] = mapped_column(ForeignKey("types.id"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    author: Mapped[User] = relationship(back_populates="posts")
    category: Mapped[Category] = relationship()
    type: Mapped[Type] = relationship()
    tags: Mapped[list[Tag]] = relationship(secondary=post_tags)

    __table_args__ = (Index("ix_posts_created", "created_at"),)


class Product(Base):
    __tablename__ = "products"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    discount: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False, default=Decimal("0"))
    rating: Mapped[int] = mapped_column(SmallInteger, nullable=False, default=0)
    inventory: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    status: Mapped[Status] = mapped_column(
        Enum(Status, values_callable=_values), nullable=False, default=Status.active
    )

    category_id: Mapped[int] = mapped_column(ForeignKey("categories.id"), nullable=False)
    type_id: Mapped[int] = mapped_column(ForeignKey("types.id"), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    category: Mapped[Category] = relationship()
    type: Mapped[Type] = relationship()
    tags: Mapped[list[Tag]] = relationship(secondary=product_tags)
    images: Mapped[list[Image]] = relationship(
        back_populates="product", cascade="all, delete-orphan", passive_deletes=True
    )
    favourited_by: Mapped[list[User]] = relationship(
        secondary=favourites, back_populates="favourite_products", passive_deletes=True
    )


class Image(Base):
    __tablename__ = "images"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    path: Mapped[str] = mapped_column(String(255), nullable=False)
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), nullable=False, index=True
    )

    product: Mapped[Product] = relationship(back_populates="images")


class Order(Base):
    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True
    )
    code: Mapped[str] = mapped_column(String(15), nullable=False, unique=True)
    total_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)

    created_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow)
    updated_at: Mapped[datetime] = mapped_column(nullable=False, default=_utcnow, onupdate=_utcnow)

    user: Mapped[User] = relationship(back_populates="orders")
    items: Mapped[list[OrderItem]] = relationship(
        back_populates="order", cascade="all, delete-orphan", passive_deletes=True
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    order_id: Mapped[int] = mapped_column(
        ForeignKey("orders.id", ondelete="CASCADE"), primary_key=True
    )
    product_id: Mapped[int] = mapped_column(
        ForeignKey("products.id", ondelete="CASCADE"), primary_key=True
    )
    quantity: Mapped[int] = mapped_column(SmallInteger, nullable=False)
    price: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)

    order: Mapped[Order] = relationship(back_populates="items")
    product: Mapped[Product] = relationship()


class Setting(Base):
    __tablename__ = "settings"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    key: Mapped[str] = mapped_column(String(52), nullable=False, unique=True)
    value: Mapped[str] = mapped_column(String(255), nullable=False)


# --- Module Notes -----------------------------------------------------------
# Cascades are declared with `ondelete="CASCADE"` so the database enforces them;
# SQLite needs `PRAGMA foreign_keys=ON` (see `db.session.create_engine`).
