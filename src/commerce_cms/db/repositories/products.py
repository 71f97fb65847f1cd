from __future__ import annotations

from decimal import Decimal

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from commerce_cms.db.models import Category, Image, Product, Tag, Type

_PRODUCT_LOADS = (
    selectinload(Product.category),
    selectinload(Product.type),
    selectinload(Product.tags),
    selectinload(Product.images),
)


class ProductRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        name: str,
        description: str,
        price: Decimal,
        discount: Decimal,
        inventory: int,
        category: Category,
        type: Type,
        tags: list[Tag],
        images: list[str],
    ) -> Product:
        product = Product(
            name=name,
            description=description,
            price=price,
            discount=discount,
            inventory=inventory,
            category=category,
            type=type,
            tags=tags,
            images=[Image(path=p) for p in images],
        )
        self._session.add(product)
        await self._session.flush()
        return product

    async def get(self, product_id: int) -> Product | None:
        return await self._session.get(Product, product_id, options=list(_PRODUCT_LOADS))

    async def update(
        self,
        product: Product,
        *,
        name: str,
        description: str,
        price: Decimal,
        discount: Decimal,
        inventory: int,
        category: Category,
        type: Type,
        tags: list[Tag] | None = None,
        images: list[str] | None = None,
    ) -> Product:
        product.name = name
        product.description = description
        product.price = price
        product.discount = discount
        product.inventory = inventory
        product.category = category
        product.type = type
        if tags is not None:
            product.tags = tags
        if images is not None:
            # delete-orphan removes the replaced Image rows on flush.
            product.images = [Image(path=p) for p in images]
        await self._session.flush()
        return product

    async def delete(self, product: Product) -> None:
        await self._session.delete(product)
        await self._session.flush()

    async def after_cursor(self, *, cursor: int | None, limit: int) -> list[Product]:
        stmt = select(Product).options(*_PRODUCT_LOADS).order_by(Product.id).limit(limit)
        if cursor is not None:
            stmt = stmt.where(Product.id > cursor)
        return list((await self._session.execute(stmt)).scalars().all())
