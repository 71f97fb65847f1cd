"""
commerce_cms.db.repositories.taxonomy

Repository for name-keyed lookup rows (`Category`, `Type`, `Tag`).

Responsibilities:
- Connect-or-create lookups by name so handlers can accept plain strings.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from commerce_cms.db.models import Category, Tag, Type

_Named = TypeVar("_Named", Category, Type, Tag)


class TaxonomyRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def category(self, name: str) -> Category:
        return await self._get_or_create(Category, name)

    async def type(self, name: str) -> Type:
        return await self._get_or_create(Type, name)

    async def tags(self, names: Sequence[str]) -> list[Tag]:
        # Keep request order and drop duplicates; the association table has a composite PK.
        wanted = list(dict.fromkeys(names))
        if not wanted:
            return []
        stmt = select(Tag).where(Tag.name.in_(wanted))
        existing = {t.name: t for t in (await self._session.execute(stmt)).scalars().all()}
        for name in wanted:
            if name not in existing:
                tag = Tag(name=name)
                self._session.add(tag)
                existing[name] = tag
        await self._session.flush()
        return [existing[name] for name in wanted]

    async def _get_or_create(self, model: type[_Named], name: str) -> _Named:
        stmt = select(model).where(model.name == name)
        found = (await self._session.execute(stmt)).scalar_one_or_none()
        if found is not None:
            return found
        row = model(name=name)
        self._session.add(row)
        await self._session.flush()
        return row
