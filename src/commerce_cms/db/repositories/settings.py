"""
commerce_cms.db.repositories.settings

Repository for `Setting` rows (runtime key/value switches such as maintenance mode).
"""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from commerce_cms.db.models import Setting

MAINTENANCE_KEY = "maintenance"


class SettingRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_value(self, key: str) -> str | None:
        stmt = select(Setting.value).where(Setting.key == key)
        return (await self._session.execute(stmt)).scalar_one_or_none()

    async def upsert(self, key: str, value: str) -> Setting:
        stmt = select(Setting).where(Setting.key == key)
        existing = (await self._session.execute(stmt)).scalar_one_or_none()
        if existing is not None:
            existing.value = value
            await self._session.flush()
            return existing

        setting = Setting(key=key, value=value)
        self._session.add(setting)
        await self._session.flush()
        return setting
