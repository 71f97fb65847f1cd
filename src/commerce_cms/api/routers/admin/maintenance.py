"""
commerce_cms.api.routers.admin.maintenance

Admin switch for maintenance mode (stored in the `settings` table).
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from commerce_cms.api.deps import db_session
from commerce_cms.auth.deps import require_admin
from commerce_cms.db.models import User
from commerce_cms.db.repositories.settings import MAINTENANCE_KEY, SettingRepo
from commerce_cms.observability.logging import get_logger
from commerce_cms.validation import MaintenanceRequest

log = get_logger(__name__)

router = APIRouter(prefix="/v1/admin", tags=["admin"])


@router.patch("/maintenance")
async def set_maintenance(
    body: MaintenanceRequest,
    user: User = Depends(require_admin),
    session: AsyncSession = Depends(db_session),
) -> dict[str, Any]:
    value = "true" if body.mode else "false"
    await SettingRepo(session).upsert(MAINTENANCE_KEY, value)
    await session.commit()
    log.info("maintenance_set", mode=value, by=user.id)
    return {"message": f"Successfully set maintenance mode to {value}."}
