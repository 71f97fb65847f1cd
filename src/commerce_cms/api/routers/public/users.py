from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends

from commerce_cms.api.deps import maintenance_guard
from commerce_cms.api.routers.public.schemas import UserProfile
from commerce_cms.auth.deps import get_current_user
from commerce_cms.db.models import User

router = APIRouter(prefix="/v1/users", tags=["users"], dependencies=[Depends(maintenance_guard)])


@router.get("/me")
async def me(user: User = Depends(get_current_user)) -> dict[str, Any]:
    # Per-user data; never cached.
    return {"user": UserProfile.from_row(user).dump()}
