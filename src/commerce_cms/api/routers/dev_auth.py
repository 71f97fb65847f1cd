from __future__ import annotations

from datetime import timedelta

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_404_NOT_FOUND

from commerce_cms.api.deps import db_session, settings_dep
from commerce_cms.auth.jwt import JwtConfig, issue_token
from commerce_cms.db.repositories.users import UserRepo
from commerce_cms.errors import AppError, ErrorCode
from commerce_cms.settings import Settings
from commerce_cms.validation import MAX_ID

router = APIRouter(prefix="/v1/dev", tags=["dev"])


class DevTokenRequest(BaseModel):
    user_id: int = Field(ge=1, le=MAX_ID, alias="userId")
    ttl_minutes: int = Field(default=60, ge=1, le=24 * 60, alias="ttlMinutes")


class DevTokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"


@router.post("/token", response_model=DevTokenResponse)
async def mint_dev_token(
    body: DevTokenRequest,
    settings: Settings = Depends(settings_dep),
    session: AsyncSession = Depends(db_session),
) -> DevTokenResponse:
    if settings.env == "prod":
        raise AppError("Not found", HTTP_404_NOT_FOUND, ErrorCode.invalid)

    user = await UserRepo(session).get(body.user_id)
    if user is None:
        raise AppError("This data does not exist.", HTTP_404_NOT_FOUND, ErrorCode.invalid)

    token = issue_token(
        cfg=JwtConfig.from_settings(settings),
        user_id=user.id,
        role=user.role.value,
        ttl=timedelta(minutes=body.ttl_minutes),
    )
    return DevTokenResponse(access_token=token)
