"""
commerce_cms.auth.deps

FastAPI dependency functions for authentication and authorization.

Responsibilities:
- Convert a bearer token into a typed `Principal`.
- Load the caller's `User` row and reject frozen accounts.
- Enforce role checks via reusable dependency factories.
"""

from __future__ import annotations

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.status import HTTP_401_UNAUTHORIZED, HTTP_403_FORBIDDEN

from commerce_cms.api.deps import db_session, settings_dep
from commerce_cms.auth.jwt import JwtConfig, JwtValidationError, decode_and_validate
from commerce_cms.auth.models import Principal
from commerce_cms.db.models import Role, Status, User
from commerce_cms.db.repositories.users import UserRepo
from commerce_cms.errors import AppError, ErrorCode
from commerce_cms.settings import Settings

_bearer = HTTPBearer(auto_error=False)


def _unauthenticated(message: str) -> AppError:
    return AppError(message, HTTP_401_UNAUTHORIZED, ErrorCode.unauthenticated)


def get_principal(
    creds: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: Settings = Depends(settings_dep),
) -> Principal:
    if creds is None or not creds.credentials:
        raise _unauthenticated("You are not an authenticated user.")

    try:
        payload = decode_and_validate(cfg=JwtConfig.from_settings(settings), token=creds.credentials)
    except JwtValidationError as e:
        raise _unauthenticated("Access token is invalid.") from e

    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise _unauthenticated("Access token is invalid.") from e
    return Principal(user_id=user_id, role=str(payload.get("role", "")))


async def get_current_user(
    principal: Principal = Depends(get_principal),
    session: AsyncSession = Depends(db_session),
) -> User:
    user = await UserRepo(session).get(principal.user_id)
    if user is None:
        raise _unauthenticated("You are not an authenticated user.")
    if user.status == Status.freeze:
        raise AppError(
            "Your account is temporarily locked. Please contact us.",
            HTTP_403_FORBIDDEN,
            ErrorCode.account_freeze,
        )
    return user


def require_roles(*allowed: Role):
    allowed_set = frozenset(allowed)

    def _dep(user: User = Depends(get_current_user)) -> User:
        if user.role not in allowed_set:
            raise AppError(
                "This action is not allowed.", HTTP_403_FORBIDDEN, ErrorCode.unauthorized
            )
        return user

    return _dep


require_admin = require_roles(Role.admin)


# --- Module Notes -----------------------------------------------------------
# FastAPI caches dependencies per request, so routers can list `require_admin`
# at router level and still receive the same `User` in handler parameters.
