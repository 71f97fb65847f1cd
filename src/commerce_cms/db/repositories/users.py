from __future__ import annotations

from sqlalchemy.ext.asyncio import AsyncSession

from commerce_cms.db.models import Role, Status, User


class UserRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create(
        self,
        *,
        phone: str,
        password: str,
        first_name: str | None = None,
        last_name: str | None = None,
        role: Role = Role.user,
        status: Status = Status.active,
    ) -> User:
        user = User(
            phone=phone,
            password=password,
            first_name=first_name,
            last_name=last_name,
            role=role,
            status=status,
            error_login_count=0,
            rand_token="",
        )
        self._session.add(user)
        await self._session.flush()
        return user

    async def get(self, user_id: int) -> User | None:
        return await self._session.get(User, user_id)
