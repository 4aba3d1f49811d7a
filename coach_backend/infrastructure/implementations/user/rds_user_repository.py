"""SQLAlchemy implementation of UserRepository using the primary DB (RDS)."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from coach_backend.domain.user.entities import User
from coach_backend.domain.user.repo import UserRepository

class RDSUserRepository(UserRepository):

    async def get_by_id(self, uid: UUID, session: AsyncSession) -> Optional[User]:
        result = await session.execute(select(User).where(User.id == uid))
        return result.scalars().first()
