"""Port interface for user lookups."""
from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from .entities import User

class UserRepository(ABC):
    """Hexagonal port: read access to the User aggregate."""

    @abstractmethod
    async def get_by_id(self, uid: UUID, session: AsyncSession) -> Optional[User]: ...
