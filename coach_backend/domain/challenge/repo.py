"""Port interface for challenge lookups."""
from abc import ABC, abstractmethod
from typing import Optional
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from .entities import Challenge


class ChallengeRepository(ABC):
    """Read access to challenges and their enrollments."""

    @abstractmethod
    async def get_challenge(self, challenge_id: UUID, session: AsyncSession) -> Optional[Challenge]: ...

    @abstractmethod
    async def is_participant(self, challenge_id: UUID, user_id: UUID, session: AsyncSession) -> bool: ...

    @abstractmethod
    async def coach_has_client(self, coach_id: UUID, client_id: UUID, session: AsyncSession) -> bool:
        """True if *client_id* participates in any challenge owned by *coach_id*."""
        ...
