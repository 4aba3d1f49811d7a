"""SQLAlchemy implementation of ChallengeRepository."""
from __future__ import annotations

from typing import Optional
from uuid import UUID

from sqlalchemy import and_, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from coach_backend.domain.challenge.entities import Challenge, ChallengeParticipant
from coach_backend.domain.challenge.repo import ChallengeRepository


class RDSChallengeRepository(ChallengeRepository):

    async def get_challenge(self, challenge_id: UUID, session: AsyncSession) -> Optional[Challenge]:
        result = await session.execute(select(Challenge).where(Challenge.id == challenge_id))
        return result.scalars().first()

    async def is_participant(self, challenge_id: UUID, user_id: UUID, session: AsyncSession) -> bool:
        stmt = select(
            exists().where(
                and_(
                    ChallengeParticipant.challenge_id == challenge_id,
                    ChallengeParticipant.user_id == user_id
                )
            )
        )
        return bool((await session.execute(stmt)).scalar())

    async def coach_has_client(self, coach_id: UUID, client_id: UUID, session: AsyncSession) -> bool:
        stmt = select(
            exists()
            .where(ChallengeParticipant.challenge_id == Challenge.id)
            .where(
                and_(
                    ChallengeParticipant.user_id == client_id,
                    Challenge.coach_id == coach_id
                )
            )
        )
        return bool((await session.execute(stmt)).scalar())
