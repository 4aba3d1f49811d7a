"""Context providers for check-in analysis."""

from typing import Any, Dict, List
from uuid import UUID
from sqlalchemy.ext.asyncio import AsyncSession

from coach_backend.domain.challenge.repo import ChallengeRepository
from coach_backend.domain.checkin.repo import CheckInRepository
from coach_backend.domain.errors import CheckInError
from coach_backend.domain.user.repo import UserRepository


class CheckInHistoryProvider:
    """Provides the most recent prior weeks for trend analysis."""

    def __init__(self, checkin_repo: CheckInRepository, window: int = 4):
        self._repo = checkin_repo
        self._window = window

    async def get_previous_checkins(
        self,
        user_id: UUID,
        challenge_id: UUID,
        week_number: int,
        session: AsyncSession
    ) -> List[Dict[str, Any]]:
        checkins = await self._repo.list_previous_checkins(
            user_id, challenge_id, week_number, session, limit=self._window
        )
        return [
            {
                "week_number": checkin.week_number,
                "weight": checkin.weight,
                "measurements": checkin.measurements or {},
            }
            for checkin in checkins
        ]


class SubjectProvider:
    """Provides the client's display name."""

    def __init__(self, user_repo: UserRepository):
        self._repo = user_repo

    async def get_subject_name(self, user_id: UUID, session: AsyncSession) -> str:
        user = await self._repo.get_by_id(user_id, session)
        if user is None:
            raise CheckInError.not_found("User not found")
        return user.name or user.email


class ChallengeProvider:
    """Provides challenge name and length."""

    def __init__(self, challenge_repo: ChallengeRepository):
        self._repo = challenge_repo

    async def get_challenge_info(self, challenge_id: UUID, session: AsyncSession) -> Dict[str, Any]:
        challenge = await self._repo.get_challenge(challenge_id, session)
        if challenge is None:
            raise CheckInError.not_found("Challenge not found")
        return {"name": challenge.name, "duration_weeks": challenge.duration_weeks}
