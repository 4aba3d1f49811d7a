"""Check-in context builder orchestrates all providers."""

import logging
from typing import Dict, List

from sqlalchemy.ext.asyncio import AsyncSession

from coach_backend.domain.challenge.repo import ChallengeRepository
from coach_backend.domain.checkin.entities import CheckIn
from coach_backend.domain.checkin.repo import CheckInRepository
from coach_backend.domain.user.repo import UserRepository
from .providers import ChallengeProvider, CheckInHistoryProvider, SubjectProvider
from .context_window import CheckInContextWindow
from .prompts import CheckInAnalysisPrompts

logger = logging.getLogger(__name__)


class CheckInContextBuilder:
    """Builds the analysis context for a check-in from current and historical records."""

    def __init__(
        self,
        checkin_repo: CheckInRepository,
        user_repo: UserRepository,
        challenge_repo: ChallengeRepository,
        history_window: int = 4
    ):
        self._history_provider = CheckInHistoryProvider(checkin_repo, window=history_window)
        self._subject_provider = SubjectProvider(user_repo)
        self._challenge_provider = ChallengeProvider(challenge_repo)

    async def build_for_checkin(self, checkin: CheckIn, session: AsyncSession) -> CheckInContextWindow:
        """Build context for analysing *checkin*.

        Raises CheckInError(NOT_FOUND) when the user or challenge is missing.
        """
        logger.debug(
            f"Building analysis context for user {checkin.user_id}, "
            f"challenge {checkin.challenge_id}, week {checkin.week_number}"
        )

        # sequential: one session must not run concurrent operations
        previous = await self._history_provider.get_previous_checkins(
            checkin.user_id, checkin.challenge_id, checkin.week_number, session
        )
        subject_name = await self._subject_provider.get_subject_name(checkin.user_id, session)
        challenge = await self._challenge_provider.get_challenge_info(checkin.challenge_id, session)

        return CheckInContextWindow(
            user_id=str(checkin.user_id),
            challenge_id=str(checkin.challenge_id),
            week_number=checkin.week_number,
            subject_name=subject_name,
            challenge_name=challenge["name"],
            duration_weeks=challenge["duration_weeks"],
            weight=checkin.weight,
            measurements=checkin.measurements,
            mood=checkin.mood,
            sleep_hours=checkin.sleep_hours,
            energy_level=checkin.energy_level,
            notes=checkin.notes,
            previous_checkins=previous,
            metadata={"checkin_id": str(checkin.id) if checkin.id else None},
        )

    def prepare_llm_messages(self, context_window: CheckInContextWindow) -> List[Dict[str, str]]:
        user_prompt = CheckInAnalysisPrompts.build_analysis_prompt(context_window)
        return context_window.to_llm_messages(CheckInAnalysisPrompts.SYSTEM, user_prompt)
