# coach_backend/api/analysis/routes.py

"""Coach-only endpoints for on-demand analysis, history and regeneration.

Ownership is checked here, against the challenge's coach, before the service
is called; the service itself never re-derives it.
"""

from __future__ import annotations

import logging
from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from coach_backend.api.checkin.schemas import AnalysisRead
from coach_backend.api.common import SuccessResponse
from coach_backend.dependencies import (
    AuthenticatedUser,
    get_challenge_repository,
    get_checkin_service,
    get_session,
    require_role,
)
from coach_backend.domain.challenge.repo import ChallengeRepository
from coach_backend.domain.errors import CheckInError
from coach_backend.domain.user.entities import UserRole
from coach_backend.services.checkin.service import CheckInService
from .schemas import AnalysisHistoryRead

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/ai",
    tags=["ai"]
)

_coach_only = require_role(UserRole.COACH)


async def _owns_challenge(
    challenge_repo: ChallengeRepository,
    challenge_id: UUID,
    coach_id: UUID,
    session: AsyncSession
) -> bool:
    challenge = await challenge_repo.get_challenge(challenge_id, session)
    return challenge is not None and challenge.coach_id == coach_id


@router.post("/analyze/{checkin_id}", response_model=SuccessResponse[AnalysisRead])
async def analyze_checkin(
    checkin_id: UUID,
    session: AsyncSession = Depends(get_session),
    checkin_service: CheckInService = Depends(get_checkin_service),
    challenge_repo: ChallengeRepository = Depends(get_challenge_repository),
    coach: AuthenticatedUser = Depends(_coach_only),
):
    """Run (or re-run) the analysis of a client's check-in."""
    logger.info(f"[ai] analyze: coach={coach.id} checkin={checkin_id}")
    checkin = await checkin_service.get_checkin_by_id(checkin_id, session)
    if not await _owns_challenge(challenge_repo, checkin.challenge_id, coach.id, session):
        raise CheckInError.not_found("Check-in not found")

    record = await checkin_service.analyze_checkin(checkin_id, session)
    return SuccessResponse(data=AnalysisRead.model_validate(record))


@router.get("/history/{client_id}", response_model=SuccessResponse[List[AnalysisHistoryRead]])
async def get_analysis_history(
    client_id: UUID,
    session: AsyncSession = Depends(get_session),
    checkin_service: CheckInService = Depends(get_checkin_service),
    challenge_repo: ChallengeRepository = Depends(get_challenge_repository),
    coach: AuthenticatedUser = Depends(_coach_only),
):
    """Every analysis of a client across the coach's challenges."""
    try:
        if not await challenge_repo.coach_has_client(coach.id, client_id, session):
            raise CheckInError.not_found("Client not found or not associated with you")
        items = await checkin_service.get_analysis_history(client_id, coach.id, session)
    except CheckInError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving analysis history for client {client_id}: {str(e)}")
        raise CheckInError.internal("Error retrieving analysis history")
    return SuccessResponse(data=[AnalysisHistoryRead.from_item(item) for item in items])


@router.post("/regenerate/{analysis_id}", response_model=SuccessResponse[AnalysisRead])
async def regenerate_analysis(
    analysis_id: UUID,
    session: AsyncSession = Depends(get_session),
    checkin_service: CheckInService = Depends(get_checkin_service),
    challenge_repo: ChallengeRepository = Depends(get_challenge_repository),
    coach: AuthenticatedUser = Depends(_coach_only),
):
    """Discard an analysis' text and generate it again from the stored check-in."""
    logger.info(f"[ai] regenerate: coach={coach.id} analysis={analysis_id}")
    analysis = await checkin_service.get_analysis_by_id(analysis_id, session)
    if not await _owns_challenge(challenge_repo, analysis.challenge_id, coach.id, session):
        raise CheckInError.forbidden()

    record = await checkin_service.regenerate_analysis(analysis_id, session)
    return SuccessResponse(data=AnalysisRead.model_validate(record))
