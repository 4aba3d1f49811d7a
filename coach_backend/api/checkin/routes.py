# coach_backend/api/checkin/routes.py

from __future__ import annotations

import logging
from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, UploadFile, status
from sqlalchemy.ext.asyncio import AsyncSession

from coach_backend.api.common import SuccessResponse
from coach_backend.dependencies import (
    AuthenticatedUser,
    get_challenge_repository,
    get_checkin_service,
    get_current_user,
    get_session,
)
from coach_backend.domain.challenge.repo import ChallengeRepository
from coach_backend.domain.checkin.values import CheckInMetrics, PhotoUpload
from coach_backend.domain.errors import CheckInError
from coach_backend.services.checkin.service import CheckInService
from .schemas import (
    AnalysisRead,
    HistoryEntryRead,
    SubmissionRead,
    parse_measurements,
)

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/check-ins",
    tags=["check-ins"]
)


@router.post("", response_model=SuccessResponse[SubmissionRead], status_code=status.HTTP_201_CREATED)
async def submit_checkin(
    challenge_id: UUID = Form(...),
    week_number: int = Form(..., ge=1),
    weight: Optional[float] = Form(None, ge=0),
    measurements: Optional[str] = Form(None, description="JSON object, e.g. {\"waist\": 81.5}"),
    mood: Optional[str] = Form(None),
    sleep_hours: Optional[float] = Form(None, ge=0, le=24),
    energy_level: Optional[int] = Form(None, ge=1, le=10),
    notes: Optional[str] = Form(None),
    photos: Optional[List[UploadFile]] = File(None),
    session: AsyncSession = Depends(get_session),
    checkin_service: CheckInService = Depends(get_checkin_service),
    challenge_repo: ChallengeRepository = Depends(get_challenge_repository),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """Submit a weekly check-in with up to three progress photos."""
    logger.info(f"[check-ins] submit: user={user.id} challenge={challenge_id} week={week_number}")

    metrics = CheckInMetrics(
        weight=weight,
        measurements=parse_measurements(measurements),
        mood=mood,
        sleep_hours=sleep_hours,
        energy_level=energy_level,
        notes=notes,
    )

    if not await challenge_repo.is_participant(challenge_id, user.id, session):
        raise CheckInError.forbidden("You are not enrolled in this challenge")

    uploads = []
    for upload in photos or []:
        uploads.append(PhotoUpload(
            filename=upload.filename or "photo",
            content_type=upload.content_type or "",
            content=await upload.read(),
        ))

    submission = await checkin_service.submit_checkin(
        user_id=user.id,
        challenge_id=challenge_id,
        week_number=week_number,
        metrics=metrics,
        photos=uploads,
        session=session
    )
    return SuccessResponse(data=SubmissionRead.from_submission(submission))


@router.get("/history/{challenge_id}", response_model=SuccessResponse[List[HistoryEntryRead]])
async def get_checkin_history(
    challenge_id: UUID,
    session: AsyncSession = Depends(get_session),
    checkin_service: CheckInService = Depends(get_checkin_service),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """All of the caller's check-ins for a challenge, newest week first."""
    try:
        history = await checkin_service.get_history(user.id, challenge_id, session)
    except CheckInError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving check-in history for user {user.id}: {str(e)}")
        raise CheckInError.internal("Error retrieving check-in history")
    return SuccessResponse(data=[HistoryEntryRead.from_entry(entry) for entry in history])


@router.get("/analysis/{checkin_id}", response_model=SuccessResponse[AnalysisRead])
async def get_checkin_analysis(
    checkin_id: UUID,
    session: AsyncSession = Depends(get_session),
    checkin_service: CheckInService = Depends(get_checkin_service),
    user: AuthenticatedUser = Depends(get_current_user),
):
    """The analysis attached to one of the caller's check-ins."""
    try:
        analysis = await checkin_service.get_checkin_analysis(user.id, checkin_id, session)
    except CheckInError:
        raise
    except Exception as e:
        logger.error(f"Error retrieving analysis for check-in {checkin_id}: {str(e)}")
        raise CheckInError.internal("Error retrieving analysis")
    return SuccessResponse(data=AnalysisRead.model_validate(analysis))
