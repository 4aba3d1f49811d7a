"""Check-in service: submission pipeline, history reads and analysis regeneration.

Every write path runs as a single unit of work on the caller's session: the
check-in row, its photo rows and the analysis upsert are committed together or
not at all. Authorization (challenge participation, coach ownership) is the
caller's job.
"""
from __future__ import annotations

import logging
import time
from contextlib import asynccontextmanager
from pathlib import PurePosixPath
from typing import AsyncIterator, List, Optional, Sequence, Tuple
from uuid import UUID, uuid4

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from coach_backend.context.checkin import CheckInContextBuilder
from coach_backend.domain.checkin.entities import AnalysisRecord, CheckIn, ProgressPhoto
from coach_backend.domain.checkin.repo import CheckInRepository
from coach_backend.domain.checkin.values import (
    AnalysisHistoryItem,
    CheckInHistoryEntry,
    CheckInMetrics,
    CheckInSubmission,
    PhotoUpload,
    StructuredAnalysis,
    is_finite_number,
)
from coach_backend.domain.errors import CheckInError
from coach_backend.domain.object_storage.repo import ObjectStorageRepository
from coach_backend.services.checkin.analysis import CheckInAnalysisGenerator

logger = logging.getLogger(__name__)

MAX_PHOTOS = 3
MAX_PHOTO_BYTES = 5 * 1024 * 1024


def build_photo_key(user_id: UUID, challenge_id: UUID, week_number: int, filename: str,
                    timestamp_ms: Optional[int] = None) -> str:
    """progress-photos/{user}/{challenge}/week-{n}/{epoch_ms}-{filename}"""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    name = PurePosixPath(filename.replace("\\", "/")).name or "photo"
    return f"progress-photos/{user_id}/{challenge_id}/week-{week_number}/{timestamp_ms}-{name}"


class CheckInService:
    """Coordinates persistence, photo storage and analysis generation for check-ins."""

    def __init__(
        self,
        checkin_repo: CheckInRepository,
        storage_repo: ObjectStorageRepository,
        context_builder: CheckInContextBuilder,
        analysis_generator: CheckInAnalysisGenerator,
        max_photos: int = MAX_PHOTOS,
        max_photo_bytes: int = MAX_PHOTO_BYTES
    ) -> None:
        self._repo = checkin_repo
        self._storage = storage_repo
        self._context_builder = context_builder
        self._generator = analysis_generator
        self._max_photos = max_photos
        self._max_photo_bytes = max_photo_bytes

    # ───────────────────────────── unit of work ──────────────────────────── #

    @asynccontextmanager
    async def _unit_of_work(self, session: AsyncSession, action: str) -> AsyncIterator[None]:
        """Commit when the block completes; roll back and re-tag on any failure."""
        try:
            yield
            await session.commit()
        except CheckInError as e:
            await session.rollback()
            logger.error(f"Rolled back {action}: {e.kind.value}: {e.message}")
            raise
        except SQLAlchemyError as e:
            await session.rollback()
            logger.error(f"Rolled back {action} after database error: {e}")
            raise CheckInError.storage(f"Error {action}") from e
        except Exception as e:
            await session.rollback()
            logger.exception(f"Rolled back {action} after unexpected error")
            raise CheckInError.internal(f"Error {action}") from e

    # ───────────────────────────── validation ───────────────────────────── #

    def _validate_submission(
        self,
        week_number: int,
        metrics: CheckInMetrics,
        photos: Sequence[PhotoUpload]
    ) -> None:
        if week_number < 1:
            raise CheckInError.validation("Invalid week number")
        if metrics.weight is not None and not (is_finite_number(metrics.weight) and metrics.weight >= 0):
            raise CheckInError.validation("Invalid weight")
        sleep = metrics.sleep_hours
        if sleep is not None and not (is_finite_number(sleep) and 0 <= sleep <= 24):
            raise CheckInError.validation("Invalid sleep hours")
        if metrics.energy_level is not None and not 1 <= metrics.energy_level <= 10:
            raise CheckInError.validation("Invalid energy level")
        if metrics.measurements is not None:
            for name, value in metrics.measurements.items():
                if value is None:
                    continue
                if not is_finite_number(value):
                    raise CheckInError.validation(f"Invalid measurement: {name}")

        if len(photos) > self._max_photos:
            raise CheckInError.validation(f"At most {self._max_photos} photos per check-in")
        for photo in photos:
            if not (photo.content_type or "").startswith("image/"):
                raise CheckInError.validation("Only image files are allowed")
            if photo.size > self._max_photo_bytes:
                raise CheckInError.validation(f"Photo {photo.filename} exceeds the size limit")

    # ───────────────────────────── submission ───────────────────────────── #

    async def submit_checkin(
        self,
        user_id: UUID,
        challenge_id: UUID,
        week_number: int,
        metrics: CheckInMetrics,
        photos: Sequence[PhotoUpload],
        session: AsyncSession
    ) -> CheckInSubmission:
        """Persist a check-in with its photos and analysis, all or nothing."""
        self._validate_submission(week_number, metrics, photos)
        logger.info(
            f"Submitting check-in: user={user_id} challenge={challenge_id} "
            f"week={week_number} photos={len(photos)}"
        )

        async with self._unit_of_work(session, "submitting check-in"):
            checkin = await self._repo.save_checkin(
                CheckIn(
                    id=uuid4(),
                    user_id=user_id,
                    challenge_id=challenge_id,
                    week_number=week_number,
                    weight=metrics.weight,
                    measurements=metrics.measurements,
                    mood=metrics.mood,
                    sleep_hours=metrics.sleep_hours,
                    energy_level=metrics.energy_level,
                    notes=metrics.notes,
                ),
                session
            )

            saved_photos: List[ProgressPhoto] = []
            for photo in photos:
                key = build_photo_key(user_id, challenge_id, week_number, photo.filename)
                photo_url = await self._storage.upload(photo.content, photo.content_type, key)
                saved_photos.append(await self._repo.save_photo(
                    ProgressPhoto(
                        id=uuid4(),
                        user_id=user_id,
                        challenge_id=challenge_id,
                        week_number=week_number,
                        photo_url=photo_url,
                    ),
                    session
                ))

            analysis, _ = await self._analyze_and_store(checkin, session)

        logger.info(f"Check-in {checkin.id} committed with {len(saved_photos)} photo(s)")
        return CheckInSubmission(checkin=checkin, photos=saved_photos, analysis=analysis)

    async def _analyze_and_store(
        self,
        checkin: CheckIn,
        session: AsyncSession
    ) -> Tuple[StructuredAnalysis, AnalysisRecord]:
        context = await self._context_builder.build_for_checkin(checkin, session)
        analysis = await self._generator.analyze(context)
        record = await self._repo.upsert_analysis(
            checkin.user_id, checkin.challenge_id, checkin.week_number, analysis, session
        )
        return analysis, record

    # ───────────────────────────── re-analysis ──────────────────────────── #

    async def regenerate_analysis(self, analysis_id: UUID, session: AsyncSession) -> AnalysisRecord:
        """Re-run generation for an existing analysis and overwrite it in place."""
        async with self._unit_of_work(session, "regenerating analysis"):
            existing = await self._repo.get_analysis_by_id(analysis_id, session)
            if existing is None:
                raise CheckInError.not_found("Analysis not found")

            checkin = await self._repo.get_latest_checkin(
                existing.user_id, existing.challenge_id, existing.week_number, session
            )
            if checkin is None:
                raise CheckInError.not_found("Check-in data not found")

            _, record = await self._analyze_and_store(checkin, session)

        logger.info(f"Regenerated analysis {analysis_id}")
        return record

    async def analyze_checkin(self, checkin_id: UUID, session: AsyncSession) -> AnalysisRecord:
        """Generate (or replace) the analysis of an existing check-in."""
        async with self._unit_of_work(session, "analyzing check-in"):
            checkin = await self._repo.get_checkin_by_id(checkin_id, session)
            if checkin is None:
                raise CheckInError.not_found("Check-in not found")
            _, record = await self._analyze_and_store(checkin, session)

        logger.info(f"Analyzed check-in {checkin_id}")
        return record

    # ───────────────────────────── reads ────────────────────────────────── #

    async def get_checkin_by_id(self, checkin_id: UUID, session: AsyncSession) -> CheckIn:
        checkin = await self._repo.get_checkin_by_id(checkin_id, session)
        if checkin is None:
            raise CheckInError.not_found("Check-in not found")
        return checkin

    async def get_analysis_by_id(self, analysis_id: UUID, session: AsyncSession) -> AnalysisRecord:
        analysis = await self._repo.get_analysis_by_id(analysis_id, session)
        if analysis is None:
            raise CheckInError.not_found("Analysis not found")
        return analysis

    async def get_history(
        self,
        user_id: UUID,
        challenge_id: UUID,
        session: AsyncSession
    ) -> List[CheckInHistoryEntry]:
        return await self._repo.get_history(user_id, challenge_id, session)

    async def get_checkin_analysis(
        self,
        user_id: UUID,
        checkin_id: UUID,
        session: AsyncSession
    ) -> AnalysisRecord:
        checkin = await self._repo.get_checkin(user_id, checkin_id, session)
        if checkin is None:
            raise CheckInError.not_found("Check-in not found")

        analysis = await self._repo.get_analysis(
            user_id, checkin.challenge_id, checkin.week_number, session
        )
        if analysis is None:
            raise CheckInError.not_found("Analysis not found")
        return analysis

    async def get_analysis_history(
        self,
        client_id: UUID,
        coach_id: UUID,
        session: AsyncSession
    ) -> List[AnalysisHistoryItem]:
        return await self._repo.list_analyses_for_user(client_id, coach_id, session)
