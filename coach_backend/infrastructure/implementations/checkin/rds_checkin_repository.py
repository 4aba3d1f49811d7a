"""PostgreSQL implementation of CheckInRepository."""
from __future__ import annotations
from collections import defaultdict
from typing import Dict, List, Optional, Tuple
from uuid import UUID, uuid4

from sqlalchemy import and_, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from coach_backend.domain.challenge.entities import Challenge
from coach_backend.domain.checkin.entities import AnalysisRecord, CheckIn, ProgressPhoto
from coach_backend.domain.checkin.repo import CheckInRepository
from coach_backend.domain.checkin.values import (
    AnalysisHistoryItem,
    CheckInHistoryEntry,
    StructuredAnalysis,
)

_ANALYSIS_KEY = ["user_id", "challenge_id", "week_number"]


def build_analysis_upsert(
    user_id: UUID,
    challenge_id: UUID,
    week_number: int,
    analysis: StructuredAnalysis
):
    """INSERT ... ON CONFLICT (user_id, challenge_id, week_number) DO UPDATE ... RETURNING."""
    stmt = pg_insert(AnalysisRecord).values(
        id=uuid4(),
        user_id=user_id,
        challenge_id=challenge_id,
        week_number=week_number,
        summary=analysis.summary,
        recommendations=analysis.recommendations,
        flagged_issues=analysis.flagged_issues,
        encouragement=analysis.encouragement,
        updated_at=func.now(),
    )
    stmt = stmt.on_conflict_do_update(
        index_elements=_ANALYSIS_KEY,
        set_={
            "summary": stmt.excluded.summary,
            "recommendations": stmt.excluded.recommendations,
            "flagged_issues": stmt.excluded.flagged_issues,
            "encouragement": stmt.excluded.encouragement,
            "updated_at": func.now(),
        },
    )
    return (
        stmt.returning(AnalysisRecord)
        # refresh an instance already loaded in this session (regeneration)
        .execution_options(populate_existing=True)
    )


def _same_challenge(model, user_id: UUID, challenge_id: UUID):
    return and_(model.user_id == user_id, model.challenge_id == challenge_id)


class RDSCheckInRepository(CheckInRepository):
    """PostgreSQL implementation of the check-in repository."""

    async def save_checkin(self, checkin: CheckIn, session: AsyncSession) -> CheckIn:
        session.add(checkin)
        await session.flush()
        return checkin

    async def save_photo(self, photo: ProgressPhoto, session: AsyncSession) -> ProgressPhoto:
        session.add(photo)
        await session.flush()
        return photo

    async def upsert_analysis(
        self,
        user_id: UUID,
        challenge_id: UUID,
        week_number: int,
        analysis: StructuredAnalysis,
        session: AsyncSession
    ) -> AnalysisRecord:
        stmt = build_analysis_upsert(user_id, challenge_id, week_number, analysis)
        result = await session.execute(stmt)
        return result.scalar_one()

    async def get_checkin(
        self,
        user_id: UUID,
        checkin_id: UUID,
        session: AsyncSession
    ) -> Optional[CheckIn]:
        stmt = select(CheckIn).where(
            and_(
                CheckIn.id == checkin_id,
                CheckIn.user_id == user_id
            )
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_checkin_by_id(self, checkin_id: UUID, session: AsyncSession) -> Optional[CheckIn]:
        result = await session.execute(select(CheckIn).where(CheckIn.id == checkin_id))
        return result.scalar_one_or_none()

    async def get_latest_checkin(
        self,
        user_id: UUID,
        challenge_id: UUID,
        week_number: int,
        session: AsyncSession
    ) -> Optional[CheckIn]:
        stmt = (
            select(CheckIn)
            .where(
                and_(
                    CheckIn.user_id == user_id,
                    CheckIn.challenge_id == challenge_id,
                    CheckIn.week_number == week_number
                )
            )
            .order_by(CheckIn.created_at.desc())
            .limit(1)
        )
        result = await session.execute(stmt)
        return result.scalars().first()

    async def list_previous_checkins(
        self,
        user_id: UUID,
        challenge_id: UUID,
        before_week: int,
        session: AsyncSession,
        limit: int = 4
    ) -> List[CheckIn]:
        stmt = (
            select(CheckIn)
            .where(
                and_(
                    CheckIn.user_id == user_id,
                    CheckIn.challenge_id == challenge_id,
                    CheckIn.week_number < before_week
                )
            )
            .order_by(CheckIn.week_number.desc(), CheckIn.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def get_history(
        self,
        user_id: UUID,
        challenge_id: UUID,
        session: AsyncSession
    ) -> List[CheckInHistoryEntry]:
        checkins = (await session.execute(
            select(CheckIn)
            .where(_same_challenge(CheckIn, user_id, challenge_id))
            .order_by(CheckIn.week_number.desc(), CheckIn.created_at.desc())
        )).scalars().all()

        photos = (await session.execute(
            select(ProgressPhoto)
            .where(_same_challenge(ProgressPhoto, user_id, challenge_id))
            .order_by(ProgressPhoto.week_number.desc(), ProgressPhoto.created_at.desc())
        )).scalars().all()

        analyses = (await session.execute(
            select(AnalysisRecord).where(_same_challenge(AnalysisRecord, user_id, challenge_id))
        )).scalars().all()

        photos_by_week: Dict[int, List[ProgressPhoto]] = defaultdict(list)
        for photo in photos:
            photos_by_week[photo.week_number].append(photo)
        analysis_by_week = {a.week_number: a for a in analyses}

        return [
            CheckInHistoryEntry(
                checkin=checkin,
                photos=list(photos_by_week.get(checkin.week_number, [])),
                analysis=analysis_by_week.get(checkin.week_number),
            )
            for checkin in checkins
        ]

    async def get_analysis(
        self,
        user_id: UUID,
        challenge_id: UUID,
        week_number: int,
        session: AsyncSession
    ) -> Optional[AnalysisRecord]:
        stmt = select(AnalysisRecord).where(
            and_(
                AnalysisRecord.user_id == user_id,
                AnalysisRecord.challenge_id == challenge_id,
                AnalysisRecord.week_number == week_number
            )
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    async def get_analysis_by_id(self, analysis_id: UUID, session: AsyncSession) -> Optional[AnalysisRecord]:
        result = await session.execute(select(AnalysisRecord).where(AnalysisRecord.id == analysis_id))
        return result.scalar_one_or_none()

    async def list_analyses_for_user(
        self,
        user_id: UUID,
        coach_id: UUID,
        session: AsyncSession
    ) -> List[AnalysisHistoryItem]:
        # newest check-in per week; duplicates would otherwise repeat the analysis
        latest = (
            select(
                CheckIn.challenge_id,
                CheckIn.week_number,
                func.max(CheckIn.created_at).label("checkin_date")
            )
            .where(CheckIn.user_id == user_id)
            .group_by(CheckIn.challenge_id, CheckIn.week_number)
            .subquery()
        )
        stmt = (
            select(AnalysisRecord, Challenge.name, latest.c.checkin_date)
            .join(Challenge, Challenge.id == AnalysisRecord.challenge_id)
            .outerjoin(
                latest,
                and_(
                    latest.c.challenge_id == AnalysisRecord.challenge_id,
                    latest.c.week_number == AnalysisRecord.week_number
                )
            )
            .where(
                and_(
                    AnalysisRecord.user_id == user_id,
                    Challenge.coach_id == coach_id
                )
            )
            .order_by(latest.c.checkin_date.desc().nulls_last())
        )
        rows: List[Tuple[AnalysisRecord, str, object]] = (await session.execute(stmt)).all()
        return [
            AnalysisHistoryItem(
                analysis=analysis,
                challenge_name=challenge_name,
                week_number=analysis.week_number,
                checkin_date=checkin_date,
            )
            for analysis, challenge_name, checkin_date in rows
        ]
