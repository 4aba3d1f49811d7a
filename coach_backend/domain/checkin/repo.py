"""Repository interface for weekly check-ins, progress photos and analyses."""
from __future__ import annotations
from abc import ABC, abstractmethod
from typing import List, Optional
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from coach_backend.domain.checkin.entities import AnalysisRecord, CheckIn, ProgressPhoto
from coach_backend.domain.checkin.values import (
    AnalysisHistoryItem,
    CheckInHistoryEntry,
    StructuredAnalysis,
)


class CheckInRepository(ABC):
    """Abstract repository for check-in persistence.

    Write methods flush but never commit; the caller owns the transaction.
    """

    # ── writes ──────────────────────────────────────────────────────── #

    @abstractmethod
    async def save_checkin(self, checkin: CheckIn, session: AsyncSession) -> CheckIn:
        """Insert a new check-in row."""
        pass

    @abstractmethod
    async def save_photo(self, photo: ProgressPhoto, session: AsyncSession) -> ProgressPhoto:
        """Insert a progress photo reference."""
        pass

    @abstractmethod
    async def upsert_analysis(
        self,
        user_id: UUID,
        challenge_id: UUID,
        week_number: int,
        analysis: StructuredAnalysis,
        session: AsyncSession
    ) -> AnalysisRecord:
        """Insert or replace the analysis for (user, challenge, week) in one statement."""
        pass

    # ── reads ───────────────────────────────────────────────────────── #

    @abstractmethod
    async def get_checkin(
        self,
        user_id: UUID,
        checkin_id: UUID,
        session: AsyncSession
    ) -> Optional[CheckIn]:
        """Get a check-in owned by *user_id*."""
        pass

    @abstractmethod
    async def get_checkin_by_id(self, checkin_id: UUID, session: AsyncSession) -> Optional[CheckIn]:
        """Get a check-in regardless of owner (coach-side reads)."""
        pass

    @abstractmethod
    async def get_latest_checkin(
        self,
        user_id: UUID,
        challenge_id: UUID,
        week_number: int,
        session: AsyncSession
    ) -> Optional[CheckIn]:
        """Newest check-in for a natural key (check-ins are not de-duplicated)."""
        pass

    @abstractmethod
    async def list_previous_checkins(
        self,
        user_id: UUID,
        challenge_id: UUID,
        before_week: int,
        session: AsyncSession,
        limit: int = 4
    ) -> List[CheckIn]:
        """Check-ins with week_number < before_week, most recent week first."""
        pass

    @abstractmethod
    async def get_history(
        self,
        user_id: UUID,
        challenge_id: UUID,
        session: AsyncSession
    ) -> List[CheckInHistoryEntry]:
        """All check-ins for a challenge with their week's photos and analysis."""
        pass

    @abstractmethod
    async def get_analysis(
        self,
        user_id: UUID,
        challenge_id: UUID,
        week_number: int,
        session: AsyncSession
    ) -> Optional[AnalysisRecord]:
        pass

    @abstractmethod
    async def get_analysis_by_id(self, analysis_id: UUID, session: AsyncSession) -> Optional[AnalysisRecord]:
        pass

    @abstractmethod
    async def list_analyses_for_user(
        self,
        user_id: UUID,
        coach_id: UUID,
        session: AsyncSession
    ) -> List[AnalysisHistoryItem]:
        """Analyses of *user_id* within challenges owned by *coach_id*, newest check-in first."""
        pass
