"""Pydantic schemas for the coach-facing analysis API."""

from datetime import datetime
from typing import Optional

from coach_backend.api.checkin.schemas import AnalysisRead
from coach_backend.domain.checkin.values import AnalysisHistoryItem


class AnalysisHistoryRead(AnalysisRead):
    challenge_name: str
    check_in_date: Optional[datetime] = None

    @classmethod
    def from_item(cls, item: AnalysisHistoryItem) -> "AnalysisHistoryRead":
        base = AnalysisRead.model_validate(item.analysis).model_dump()
        return cls(**base, challenge_name=item.challenge_name, check_in_date=item.checkin_date)
