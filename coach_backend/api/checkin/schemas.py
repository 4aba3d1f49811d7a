"""Pydantic schemas for check-in API."""

import json
from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from coach_backend.api.common import CamelModel
from coach_backend.domain.checkin.values import CheckInHistoryEntry, CheckInSubmission, is_finite_number
from coach_backend.domain.errors import CheckInError


def parse_measurements(raw: Optional[str]) -> Optional[Dict[str, float]]:
    """Decode the multipart ``measurements`` field (a JSON object of numbers)."""
    if raw is None or not raw.strip():
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        raise CheckInError.validation("Invalid measurements")
    if not isinstance(data, dict):
        raise CheckInError.validation("Invalid measurements")

    measurements: Dict[str, float] = {}
    for name, value in data.items():
        if value is None:
            continue
        if not is_finite_number(value):
            raise CheckInError.validation(f"Invalid measurement: {name}")
        measurements[str(name)] = float(value)
    return measurements


class CheckInRead(CamelModel):
    id: UUID
    user_id: UUID
    challenge_id: UUID
    week_number: int
    weight: Optional[float] = None
    measurements: Optional[Dict[str, float]] = None
    mood: Optional[str] = None
    sleep_hours: Optional[float] = None
    energy_level: Optional[int] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


class PhotoRead(CamelModel):
    id: UUID
    week_number: int
    photo_url: str
    created_at: Optional[datetime] = None


class StructuredAnalysisRead(CamelModel):
    summary: str
    recommendations: str
    flagged_issues: str
    encouragement: str


class AnalysisRead(StructuredAnalysisRead):
    """A persisted analysis record."""
    id: UUID
    user_id: UUID
    challenge_id: UUID
    week_number: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SubmissionRead(CamelModel):
    check_in: CheckInRead
    photos: List[PhotoRead]
    analysis: StructuredAnalysisRead

    @classmethod
    def from_submission(cls, submission: CheckInSubmission) -> "SubmissionRead":
        return cls(
            check_in=CheckInRead.model_validate(submission.checkin),
            photos=[PhotoRead.model_validate(p) for p in submission.photos],
            analysis=StructuredAnalysisRead.model_validate(submission.analysis),
        )


class HistoryEntryRead(CheckInRead):
    """A check-in with the photos and analysis recorded for its week."""
    photos: List[PhotoRead] = []
    analysis: Optional[AnalysisRead] = None

    @classmethod
    def from_entry(cls, entry: CheckInHistoryEntry) -> "HistoryEntryRead":
        base = CheckInRead.model_validate(entry.checkin).model_dump()
        return cls(
            **base,
            photos=[PhotoRead.model_validate(p) for p in entry.photos],
            analysis=AnalysisRead.model_validate(entry.analysis) if entry.analysis is not None else None,
        )
