"""Plain value objects passed between the check-in service and its callers."""
from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

from .entities import AnalysisRecord, CheckIn, ProgressPhoto


def is_finite_number(value) -> bool:
    """True for real ints/floats that fit a double and are not NaN or infinite."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    try:
        return math.isfinite(value)
    except OverflowError:
        return False


@dataclass(frozen=True)
class StructuredAnalysis:
    """The four text fields produced for a check-in. Any of them may be empty."""

    summary: str = ""
    recommendations: str = ""
    flagged_issues: str = ""
    encouragement: str = ""


@dataclass
class CheckInMetrics:
    """Optional self-reported metrics of a submission (already validated upstream)."""

    weight: Optional[float] = None
    measurements: Optional[Dict[str, float]] = None
    mood: Optional[str] = None
    sleep_hours: Optional[float] = None
    energy_level: Optional[int] = None
    notes: Optional[str] = None


@dataclass
class PhotoUpload:
    """Raw photo payload received with a submission."""

    filename: str
    content_type: str
    content: bytes

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass
class CheckInSubmission:
    """Result of a committed submission."""

    checkin: CheckIn
    photos: List[ProgressPhoto]
    analysis: StructuredAnalysis


@dataclass
class CheckInHistoryEntry:
    """One check-in with the photos and analysis recorded for its week."""

    checkin: CheckIn
    photos: List[ProgressPhoto] = field(default_factory=list)
    analysis: Optional[AnalysisRecord] = None


@dataclass
class AnalysisHistoryItem:
    """An analysis joined with its challenge name and check-in date."""

    analysis: AnalysisRecord
    challenge_name: str
    week_number: int
    checkin_date: Optional[datetime]
