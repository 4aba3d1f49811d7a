"""Check-in analysis context builders."""

from .builder import CheckInContextBuilder
from .context_window import CheckInContextWindow
from .providers import (
    CheckInHistoryProvider,
    SubjectProvider,
    ChallengeProvider
)
from .prompts import CheckInAnalysisPrompts

__all__ = [
    "CheckInContextBuilder",
    "CheckInContextWindow",
    "CheckInHistoryProvider",
    "SubjectProvider",
    "ChallengeProvider",
    "CheckInAnalysisPrompts"
]
