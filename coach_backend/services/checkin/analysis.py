"""Analysis generation for weekly check-ins.

Turns a CheckInContextWindow into a StructuredAnalysis with one LLM call.
Nothing here touches the database.
"""
from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from coach_backend.context.checkin import CheckInContextBuilder, CheckInContextWindow
from coach_backend.domain.checkin.values import StructuredAnalysis
from coach_backend.domain.errors import CheckInError
from coach_backend.domain.ports.llm import LLMService

logger = logging.getLogger(__name__)

_BLANK_LINE = re.compile(r"\n\s*\n")


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, list):
        return "\n".join(_as_text(item) for item in value)
    return str(value)


def parse_analysis_response(response: str) -> StructuredAnalysis:
    """Parse the model output into the four analysis fields.

    JSON objects are read by key. Anything else is split on blank lines and the
    first four sections are assigned in order; this can misplace content when
    the model ignores the requested format.
    """
    try:
        data = json.loads(response)
    except (TypeError, ValueError):
        data = None

    if isinstance(data, dict):
        return StructuredAnalysis(
            summary=_as_text(data.get("summary")),
            recommendations=_as_text(data.get("recommendations")),
            flagged_issues=_as_text(data.get("flaggedIssues", data.get("flagged_issues"))),
            encouragement=_as_text(data.get("encouragement")),
        )

    logger.warning("Analysis response was not a JSON object, falling back to section split")
    sections = [s.strip() for s in _BLANK_LINE.split(response.strip())] if response else []
    sections += [""] * (4 - len(sections))
    return StructuredAnalysis(
        summary=sections[0],
        recommendations=sections[1],
        flagged_issues=sections[2],
        encouragement=sections[3],
    )


class CheckInAnalysisGenerator:
    """Calls the LLM with the rendered check-in prompt and parses the result."""

    def __init__(
        self,
        llm: LLMService,
        context_builder: CheckInContextBuilder,
        temperature: float = 0.7,
        max_tokens: int = 1000
    ) -> None:
        self._llm = llm
        self._context_builder = context_builder
        self._temperature = temperature
        self._max_tokens = max_tokens

    async def analyze(self, context: CheckInContextWindow) -> StructuredAnalysis:
        """Generate the analysis for *context*.

        Raises CheckInError(ANALYSIS_UNAVAILABLE) if the call fails or returns no text.
        """
        messages = self._context_builder.prepare_llm_messages(context)
        logger.info(
            f"Generating analysis for user {context.user_id}, week {context.week_number} "
            f"(~{context.estimate_tokens()} context tokens, {len(context.previous_checkins)} prior weeks)"
        )

        try:
            text: Optional[str] = await self._llm.generate_response(
                messages,
                temperature=self._temperature,
                max_tokens=self._max_tokens,
                response_format={"type": "json_object"},
            )
        except Exception as e:
            logger.error(f"Analysis generation failed for user {context.user_id}: {e}")
            raise CheckInError.analysis_unavailable() from e

        if not text or not text.strip():
            logger.error(f"Analysis generation returned no content for user {context.user_id}")
            raise CheckInError.analysis_unavailable()

        return parse_analysis_response(text)
