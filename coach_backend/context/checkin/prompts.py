"""Prompt templates for weekly check-in analysis."""

from dataclasses import dataclass

from .context_window import CheckInContextWindow


@dataclass
class CheckInAnalysisPrompts:
    """Centralized prompt management for check-in analysis."""

    SYSTEM = (
        "You are an expert fitness coach analyzing client progress data. "
        "Provide detailed, professional, and encouraging feedback."
    )

    ANALYSIS_USER = """Analyze the following client check-in data and provide a comprehensive analysis:

Client: {subject_name}
Challenge: {challenge_name}
Week: {week_number} of {duration_weeks}

Current Check-in Data:
{current_checkin}

Previous Check-ins:
{previous_checkins}

Please provide:
1. A summary of progress and changes
2. Specific recommendations for improvement
3. Any potential issues to flag
4. An encouraging message

Format the response in JSON with the following structure:
{{
  "summary": "string",
  "recommendations": "string",
  "flaggedIssues": "string",
  "encouragement": "string"
}}"""

    @staticmethod
    def build_analysis_prompt(window: CheckInContextWindow) -> str:
        return CheckInAnalysisPrompts.ANALYSIS_USER.format(
            subject_name=window.subject_name,
            challenge_name=window.challenge_name,
            week_number=window.week_number,
            duration_weeks=window.duration_weeks,
            current_checkin=window.format_current_checkin(),
            previous_checkins=window.format_previous_checkins(),
        )
