"""Tests for the check-in analysis context window, prompts and builder."""

from uuid import uuid4

import pytest

from coach_backend.context.checkin import (
    CheckInAnalysisPrompts,
    CheckInContextWindow,
)
from coach_backend.context.checkin.context_window import format_delta, format_number
from coach_backend.domain.errors import CheckInError, ErrorKind


def _window(**overrides):
    values = dict(
        user_id="user-1",
        challenge_id="challenge-1",
        week_number=3,
        subject_name="Sam Client",
        challenge_name="Spring Shred",
        duration_weeks=12,
    )
    values.update(overrides)
    return CheckInContextWindow(**values)


class TestNumberFormatting:

    def test_whole_numbers_drop_the_decimal(self):
        assert format_number(80.0) == "80"
        assert format_number(80.5) == "80.5"

    def test_values_are_never_rounded(self):
        assert format_number(1234.567) == "1234.567"
        assert format_number(123456.7) == "123456.7"
        assert format_number(1234567.0) == "1234567"

    def test_deltas_are_signed(self):
        assert format_delta(80.5, 82.0) == "-1.5"
        assert format_delta(82.0, 80.0) == "+2"
        assert format_delta(80.1, 80.0) == "+0.1"

    def test_large_deltas_keep_their_precision(self):
        assert format_delta(123456.7, 100000.0) == "+23456.7"


class TestCurrentCheckinRendering:

    def test_weight_only(self):
        """Absent fields are omitted entirely."""
        assert _window(weight=80.5).format_current_checkin() == "Weight: 80.5kg"

    def test_all_fields(self):
        window = _window(
            weight=80.5,
            measurements={"waist": 81.0, "hips": 96.5},
            mood="motivated",
            sleep_hours=7.5,
            energy_level=7,
            notes="Hit every session",
        )

        assert window.format_current_checkin().splitlines() == [
            "Weight: 80.5kg",
            "Measurements:",
            "- waist: 81cm",
            "- hips: 96.5cm",
            "Mood: motivated",
            "Sleep: 7.5 hours",
            "Energy Level: 7/10",
            "Notes: Hit every session",
        ]

    def test_blank_strings_and_empty_measurements_are_omitted(self):
        window = _window(mood="  ", notes="", measurements={})
        assert window.format_current_checkin() == ""

    def test_zero_values_are_rendered(self):
        window = _window(weight=0.0, sleep_hours=0.0)
        assert window.format_current_checkin() == "Weight: 0kg\nSleep: 0 hours"


class TestPreviousCheckinRendering:

    def test_no_history(self):
        assert _window(weight=80.0).format_previous_checkins() == "No previous check-ins available"

    def test_changes_relative_to_current_week(self):
        window = _window(
            weight=80.5,
            measurements={"waist": 81.0},
            previous_checkins=[
                {"week_number": 2, "weight": 82.0, "measurements": {"waist": 83.0, "chest": 100.0}},
                {"week_number": 1, "weight": 84.0, "measurements": {}},
            ],
        )

        assert window.format_previous_checkins() == (
            "Week 2:\n"
            "- Weight: 82kg (change to current: -1.5kg)\n"
            "- waist: 83cm (change to current: -2cm)\n"
            "- chest: 100cm\n"
            "\n"
            "Week 1:\n"
            "- Weight: 84kg (change to current: -3.5kg)"
        )

    def test_no_delta_when_current_weight_missing(self):
        window = _window(previous_checkins=[{"week_number": 1, "weight": 84.0, "measurements": {}}])
        assert window.format_previous_checkins() == "Week 1:\n- Weight: 84kg"


class TestAnalysisPrompt:

    def test_prompt_frames_client_and_week(self):
        prompt = CheckInAnalysisPrompts.build_analysis_prompt(_window(weight=80.5))

        assert "Client: Sam Client" in prompt
        assert "Challenge: Spring Shred" in prompt
        assert "Week: 3 of 12" in prompt
        assert "Current Check-in Data:\nWeight: 80.5kg" in prompt
        assert "Previous Check-ins:\nNo previous check-ins available" in prompt
        assert '"flaggedIssues": "string"' in prompt

    def test_messages_are_system_then_user(self):
        window = _window(weight=80.5)
        messages = window.to_llm_messages(CheckInAnalysisPrompts.SYSTEM, "hello")

        assert messages == [
            {"role": "system", "content": CheckInAnalysisPrompts.SYSTEM},
            {"role": "user", "content": "hello"},
        ]
        assert "expert fitness coach" in CheckInAnalysisPrompts.SYSTEM

    def test_estimate_tokens_grows_with_history(self):
        bare = _window(weight=80.5)
        with_history = _window(
            weight=80.5,
            previous_checkins=[{"week_number": w, "weight": 80.0 + w, "measurements": {}} for w in (2, 1)],
        )
        assert with_history.estimate_tokens() > bare.estimate_tokens() > 0


class TestContextBuilder:

    @pytest.mark.asyncio
    async def test_builds_window_with_limited_history(
        self, context_builder, checkin_repo, session, client_user, challenge
    ):
        for week in range(1, 7):
            checkin_repo.add_checkin(client_user.id, challenge.id, week, weight=90.0 - week)
        current = checkin_repo.checkins[-1]

        window = await context_builder.build_for_checkin(current, session)

        assert window.subject_name == "Sam Client"
        assert window.challenge_name == "Spring Shred"
        assert window.duration_weeks == 12
        assert window.weight == 84.0
        assert [p["week_number"] for p in window.previous_checkins] == [5, 4, 3, 2]
        assert window.metadata["checkin_id"] == str(current.id)

    @pytest.mark.asyncio
    async def test_subject_falls_back_to_email(
        self, context_builder, checkin_repo, user_repo, session, client_user, challenge
    ):
        client_user.name = None
        current = checkin_repo.add_checkin(client_user.id, challenge.id, 1)

        window = await context_builder.build_for_checkin(current, session)

        assert window.subject_name == "sam@example.com"

    @pytest.mark.asyncio
    async def test_unknown_user_is_not_found(self, context_builder, checkin_repo, session, challenge):
        current = checkin_repo.add_checkin(uuid4(), challenge.id, 1)

        with pytest.raises(CheckInError) as exc_info:
            await context_builder.build_for_checkin(current, session)

        assert exc_info.value.kind is ErrorKind.NOT_FOUND
        assert exc_info.value.message == "User not found"
