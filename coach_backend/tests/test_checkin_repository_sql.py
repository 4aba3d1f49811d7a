"""SQL shape of the PostgreSQL check-in repository (no database needed)."""

from datetime import timedelta
from unittest.mock import AsyncMock, MagicMock
from uuid import uuid4

import pytest
from sqlalchemy.dialects import postgresql

from coach_backend.domain.checkin.entities import AnalysisRecord, CheckIn, ProgressPhoto
from coach_backend.domain.checkin.values import StructuredAnalysis
from coach_backend.infrastructure.db.meta import utcnow
from coach_backend.infrastructure.implementations.checkin.rds_checkin_repository import (
    RDSCheckInRepository,
    build_analysis_upsert,
)


def _sql(stmt) -> str:
    return str(stmt.compile(dialect=postgresql.dialect()))


def _session_returning(value):
    result = MagicMock()
    result.scalar_one.return_value = value
    result.scalar_one_or_none.return_value = value
    result.scalars.return_value.first.return_value = value
    result.scalars.return_value.all.return_value = [] if value is None else [value]
    session = MagicMock()
    session.execute = AsyncMock(return_value=result)
    return session


class TestAnalysisUpsert:

    def test_single_statement_on_natural_key(self):
        stmt = build_analysis_upsert(uuid4(), uuid4(), 3, StructuredAnalysis(summary="s"))
        sql = _sql(stmt)

        assert sql.startswith("INSERT INTO ai_analysis")
        assert "ON CONFLICT (user_id, challenge_id, week_number) DO UPDATE SET" in sql
        assert "summary = excluded.summary" in sql
        assert "recommendations = excluded.recommendations" in sql
        assert "flagged_issues = excluded.flagged_issues" in sql
        assert "encouragement = excluded.encouragement" in sql
        assert "updated_at = now()" in sql
        assert "RETURNING" in sql

    def test_conflict_keeps_id_and_created_at(self):
        sql = _sql(build_analysis_upsert(uuid4(), uuid4(), 1, StructuredAnalysis()))
        update_clause = sql.split("DO UPDATE SET", 1)[1].split("RETURNING", 1)[0]
        assigned = sorted(part.split("=")[0].strip() for part in update_clause.split(","))

        assert assigned == ["encouragement", "flagged_issues", "recommendations", "summary", "updated_at"]

    def test_refreshes_loaded_instances(self):
        stmt = build_analysis_upsert(uuid4(), uuid4(), 1, StructuredAnalysis())
        assert stmt.get_execution_options()["populate_existing"] is True

    @pytest.mark.asyncio
    async def test_repository_executes_upsert_once(self):
        sentinel = object()
        session = _session_returning(sentinel)

        record = await RDSCheckInRepository().upsert_analysis(
            uuid4(), uuid4(), 2, StructuredAnalysis(summary="s"), session
        )

        assert record is sentinel
        session.execute.assert_awaited_once()
        session.commit.assert_not_called()


class TestCheckInQueries:

    @pytest.mark.asyncio
    async def test_latest_checkin_orders_newest_first(self):
        session = _session_returning(None)

        await RDSCheckInRepository().get_latest_checkin(uuid4(), uuid4(), 2, session)

        sql = _sql(session.execute.call_args.args[0])
        assert "FROM check_ins" in sql
        assert "ORDER BY check_ins.created_at DESC" in sql
        assert "LIMIT" in sql

    @pytest.mark.asyncio
    async def test_previous_checkins_are_strictly_earlier_weeks(self):
        session = _session_returning(None)

        await RDSCheckInRepository().list_previous_checkins(uuid4(), uuid4(), 5, session, limit=4)

        sql = _sql(session.execute.call_args.args[0])
        assert "check_ins.week_number < " in sql
        assert "ORDER BY check_ins.week_number DESC, check_ins.created_at DESC" in sql

    @pytest.mark.asyncio
    async def test_history_with_no_checkins(self):
        session = _session_returning(None)

        history = await RDSCheckInRepository().get_history(uuid4(), uuid4(), session)

        assert history == []
        assert session.execute.await_count == 3

    @pytest.mark.asyncio
    async def test_analysis_history_joins_challenge_owner(self):
        session = _session_returning(None)
        session.execute.return_value.all.return_value = []

        items = await RDSCheckInRepository().list_analyses_for_user(uuid4(), uuid4(), session)

        assert items == []
        sql = _sql(session.execute.call_args.args[0])
        assert "JOIN challenges ON challenges.id = ai_analysis.challenge_id" in sql
        assert "challenges.coach_id = " in sql
        assert "max(check_ins.created_at)" in sql
        assert "DESC NULLS LAST" in sql


def _result_of(rows):
    result = MagicMock()
    result.scalars.return_value.all.return_value = rows
    return result


class TestHistoryGrouping:

    @pytest.mark.asyncio
    async def test_photos_and_analyses_attach_to_their_week(self):
        user_id, challenge_id = uuid4(), uuid4()
        week3, week2, week1 = (
            CheckIn(id=uuid4(), user_id=user_id, challenge_id=challenge_id, week_number=week)
            for week in (3, 2, 1)
        )
        front, side = (
            ProgressPhoto(id=uuid4(), user_id=user_id, challenge_id=challenge_id, week_number=1, photo_url=url)
            for url in ("https://cdn.example.com/front.jpg", "https://cdn.example.com/side.jpg")
        )
        analysis = AnalysisRecord(
            id=uuid4(), user_id=user_id, challenge_id=challenge_id, week_number=2, summary="Week two"
        )
        session = MagicMock()
        session.execute = AsyncMock(side_effect=[
            _result_of([week3, week2, week1]),
            _result_of([front, side]),
            _result_of([analysis]),
        ])

        history = await RDSCheckInRepository().get_history(user_id, challenge_id, session)

        assert [entry.checkin for entry in history] == [week3, week2, week1]
        assert [entry.checkin.week_number for entry in history] == [3, 2, 1]
        assert [len(entry.photos) for entry in history] == [0, 0, 2]
        assert history[2].photos == [front, side]
        assert [entry.analysis for entry in history] == [None, analysis, None]

    @pytest.mark.asyncio
    async def test_photos_without_a_checkin_are_not_listed(self):
        user_id, challenge_id = uuid4(), uuid4()
        checkin = CheckIn(id=uuid4(), user_id=user_id, challenge_id=challenge_id, week_number=2)
        stray = ProgressPhoto(
            id=uuid4(), user_id=user_id, challenge_id=challenge_id, week_number=5, photo_url="https://x/y.jpg"
        )
        session = MagicMock()
        session.execute = AsyncMock(side_effect=[_result_of([checkin]), _result_of([stray]), _result_of([])])

        (entry,) = await RDSCheckInRepository().get_history(user_id, challenge_id, session)

        assert entry.checkin is checkin
        assert entry.photos == []
        assert entry.analysis is None


class TestTimestampColumns:

    @pytest.mark.parametrize(
        "column",
        [
            CheckIn.__table__.c.created_at,
            ProgressPhoto.__table__.c.created_at,
            AnalysisRecord.__table__.c.created_at,
            AnalysisRecord.__table__.c.updated_at,
        ],
        ids=["check_ins.created_at", "progress_photos.created_at",
             "ai_analysis.created_at", "ai_analysis.updated_at"],
    )
    def test_every_timestamp_is_timezone_aware(self, column):
        assert column.type.timezone is True
        assert _sql(column.type) == "TIMESTAMP WITH TIME ZONE"

    def test_client_side_default_is_aware_utc(self):
        now = utcnow()
        assert now.tzinfo is not None
        assert now.utcoffset() == timedelta(0)
