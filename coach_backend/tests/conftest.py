# coach_backend/tests/conftest.py
import logging
import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock
from uuid import uuid4

import pytest_asyncio

# must be in place before coach_backend.config is first imported
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("OPENAI_API_KEY", "sk-test")
os.environ.setdefault("S3_BUCKET", "coach-test-bucket")
os.environ.setdefault("AWS_REGION", "us-east-1")

from coach_backend.config import settings as _settings
from coach_backend.context.checkin import CheckInContextBuilder
from coach_backend.domain.challenge.entities import Challenge
from coach_backend.domain.user.entities import User, UserRole
from coach_backend.services.checkin.analysis import CheckInAnalysisGenerator
from coach_backend.services.checkin.service import CheckInService

from .fakes import (
    FakeChallengeRepository,
    FakeCheckInRepository,
    FakeSession,
    FakeStorageRepository,
    ScriptedLLM,
)

_settings.cache_clear()

for name in (
    "asyncio",
    "sqlalchemy.pool",
    "sqlalchemy.engine.Engine",
    "botocore",
):
    logging.getLogger(name).setLevel(logging.WARNING)

logging.getLogger("coach_backend").setLevel(logging.INFO)


@pytest_asyncio.fixture
async def coach():
    return User(id=uuid4(), email="coach@example.com", name="Coach Carter", role=UserRole.COACH)


@pytest_asyncio.fixture
async def client_user():
    return User(id=uuid4(), email="sam@example.com", name="Sam Client", role=UserRole.CLIENT)


@pytest_asyncio.fixture
async def challenge(coach):
    return Challenge(
        id=uuid4(),
        coach_id=coach.id,
        name="Spring Shred",
        description="Twelve weeks of progressive training",
        duration_weeks=12,
        created_at=datetime(2024, 3, 1, tzinfo=timezone.utc),
    )


@pytest_asyncio.fixture
async def user_repo(coach, client_user):
    """The user port is a single lookup; a dict-backed AsyncMock is enough."""
    users = {coach.id: coach, client_user.id: client_user}
    repo = AsyncMock()
    repo.get_by_id.side_effect = lambda uid, session: users.get(uid)
    return repo


@pytest_asyncio.fixture
async def challenge_repo(challenge, client_user):
    return FakeChallengeRepository(
        challenges=[challenge],
        participants=[(challenge.id, client_user.id)],
    )


@pytest_asyncio.fixture
async def checkin_repo(challenge):
    return FakeCheckInRepository(challenges=[challenge])


@pytest_asyncio.fixture
async def storage_repo():
    return FakeStorageRepository()


@pytest_asyncio.fixture
async def llm():
    return ScriptedLLM()


@pytest_asyncio.fixture
async def session():
    return FakeSession()


@pytest_asyncio.fixture
async def context_builder(checkin_repo, user_repo, challenge_repo):
    return CheckInContextBuilder(checkin_repo, user_repo, challenge_repo, history_window=4)


@pytest_asyncio.fixture
async def checkin_service(checkin_repo, storage_repo, context_builder, llm):
    generator = CheckInAnalysisGenerator(llm, context_builder, temperature=0.7, max_tokens=1000)
    return CheckInService(checkin_repo, storage_repo, context_builder, generator)
