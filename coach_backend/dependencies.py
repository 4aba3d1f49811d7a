# coach_backend/dependencies.py

"""
Centralised FastAPI dependency providers.

Lifetimes
---------
* module-level singletons → created once at import time, wired by constructor
* request-scoped objects  → yielded by functions that FastAPI wraps

Tests swap any of these through ``app.dependency_overrides``.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import AsyncGenerator, Callable
from uuid import UUID

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.ext.asyncio import AsyncSession

from coach_backend.config import settings
from coach_backend.context.checkin import CheckInContextBuilder
from coach_backend.domain.errors import CheckInError
from coach_backend.infrastructure.db.bootstrap import get_session as get_db_session
from coach_backend.infrastructure.implementations.challenge.rds_challenge_repository import RDSChallengeRepository
from coach_backend.infrastructure.implementations.checkin.rds_checkin_repository import RDSCheckInRepository
from coach_backend.infrastructure.implementations.object_storage.s3_storage_repository import S3StorageRepository
from coach_backend.infrastructure.implementations.user.rds_user_repository import RDSUserRepository
from coach_backend.infrastructure.llm.openai_llm import OpenAILLM
from coach_backend.services.checkin.analysis import CheckInAnalysisGenerator
from coach_backend.services.checkin.service import CheckInService

# ────────────────────────── singletons ─────────────────────────── #

_checkin_repo = RDSCheckInRepository()
_user_repo = RDSUserRepository()
_challenge_repo = RDSChallengeRepository()
_storage_service = S3StorageRepository()
_analysis_llm = OpenAILLM(
    api_key=settings().openai_api_key,
    model=settings().analysis_model,
)
_context_builder = CheckInContextBuilder(
    _checkin_repo, _user_repo, _challenge_repo, history_window=settings().history_window
)
_analysis_generator = CheckInAnalysisGenerator(
    _analysis_llm,
    _context_builder,
    temperature=settings().analysis_temperature,
    max_tokens=settings().analysis_max_tokens,
)
_checkin_service = CheckInService(
    _checkin_repo,
    _storage_service,
    _context_builder,
    _analysis_generator,
    max_photos=settings().max_photos_per_checkin,
    max_photo_bytes=settings().max_photo_bytes,
)

# ─────────────────────── DI provider helpers ───────────────────── #

def get_checkin_service() -> CheckInService:
    """Return the singleton CheckInService."""
    return _checkin_service

def get_challenge_repository() -> RDSChallengeRepository:
    return _challenge_repo


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """Request-scoped database session (async)."""
    async for session in get_db_session():
        yield session

# ───────────────────────── auth helpers ───────────────────────── #

@dataclass(frozen=True)
class AuthenticatedUser:
    id: UUID
    role: str


_security = HTTPBearer(auto_error=False)


def decode_token(token: str) -> AuthenticatedUser:
    """Decode our own JWT into the caller's identity. Raises CheckInError(UNAUTHORIZED)."""
    try:
        payload = jwt.decode(token, settings().jwt_secret, algorithms=[settings().jwt_algorithm])
    except JWTError:
        raise CheckInError.unauthorized("Invalid token")

    uid_str = payload.get("uid") or payload.get("userId")
    try:
        uid = UUID(str(uid_str))
    except ValueError:
        raise CheckInError.unauthorized("Invalid token")
    return AuthenticatedUser(id=uid, role=payload.get("role", "client"))


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(_security),
) -> AuthenticatedUser:
    if credentials is None or not credentials.credentials:
        raise CheckInError.unauthorized("No token provided")
    return decode_token(credentials.credentials)


def require_role(*roles: str) -> Callable:
    """Dependency factory rejecting callers whose role is not in *roles*."""

    async def _guard(user: AuthenticatedUser = Depends(get_current_user)) -> AuthenticatedUser:
        if user.role not in roles:
            raise CheckInError.forbidden()
        return user

    return _guard
