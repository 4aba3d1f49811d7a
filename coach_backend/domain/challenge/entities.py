"""Challenge entities. Owned by the challenge CRUD service; read-only here."""
from __future__ import annotations

from uuid import uuid4
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint

from coach_backend.infrastructure.db.meta import Base, utcnow


class Challenge(Base):
    """A coach-defined, multi-week program."""

    __tablename__ = "challenges"

    id             = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    coach_id       = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name           = Column(String(255), nullable=False)
    description    = Column(Text, nullable=True)
    duration_weeks = Column(Integer, nullable=False)
    created_at     = Column(DateTime(timezone=True), default=utcnow, nullable=False)


class ChallengeParticipant(Base):
    """Enrollment of a client in a challenge."""

    __tablename__ = "challenge_participants"

    id           = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    challenge_id = Column(UUID(as_uuid=True), ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False)
    user_id      = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    joined_at    = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("challenge_id", "user_id", name="uq_challenge_participants_challenge_user"),
    )
