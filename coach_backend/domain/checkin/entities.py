"""Weekly check-in domain entities."""
from uuid import uuid4

from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy import (
    Column, DateTime, Float, ForeignKey, Index, Integer, JSON, String, Text,
    UniqueConstraint, func,
)

from coach_backend.infrastructure.db.meta import Base, utcnow


class CheckIn(Base):
    """One client's metrics for one week of a challenge.

    Rows are append-only: a re-submission for the same week creates a new
    row rather than replacing the old one.
    """

    __tablename__ = "check_ins"

    id           = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id      = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    challenge_id = Column(UUID(as_uuid=True), ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False)
    week_number  = Column(Integer, nullable=False)

    weight       = Column(Float, nullable=True)
    measurements = Column(JSON, nullable=True)  # {"waist": 81.0, "hips": 96.5, ...}
    mood         = Column(String(100), nullable=True)
    sleep_hours  = Column(Float, nullable=True)
    energy_level = Column(Integer, nullable=True)
    notes        = Column(Text, nullable=True)

    created_at   = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_check_ins_user_challenge_week", "user_id", "challenge_id", "week_number"),
    )


class ProgressPhoto(Base):
    """Uploaded photo reference, grouped with a check-in by (user, challenge, week)."""

    __tablename__ = "progress_photos"

    id           = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id      = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    challenge_id = Column(UUID(as_uuid=True), ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False)
    week_number  = Column(Integer, nullable=False)
    photo_url    = Column(String(1024), nullable=False)
    created_at   = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    __table_args__ = (
        Index("ix_progress_photos_user_challenge_week", "user_id", "challenge_id", "week_number"),
    )


class AnalysisRecord(Base):
    """Generated coaching analysis; at most one per (user, challenge, week)."""

    __tablename__ = "ai_analysis"

    id              = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    user_id         = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    challenge_id    = Column(UUID(as_uuid=True), ForeignKey("challenges.id", ondelete="CASCADE"), nullable=False)
    week_number     = Column(Integer, nullable=False)

    summary         = Column(Text, nullable=False, default="")
    recommendations = Column(Text, nullable=False, default="")
    flagged_issues  = Column(Text, nullable=False, default="")
    encouragement   = Column(Text, nullable=False, default="")

    created_at      = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at      = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    __table_args__ = (
        UniqueConstraint("user_id", "challenge_id", "week_number", name="uq_ai_analysis_user_challenge_week"),
    )
