"""User domain entity (SQLAlchemy model)."""
from __future__ import annotations

from uuid import uuid4
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy import Column, String, DateTime, func

from coach_backend.infrastructure.db.meta import Base


class UserRole:
    CLIENT = "client"
    COACH = "coach"


class User(Base):
    """Coach or client account. Managed by the auth service; read-only here."""

    __tablename__ = "users"

    id      = Column(UUID(as_uuid=True), primary_key=True, default=uuid4)
    email   = Column(String(255), unique=True, nullable=False)
    name    = Column(String(255), nullable=True)
    role    = Column(String(20), nullable=False, default=UserRole.CLIENT)
    created = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
