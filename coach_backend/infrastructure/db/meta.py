"""Declarative base shared by every ORM entity."""
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    """Timezone-aware UTC now; every timestamp column is timestamptz."""
    return datetime.now(timezone.utc)
