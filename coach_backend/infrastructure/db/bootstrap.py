# coach_backend/infrastructure/db/bootstrap.py

"""
Async engine / session lifecycle.

``init_engine`` is called once from the FastAPI lifespan (or a test fixture);
everything else reads the module-level ``engine`` and ``SessionLocal``.
Sessions never auto-commit: the service that owns the unit of work commits.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import AsyncGenerator, AsyncIterator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from coach_backend.config import Settings

logger = logging.getLogger(__name__)

engine: Optional[AsyncEngine] = None
SessionLocal: Optional[async_sessionmaker[AsyncSession]] = None


async def init_engine(cfg: Settings) -> None:
    global engine, SessionLocal

    if engine is not None:
        return

    engine_kwargs = {"echo": cfg.db_echo, "pool_pre_ping": True}
    if cfg.db_url.startswith("postgresql"):
        engine_kwargs.update(pool_size=cfg.db_pool_size, max_overflow=cfg.db_max_overflow)

    engine = create_async_engine(cfg.db_url, **engine_kwargs)
    SessionLocal = async_sessionmaker(engine, expire_on_commit=False, autoflush=False)
    logger.info("Database engine initialised")


async def dispose_engine() -> None:
    global engine, SessionLocal

    if engine is None:
        return
    await engine.dispose()
    engine = None
    SessionLocal = None
    logger.info("Database engine disposed")


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    """Yield a session; roll back if the block raises, always close."""
    if SessionLocal is None:
        raise RuntimeError("init_engine() has not been called")

    async with SessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request."""
    async with session_scope() as session:
        yield session
