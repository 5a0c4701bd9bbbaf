"""Database session factory for background tasks."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker
from sqlalchemy.pool import NullPool

from ledger.config.database import create_engine, create_session_maker


def create_task_engine() -> AsyncEngine:
    """Engine without pooling: each task run owns its own event loop."""
    return create_engine(echo=False, poolclass=NullPool)


def create_task_session_maker(
    engine: AsyncEngine | None = None,
) -> async_sessionmaker[AsyncSession]:
    """Session maker for tasks."""
    if engine is None:
        engine = create_task_engine()
    return create_session_maker(engine)
