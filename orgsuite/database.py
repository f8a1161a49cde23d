"""
Engine and sessions for the OrgSuite store.

One async engine per process, built from ``ORGSUITE_DATABASE_URL``.
Request handlers receive their session through the ``get_db`` dependency.
"""

from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import NullPool

from orgsuite.config.settings import get_settings
from orgsuite.models.base import Base

settings = get_settings()

DATABASE_URL = settings.database_url

# Plain postgresql:// URLs run on the asyncpg driver
if DATABASE_URL.startswith("postgresql://"):
    DATABASE_URL = DATABASE_URL.replace("postgresql://", "postgresql+asyncpg://", 1)


engine = create_async_engine(
    DATABASE_URL,
    echo=settings.sql_echo,
    pool_pre_ping=True,
    poolclass=NullPool if settings.environment == "test" else None,
)

# Tenant records stay readable after commit; routers return them directly
AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Session for one request.

    A request that raises is rolled back, so the organization's records
    keep the state they had before it.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Create every OrgSuite table that does not exist yet (``auto_create_schema``)."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def close_db() -> None:
    await engine.dispose()
