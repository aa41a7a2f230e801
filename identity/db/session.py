"""Async engine and session factory for scripts, tests and callers outside a web framework.

Invariants:
    - Sessions never expire loaded users on commit (no lazy loads in async code)
    - create_schema is a convenience for tests and local setups, not a migration tool
"""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from identity.config import get_settings
from identity.db.base import Base


def create_engine(database_url: str | None = None, echo: bool = False) -> AsyncEngine:
    """Create an async engine for ``database_url``, or for Settings.database_url when omitted."""
    return create_async_engine(database_url or get_settings().database_url, echo=echo)


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create an async session factory bound to ``engine``."""
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_schema(engine: AsyncEngine) -> None:
    """Create every identity table that does not exist yet."""
    # Registers the tables on Base.metadata
    import identity.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
