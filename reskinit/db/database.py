"""
Database engine and session management.

The Database object owns the async engine and session factory. The
application opens one at startup, keeps it on app.state and disposes it at
shutdown; nothing here holds a module-level engine.
"""

from collections.abc import AsyncGenerator

from fastapi import Request
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from reskinit.models.db import Base
from reskinit.models.failure import KnownError


class Database:
    """Async engine plus session factory with an explicit lifecycle."""

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, echo=echo, pool_pre_ping=True)
        self.session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_engine(cls, engine: AsyncEngine) -> "Database":
        """Wrap an engine created elsewhere (tests use in-memory SQLite)."""
        database = cls.__new__(cls)
        database.url = str(engine.url)
        database.engine = engine
        database.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )
        return database

    async def init_db(self) -> None:
        """
        Initialize database tables.

        Creates all tables defined in the ORM models.
        Should be called once at application startup.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def drop_db(self) -> None:
        """
        Drop all database tables.

        WARNING: Destroys all data. Use only for testing.
        """
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)

    async def dispose(self) -> None:
        """Close pooled connections."""
        await self.engine.dispose()


def get_database(request: Request) -> Database:
    """Dependency returning the Database opened by the application lifespan."""
    database: Database = request.app.state.database
    return database


async def get_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency that provides a database session.

    Commits when the request handler returns, rolls back on any error.

    Usage in FastAPI:
        @app.get("/items")
        async def get_items(session: AsyncSession = Depends(get_session)):
            ...
    """
    async with get_database(request).session_factory() as session:
        try:
            yield session
            await session.commit()
        except (SQLAlchemyError, KnownError):
            await session.rollback()
            raise
