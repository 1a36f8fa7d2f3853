"""
Traceability API — Database Session Management
===============================================

What:  Async SQLAlchemy engine, session factory, and FastAPI dependency.
Why:   Centralizes all database connection logic in one place.
How:   A `Database` object owns the engine (connection pool) and the session
       factory. It is built once in the application lifespan and stored on
       `app.state.db`; requests reach it through `get_db_session`.
Who:   Used by route handlers via FastAPI's dependency injection system.
When:  Engine is created at startup; sessions are created per-request.

Why not a module-level engine:
    The pool is the only shared state in the service. Passing it explicitly
    through app.state lets tests build an application against a throwaway
    SQLite file without patching globals, and keeps import free of I/O.
"""

from typing import AsyncGenerator

from fastapi import Request
from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from traceability.config import Settings


# ── Base Model ────────────────────────────────────────────────────────────
class Base(DeclarativeBase):
    """
    Base class for all SQLAlchemy ORM models.

    All four tables register with this metadata, which `create_tables`
    uses to issue CREATE TABLE IF NOT EXISTS at startup.
    """
    pass


class Database:
    """
    Owns the connection pool for the lifetime of the application.

    Attributes:
        engine:          AsyncEngine (pool of connections)
        session_factory: async_sessionmaker bound to the engine
    """

    def __init__(self, engine: AsyncEngine):
        self.engine = engine
        # expire_on_commit=False: attributes stay readable after commit
        self.session_factory = async_sessionmaker(
            engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        engine = create_async_engine(
            settings.database_url_resolved,
            **settings.engine_options(),
        )
        return cls(engine)

    async def check_connection(self) -> None:
        """
        What:  Acquires one connection and runs SELECT 1.
        When:  At startup (fatal on failure) and from the health route.
        Raises whatever the driver raises; callers decide how fatal it is.
        """
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def create_tables(self) -> None:
        # Imported for the side effect of registering tables on Base.metadata
        from traceability import models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        """Closes all pooled connections (called on shutdown)."""
        await self.engine.dispose()


# ── Dependencies ──────────────────────────────────────────────────────────
def get_database(request: Request) -> Database:
    return request.app.state.db


async def get_db_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency that provides a database session per request.

    How it works:
        1. Creates a new session from the application's session factory
        2. Yields it to the route handler (the service runs one statement
           and commits writes itself)
        3. On error: rolls back so the connection returns to the pool clean
        4. Always: closes the session (returns connection to pool)

    Example usage in a route:
        @router.get("/track")
        async def track(db: AsyncSession = Depends(get_db_session)):
            ...
    """
    database = get_database(request)
    async with database.session_factory() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()
