"""Database engine and session management."""

from __future__ import annotations

from collections.abc import AsyncIterator
from pathlib import Path

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from outfitter.db.models import Base


class Database:
    """Owns the async engine and session factory for the process lifetime."""

    def __init__(self, database_url: str, *, echo: bool = False) -> None:
        if database_url.startswith("sqlite"):
            database_path = make_url(database_url).database
            if database_path and database_path != ":memory:":
                Path(database_path).parent.mkdir(parents=True, exist_ok=True)

        self.engine: AsyncEngine = create_async_engine(database_url, echo=echo)
        self.session_factory = async_sessionmaker(
            self.engine,
            expire_on_commit=False,
            class_=AsyncSession,
        )

    async def init_db(self) -> None:
        """Create database tables if they do not exist."""

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield a managed asynchronous SQLAlchemy session."""

        async with self.session_factory() as session:
            yield session

    async def dispose(self) -> None:
        """Close pooled connections."""

        await self.engine.dispose()
