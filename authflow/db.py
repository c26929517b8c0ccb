"""
Database core for authflow.

Owns the async SQLAlchemy engine, the session factory and the ``users``
table read and written by the user store, the release-notes service and the
workspace cloner.
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import sqlalchemy as sa
from sqlalchemy import String
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

logger = logging.getLogger(__name__)

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    __abstract__ = True
    metadata = sa.MetaData(naming_convention=NAMING_CONVENTION)


class UserRecord(Base):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    email: Mapped[str | None] = mapped_column(String(320))
    invite_token: Mapped[str | None] = mapped_column(String(255))
    example_workspace_id: Mapped[str | None] = mapped_column(String(64))
    release_notes_viewed_version: Mapped[str | None] = mapped_column(String(32))


class Database:
    """Engine plus session factory bound to one database URL."""

    def __init__(self, url: str, *, echo: bool = False) -> None:
        self.url = url
        self.engine: AsyncEngine = create_async_engine(url, future=True, echo=echo)
        self._sessionmaker = async_sessionmaker(
            bind=self.engine, expire_on_commit=False
        )
        logger.info("DB_ASYNC_ENGINE_INIT", extra={"meta": {"dialect": self.engine.dialect.name}})

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """Yield an async session that rolls back on error and always closes."""
        start = time.monotonic()
        session = self._sessionmaker()
        try:
            yield session
        except Exception as e:
            await session.rollback()
            logger.warning(
                "DB_ASYNC_SESSION_ROLLBACK",
                extra={
                    "meta": {
                        "error": str(e),
                        "error_type": type(e).__name__,
                        "duration_ms": round((time.monotonic() - start) * 1000, 2),
                    }
                },
            )
            raise
        finally:
            await session.close()
