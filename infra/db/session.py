from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator

import structlog
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from core.config import settings
from domain.ports import UnitOfWork
from infra.db.models import Base


log = structlog.get_logger(__name__)


class Database:
    """Engine and session factory; owned by the process entry point."""

    def __init__(self, url: str | None = None, *, echo: bool | None = None) -> None:
        self.url = url or settings.database_url
        self.engine: AsyncEngine = create_async_engine(
            self.url,
            echo=settings.db_echo if echo is None else echo,
            pool_pre_ping=not self.url.startswith("sqlite"),
        )
        self.sessionmaker = async_sessionmaker(self.engine, expire_on_commit=False)

    async def create_all(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        log.info("db_schema_created", url=self.engine.url.render_as_string(hide_password=True))

    async def dispose(self) -> None:
        await self.engine.dispose()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.sessionmaker() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise


class SqlUnitOfWork(UnitOfWork):
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
