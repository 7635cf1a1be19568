import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import StaticPool

logger = logging.getLogger(__name__)

Base = declarative_base()


class Storage:
    """Owns the engine and session factory backing every repository.

    The default in-memory SQLite URL keeps a single shared connection so all
    sessions see the same volatile database; it disappears on ``dispose``.
    """

    def __init__(self, database_url: str, *, echo: bool = False) -> None:
        self.database_url = database_url
        engine_kwargs: dict = {"echo": echo}
        if database_url.startswith("sqlite"):
            engine_kwargs["connect_args"] = {"check_same_thread": False}
            if ":memory:" in database_url or database_url == "sqlite+aiosqlite://":
                engine_kwargs["poolclass"] = StaticPool
        self.engine = create_async_engine(database_url, **engine_kwargs)
        self.session_factory = async_sessionmaker(
            bind=self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
            autocommit=False,
        )

    async def init(self) -> None:
        # Import for the side effect of registering the tables on Base.metadata
        from rootpilot.infrastructure import sql_models  # noqa: F401

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
        logger.info("Storage initialised (%s)", self.engine.url.get_backend_name())

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("Storage disposed")

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        async with self.session_factory() as session:
            yield session


# Async dependency to get DB session
async def get_async_db(request: Request):
    storage: Storage = request.app.state.storage
    async with storage.session() as session:
        yield session
