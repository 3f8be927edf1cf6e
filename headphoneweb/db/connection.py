from typing import Optional
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel
from headphoneweb.config.settings import Settings
from headphoneweb.db.utils import build_database_url, connect_args_for
from headphoneweb.common import logger


class Database:
    """Process-wide connection pool plus session factory.

    Built once in the app lifespan and stored on ``app.state.db``; ``dispose``
    must be awaited at shutdown.
    """

    def __init__(self, settings: Settings, url: Optional[str] = None):
        self.url = url or build_database_url(settings)
        engine_kwargs = {"echo": settings.DB_ECHO, "connect_args": connect_args_for(self.url, settings)}
        if not self.url.startswith("sqlite"):
            engine_kwargs.update(pool_size=settings.DB_POOL_SIZE,
                                 max_overflow=settings.DB_MAX_OVERFLOW,
                                 pool_pre_ping=True)
        self.engine: AsyncEngine = create_async_engine(self.url, **engine_kwargs)
        self.session_maker = async_sessionmaker(bind=self.engine, class_=AsyncSession, expire_on_commit=False)

    async def create_all(self) -> None:
        # importing the schema registers every table on SQLModel.metadata
        from headphoneweb.db import schema  # noqa: F401
        async with self.engine.begin() as conn:
            await conn.run_sync(SQLModel.metadata.create_all)

    async def ping(self) -> None:
        async with self.engine.connect() as conn:
            await conn.execute(text("SELECT 1"))

    async def dispose(self) -> None:
        await self.engine.dispose()
        logger.info("db.engine.disposed")
