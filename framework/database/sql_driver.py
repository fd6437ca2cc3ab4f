from typing import Optional
from sqlalchemy import create_engine, text
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import Session
from sqlmodel.ext.asyncio.session import AsyncSession
from framework.logging.logger import get_logger

logger = get_logger("database")


class SQLDriver:
    """Async engine plus an optional sync engine for the blocking repository mirror."""

    def __init__(self, url: str, sync_url: Optional[str] = None, echo: bool = False, **engine_kwargs):
        self.engine = create_async_engine(url, echo=echo, future=True, **engine_kwargs)
        self.session_factory = sessionmaker(
            self.engine, class_=AsyncSession, expire_on_commit=False
        )

        self.sync_engine = None
        self.sync_session_factory = None
        if sync_url:
            self.sync_engine = create_engine(sync_url, echo=echo, future=True, **engine_kwargs)
            self.sync_session_factory = sessionmaker(
                self.sync_engine, class_=Session, expire_on_commit=False
            )

    async def connect(self):
        """Check connectivity (the engine pool manages connections)."""
        async with self.engine.begin() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info(f"Connected to database | Dialect: {self.engine.dialect.name}")

    async def disconnect(self):
        """Dispose engine pools."""
        await self.engine.dispose()
        if self.sync_engine is not None:
            self.sync_engine.dispose()
        logger.info("Database engines disposed")

    async def get_session(self):
        async with self.session_factory() as session:
            yield session

    def get_sync_session(self):
        if self.sync_session_factory is None:
            raise RuntimeError("SQLDriver was created without a sync_url")
        with self.sync_session_factory() as session:
            yield session
