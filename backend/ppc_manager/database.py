"""
Database engine and unit-of-work helpers.
PostgreSQL via asyncpg on the SQLAlchemy 2 async engine. One session is one
transaction: `session_scope` commits on success and rolls back on any error,
and both the request dependency and the scripts go through it.
"""

import logging
import ssl
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import DeclarativeBase

from ppc_manager.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()


def _connect_args() -> dict:
    args = {"timeout": settings.db_connect_timeout}
    if settings.database_ssl:
        # Managed Postgres proxies often present self-signed certs
        ctx = ssl.create_default_context()
        ctx.check_hostname = False
        ctx.verify_mode = ssl.CERT_NONE
        args["ssl"] = ctx
    return args


engine = create_async_engine(
    settings.database_url,
    echo=settings.db_echo,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    pool_pre_ping=True,
    connect_args=_connect_args(),
)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


class Base(DeclarativeBase):
    pass


@asynccontextmanager
async def session_scope() -> AsyncIterator[AsyncSession]:
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_db() -> AsyncIterator[AsyncSession]:
    """FastAPI dependency: the whole request is one transaction."""
    async with session_scope() as session:
        yield session


async def init_db():
    """
    create_all for local runs; it never alters existing tables.
    Deployed schemas come from Alembic.
    """
    import ppc_manager.models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info(f"Schema ready: {', '.join(sorted(Base.metadata.tables))}")


async def check_db_connection() -> bool:
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception as e:
        logger.error(f"Database connection failed: {e}")
        return False
