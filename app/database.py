"""
Database engine, session factory and lifecycle helpers for PRD storage.

PostgreSQL (asyncpg) in production; the test suite points DATABASE_URL at
an aiosqlite file, which is why engine options depend on the dialect.
"""
from typing import Any, AsyncGenerator, Dict, Union
import logging

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import declarative_base
from sqlalchemy.pool import NullPool

from app.config import settings

logger = logging.getLogger(__name__)


def _engine_options(database_url: str) -> Dict[str, Any]:
    """Keyword arguments for ``create_async_engine`` by backend."""
    options: Dict[str, Any] = {
        "echo": False,
        "poolclass": NullPool,
    }
    if make_url(database_url).get_backend_name() != "sqlite":
        options["pool_pre_ping"] = True
    return options


engine = create_async_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

AsyncSessionLocal = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)

# Base class for the users / prds / pending_ideas tables
Base = declarative_base()


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Request-scoped session: committed when the route returns, rolled back
    when it raises (including ``HTTPException``).

    Example:
        @router.get("")
        async def list_prds(db: AsyncSession = Depends(get_db)):
            return await prd_store.list_user_prds(db, user_id)
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception as exc:
            await session.rollback()
            logger.error("get_db: rolled back session (%s)", exc)
            raise


async def ping(conn: Union[AsyncConnection, AsyncSession]) -> None:
    """Round-trip ``SELECT 1``; raises whatever the driver raises."""
    await conn.execute(text("SELECT 1"))


async def init_db() -> None:
    """Create any missing tables and confirm the connection answers."""
    # Registers the ORM classes on Base.metadata
    from app.models import database_models  # noqa: F401

    backend = make_url(settings.DATABASE_URL).get_backend_name()
    try:
        async with engine.begin() as conn:
            await ping(conn)
            await conn.run_sync(Base.metadata.create_all)
    except Exception as exc:
        logger.error("init_db: %s database unavailable: %s", backend, exc)
        raise
    logger.info(
        "init_db: %s ready (%s)", backend, ", ".join(sorted(Base.metadata.tables))
    )


async def close_db() -> None:
    """Dispose of the engine at shutdown."""
    try:
        await engine.dispose()
    except Exception as exc:
        logger.error("close_db: %s", exc)
        raise
    logger.info("close_db: connections closed")
