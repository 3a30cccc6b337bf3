from typing import Any, Dict

from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker
from sqlalchemy import text
from app.core.config import settings


def _engine_options() -> Dict[str, Any]:
    """
    Connection pooling configuration for the configured backend.
    - pool_size: Number of persistent connections to maintain
    - max_overflow: Additional connections allowed beyond pool_size under load
    - pool_pre_ping: Verify connections are alive before use (prevents stale connections)
    - pool_recycle: Recycle connections after 1 hour to prevent DB-side timeouts
    - pool_timeout: Wait up to 30s for a connection before raising an error
    SQLite uses its own pool classes, which reject the sizing arguments.
    """
    options: Dict[str, Any] = {"echo": settings.SQLALCHEMY_ECHO}
    if settings.is_sqlite:
        options["connect_args"] = {"check_same_thread": False}
        return options

    options.update(
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_pre_ping=True,
        pool_recycle=3600,
        pool_timeout=30,
    )
    return options


engine = create_async_engine(settings.DATABASE_URL, **_engine_options())

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


async def init_db() -> None:
    """Create any missing tables. Development convenience; there are no migrations."""
    from app.db.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def check_db_connection() -> bool:
    """
    Verify database connectivity. Used by health checks.
    Returns True if connection is successful, False otherwise.
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        return True
    except Exception:
        return False
