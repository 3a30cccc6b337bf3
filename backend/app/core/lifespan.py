"""
Application startup and shutdown.
"""

import logging
from contextlib import asynccontextmanager

from app.core.config import settings

logger = logging.getLogger("personnel.lifespan")


@asynccontextmanager
async def lifespan_manager(app):
    """
    FastAPI lifespan context manager for startup/shutdown.

    Usage:
        app = FastAPI(lifespan=lifespan_manager)
    """
    from app.api.deps import get_db_session
    from app.db.seed import seed_database
    from app.db.session import engine, init_db

    logger.info(f"Starting {settings.PROJECT_NAME} ({settings.ENVIRONMENT})")

    if settings.CREATE_TABLES_ON_STARTUP:
        await init_db()
        logger.info("Database tables initialized")

    if settings.SEED_DATA_ON_STARTUP:
        async with get_db_session() as db:
            await seed_database(db, settings.SEED_DATA_PATH)

    logger.info("Application startup complete")

    try:
        yield
    finally:
        logger.info("Closing database connections...")
        await engine.dispose()
        logger.info("Application shutdown complete")
