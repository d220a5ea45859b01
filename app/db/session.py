from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession
from sqlalchemy.orm import sessionmaker

from app.core.config import settings
from app.helpers.getters import isDebugMode
import logging
logger = logging.getLogger(__name__)

if settings.MODE == "debug":
    logger.info("Using EXTERNAL database URL for debug mode")
    DATABASE_URL = settings.DATABASE_URL_EXTERNAL
else:
    DATABASE_URL = settings.DATABASE_URL

engine_kwargs = {"future": True, "echo": False}
if not DATABASE_URL.startswith("sqlite"):
    engine_kwargs["pool_pre_ping"] = True

engine = create_async_engine(DATABASE_URL, **engine_kwargs)
SessionAsync = sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def init_models():
    """Create all tables for the registered models."""
    from app.db.base import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ready (debug=%s)", isDebugMode())
