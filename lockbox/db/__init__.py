import asyncio
import logging
import sys

from lockbox.db.session import engine
from lockbox.db.base import Base

logger = logging.getLogger(__name__)


async def init_models(drop_existing: bool = False):
    """Create every vault table on the configured engine."""
    # Model modules must be imported so their tables are registered on Base.metadata
    import lockbox.models  # noqa: F401

    try:
        async with engine.begin() as conn:
            if drop_existing:
                await conn.run_sync(Base.metadata.drop_all)
            logger.info("Creating vault tables")
            await conn.run_sync(Base.metadata.create_all)
            logger.info("Vault tables ready")
    except Exception as e:
        logger.error("Failed to create tables: %s", e)
        raise


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(init_models())
