import logging
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

logger = logging.getLogger(__name__)


@asynccontextmanager
async def unit_of_work(db: AsyncSession, name: str = "Anonymous"):
    """
    Run the enclosed block as one transaction: commit on success,
    roll back and re-raise on any error.
    """
    logger.debug("Transaction started: %s", name)
    try:
        yield db
        await db.commit()
    except Exception as exc:
        logger.debug("Transaction %s failed, rolling back: %s", name, exc)
        await db.rollback()
        raise
    logger.debug("Transaction completed: %s", name)
