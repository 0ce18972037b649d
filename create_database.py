"""
Create the quiz engine tables.

    python create_database.py           # create missing tables
    python create_database.py --reset   # drop everything first (loses all sessions and submissions)
"""
import asyncio
import logging
import sys

from quiz_engine.database import Base, engine, init_models
from quiz_engine.logging_config import configure_logging

# model classes must be imported before metadata.create_all sees them
from quiz_engine import models  # noqa: F401

logger = logging.getLogger("quiz_engine.create_database")


async def main(reset: bool):
    if reset:
        logger.warning("Dropping and recreating all tables")

    await init_models(reset=reset)
    logger.info("Tables ready: %s", ", ".join(Base.metadata.tables))

    await engine.dispose()


if __name__ == "__main__":
    configure_logging()
    asyncio.run(main(reset="--reset" in sys.argv[1:]))
