import argparse
import asyncio
import logging

from core.config import settings
from core.database import close_database, get_database
from core.logging_config import setup_logging
from storage.local import LocalHabitStore
from storage.mongo import MongoHabitStore

logger = logging.getLogger(__name__)


async def migrate(source_path: str) -> int:
    """Copy every habit (history included) from the local JSON blob into MongoDB."""
    local = LocalHabitStore(source_path)
    mongo = MongoHabitStore(get_database())
    await mongo.ensure_indexes()

    habits = await local.load_all()
    logger.info("Found %d habits in %s", len(habits), source_path)

    copied = 0
    for habit in habits:
        # Check if exists
        if await mongo.get(habit.id) is not None:
            logger.info("Skipping %s (%s): already in %s", habit.id, habit.title, settings.DB_NAME)
            continue
        await mongo.save(habit)
        copied += 1

    logger.info("Migrated %d habits", copied)
    return copied


if __name__ == "__main__":
    setup_logging()
    parser = argparse.ArgumentParser(description="Import the local habit store into MongoDB")
    parser.add_argument("--source", default=settings.LOCAL_STORE_PATH)
    args = parser.parse_args()
    try:
        asyncio.run(migrate(args.source))
    finally:
        close_database()
