from motor.motor_asyncio import AsyncIOMotorClient
from core.config import settings

_client = None


def get_database():
    # Created on first use so the local backend never opens a Mongo client.
    # tz_aware: stored datetimes come back as aware UTC and are converted to
    # the local calendar by core.time_utils.to_local.
    global _client
    if _client is None:
        _client = AsyncIOMotorClient(settings.MONGO_URI, tz_aware=True)
    return _client[settings.DB_NAME]


def close_database():
    global _client
    if _client is not None:
        _client.close()
        _client = None
