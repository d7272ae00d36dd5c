import logging
from typing import Optional

from core.config import settings
from storage.base import HabitStore

logger = logging.getLogger(__name__)

_store: Optional[HabitStore] = None


def build_store(backend: str) -> HabitStore:
    if backend == "mongo":
        from core.database import get_database
        from storage.mongo import MongoHabitStore
        return MongoHabitStore(get_database())
    if backend == "local":
        from storage.local import LocalHabitStore
        return LocalHabitStore(settings.LOCAL_STORE_PATH)
    raise ValueError(f"Unknown STORAGE_BACKEND: {backend!r}")


def get_store() -> HabitStore:
    """FastAPI dependency: the configured habit store (created once)."""
    global _store
    if _store is None:
        _store = build_store(settings.STORAGE_BACKEND)
        logger.info("Using %s habit store", settings.STORAGE_BACKEND)
    return _store
