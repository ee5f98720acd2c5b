from pathlib import Path
from typing import Optional
from loguru import logger
from .record_store_base import RecordStoreBase
from .records_json import JsonFileRecordStore, default_data_dir_candidates, resolve_data_dir
from .records_mongo import MongoConnectionPool, MongoRecordStore
from ...core.config import Settings

# Process-wide Mongo pool; created by the first mongo store, closed on shutdown
_mongo_pool: Optional[MongoConnectionPool] = None


def get_mongo_pool(settings: Settings) -> MongoConnectionPool:
    global _mongo_pool
    if _mongo_pool is None:
        _mongo_pool = MongoConnectionPool(settings.mongodb_uri, timeout_ms=settings.mongodb_timeout_ms)
    return _mongo_pool


def close_mongo_pool():
    global _mongo_pool
    if _mongo_pool is not None:
        _mongo_pool.close()
        _mongo_pool = None


def build_record_store(settings: Settings) -> RecordStoreBase:
    """
    Create the record store selected by STORAGE_BACKEND.

    Raises:
        ValueError: If the backend name is unknown
    """
    backend = settings.storage_backend.lower()
    if backend == "json":
        if settings.data_dir:
            data_dir = resolve_data_dir([Path(settings.data_dir)])
        else:
            data_dir = resolve_data_dir(default_data_dir_candidates())
        store = JsonFileRecordStore(data_dir / settings.data_file_name)
        logger.info("Using JSON file storage", path=str(store.path))
        return store
    if backend == "mongo":
        logger.info(
            "Using MongoDB storage",
            database=settings.mongodb_database,
            collection=settings.mongodb_collection,
        )
        return MongoRecordStore(
            get_mongo_pool(settings),
            settings.mongodb_database,
            settings.mongodb_collection,
        )
    raise ValueError(f"Unknown STORAGE_BACKEND: {settings.storage_backend!r}")


__all__ = [
    "RecordStoreBase",
    "JsonFileRecordStore",
    "MongoConnectionPool",
    "MongoRecordStore",
    "build_record_store",
    "close_mongo_pool",
    "get_mongo_pool",
]
