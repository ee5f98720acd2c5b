"""
MongoDB-backed invoice storage.

Each invoice is one document in a collection, keyed by a unique index on the
client-generated ``id``. Every store operation is a single atomic document
operation, so no extra locking is needed.
"""

import threading
from typing import Callable, Optional
from loguru import logger
from pymongo import ASCENDING, DESCENDING, MongoClient, ReturnDocument
from pymongo.collection import Collection
from pymongo.errors import DuplicateKeyError, PyMongoError
from .record_store_base import RecordStoreBase
from ..errors import StorageUnavailable

# Mongo's own _id never leaves the store
_PROJECTION = {"_id": 0}


class MongoConnectionPool:
    """
    Process-wide MongoDB connection state.

    ``MongoClient`` is itself a thread-safe connection pool, so the process
    holds exactly one. It is created on the first ``get_client()`` call and
    reused afterwards; ``close()`` releases it and a later ``get_client()``
    opens a fresh one.

    Usage:
        pool = MongoConnectionPool("mongodb://localhost:27017")
        client = pool.get_client()
        ...
        pool.close()  # on application shutdown
    """

    def __init__(
        self,
        uri: str,
        timeout_ms: int = 5000,
        client_factory: Callable[..., MongoClient] = MongoClient,
    ):
        """
        Args:
            uri: MongoDB connection string
            timeout_ms: Server selection timeout in milliseconds
            client_factory: Callable building the client (injectable for tests)
        """
        self.uri = uri
        self.timeout_ms = timeout_ms
        self._client_factory = client_factory
        self._client: Optional[MongoClient] = None
        self._lock = threading.Lock()

    @property
    def is_open(self) -> bool:
        return self._client is not None

    def get_client(self) -> MongoClient:
        """Return the shared client, creating it on first use"""
        if self._client is None:
            with self._lock:
                if self._client is None:
                    logger.info("Opening MongoDB connection pool")
                    self._client = self._client_factory(
                        self.uri, serverSelectionTimeoutMS=self.timeout_ms
                    )
        return self._client

    def close(self):
        """Close the shared client if it is open"""
        with self._lock:
            if self._client is not None:
                self._client.close()
                self._client = None
                logger.info("Closed MongoDB connection pool")


class MongoRecordStore(RecordStoreBase):
    """Record store backed by a MongoDB collection."""

    backend_name = "mongo"

    def __init__(self, pool: MongoConnectionPool, database: str, collection: str):
        """
        Args:
            pool: Shared connection pool
            database: Database name
            collection: Collection name
        """
        self.pool = pool
        self.database_name = database
        self.collection_name = collection
        self._indexed = False

    @property
    def collection(self) -> Collection:
        """Collection handle, ensuring the unique id index on first use"""
        collection = self.pool.get_client()[self.database_name][self.collection_name]
        if not self._indexed:
            collection.create_index([("id", ASCENDING)], unique=True)
            collection.create_index([("uploadedAt", DESCENDING)])
            self._indexed = True
        return collection

    def list_all(self) -> list[dict]:
        try:
            return list(self.collection.find({}, _PROJECTION).sort([("uploadedAt", DESCENDING), ("_id", DESCENDING)]))
        except PyMongoError as e:
            raise _unavailable(e) from e

    def find_by_id(self, invoice_id: str) -> Optional[dict]:
        try:
            return self.collection.find_one({"id": invoice_id}, _PROJECTION)
        except PyMongoError as e:
            raise _unavailable(e) from e

    def count(self) -> int:
        try:
            return self.collection.count_documents({})
        except PyMongoError as e:
            raise _unavailable(e) from e

    def _insert_new(self, document: dict) -> bool:
        # the filter supplies "id" on insert
        fields = {k: v for k, v in document.items() if k != "id"}
        try:
            result = self.collection.update_one(
                {"id": document["id"]},
                {"$setOnInsert": fields},
                upsert=True,
            )
        except DuplicateKeyError:
            # lost a race with a concurrent insert of the same id
            return False
        except PyMongoError as e:
            raise _unavailable(e) from e
        return result.upserted_id is not None

    def _apply_update(self, invoice_id: str, fields: dict) -> Optional[dict]:
        try:
            if not fields:
                return self.collection.find_one({"id": invoice_id}, _PROJECTION)
            return self.collection.find_one_and_update(
                {"id": invoice_id},
                {"$set": fields},
                projection=_PROJECTION,
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise _unavailable(e) from e

    def delete_by_id(self, invoice_id: str) -> bool:
        try:
            result = self.collection.delete_one({"id": invoice_id})
        except PyMongoError as e:
            raise _unavailable(e) from e
        return result.deleted_count > 0

    def describe(self) -> dict:
        return {
            "backend": self.backend_name,
            "database": self.database_name,
            "collection": self.collection_name,
        }


def _unavailable(e: PyMongoError) -> StorageUnavailable:
    logger.error("MongoDB operation failed", error=str(e))
    return StorageUnavailable(str(e))
