"""
JSON-file invoice storage.

All records live in one JSON array on local disk, newest first. Every
mutation rewrites the whole file through a temp file and an atomic rename,
so a crash mid-write never leaves a truncated file behind. Writers are
serialized with a lock, so concurrent requests cannot lose each other's
updates.
"""

import json
import os
import tempfile
import threading
from pathlib import Path
from typing import Optional
from loguru import logger
from .record_store_base import RecordStoreBase
from ..errors import StorageUnavailable


def default_data_dir_candidates() -> list[Path]:
    """Directories tried, in order, when DATA_DIR is not configured."""
    return [
        Path.cwd() / "data",
        Path(tempfile.gettempdir()) / "invoicevault_data",
    ]


def resolve_data_dir(candidates: list[Path]) -> Path:
    """
    Return the first candidate directory that exists or can be created.

    Raises:
        StorageUnavailable: If none of the candidates is usable
    """
    for candidate in candidates:
        try:
            candidate.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            logger.debug("Data directory not usable", path=str(candidate), error=str(e))
            continue
        if os.access(candidate, os.W_OK):
            return candidate
    raise StorageUnavailable("Cannot create data directory")


class JsonFileRecordStore(RecordStoreBase):
    """
    Record store backed by a single JSON file.

    Features:
    - Survives restarts (plain file, human readable)
    - Atomic whole-file replace on every write
    - Mutations serialized with a per-store lock
    """

    backend_name = "json"

    def __init__(self, path: str | Path):
        """
        Initialize store with the data file path.

        The file is created containing ``[]`` if it does not exist.

        Args:
            path: Path to the JSON data file
        """
        self.path = Path(path)
        self._lock = threading.Lock()
        self._init_file()

    def _init_file(self):
        """Create an empty data file if none exists"""
        if self.path.exists():
            return
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._write([])
        except OSError as e:
            raise StorageUnavailable(f"Cannot create {self.path}: {e}") from e
        logger.info("Created fresh data file", path=str(self.path))

    def _read(self) -> list[dict]:
        """Load the whole record array from disk"""
        try:
            with open(self.path, encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load invoices", path=str(self.path), error=str(e))
            raise StorageUnavailable(str(e)) from e

        if not isinstance(data, list):
            raise StorageUnavailable(f"{self.path} does not contain a JSON array")
        return data

    def _write(self, records: list[dict]):
        """Atomically replace the data file with ``records``"""
        fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".invoices-", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(records, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.remove(tmp_path)
            raise

    def _save(self, records: list[dict]):
        try:
            self._write(records)
        except OSError as e:
            logger.error("Failed to save invoices", path=str(self.path), error=str(e))
            raise StorageUnavailable(str(e)) from e

    def list_all(self) -> list[dict]:
        return self._read()

    def find_by_id(self, invoice_id: str) -> Optional[dict]:
        for record in self._read():
            if record.get("id") == invoice_id:
                return record
        return None

    def count(self) -> int:
        return len(self._read())

    def _insert_new(self, document: dict) -> bool:
        with self._lock:
            records = self._read()
            if any(r.get("id") == document["id"] for r in records):
                return False
            records.insert(0, document)
            self._save(records)
        return True

    def _apply_update(self, invoice_id: str, fields: dict) -> Optional[dict]:
        with self._lock:
            records = self._read()
            for idx, record in enumerate(records):
                if record.get("id") == invoice_id:
                    records[idx] = {**record, **fields}
                    self._save(records)
                    return records[idx]
        return None

    def delete_by_id(self, invoice_id: str) -> bool:
        with self._lock:
            records = self._read()
            remaining = [r for r in records if r.get("id") != invoice_id]
            if len(remaining) == len(records):
                return False
            self._save(remaining)
        return True

    def describe(self) -> dict:
        return {
            "backend": self.backend_name,
            "dataDir": str(self.path.parent),
            "fileExists": self.path.exists(),
        }
