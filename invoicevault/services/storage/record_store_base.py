"""
Abstract base class for invoice record stores.

Defines the interface that every storage backend implements, so the API can
run on either a JSON file or a MongoDB collection without knowing which.
"""

from abc import ABC, abstractmethod
from datetime import datetime, UTC
from typing import Optional
from ...models.invoice import InvoicePatch, InvoiceRecord
from ..errors import NotFoundError, ValidationError


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string (the uploadedAt format)."""
    return datetime.now(UTC).isoformat()


class RecordStoreBase(ABC):
    """
    Abstract base class for invoice persistence.

    Records are exchanged as plain dicts with camelCase keys, exactly as they
    are stored and sent to the browser. Implementations must persist each
    mutation with a single atomic write and raise ``StorageUnavailable`` when
    the backing store cannot be reached.
    """

    backend_name = "base"

    @abstractmethod
    def list_all(self) -> list[dict]:
        """
        List all records, newest upload first.

        Returns:
            List of record dictionaries
        """
        pass

    @abstractmethod
    def find_by_id(self, invoice_id: str) -> Optional[dict]:
        """
        Get a record by id.

        Args:
            invoice_id: Client-generated invoice id

        Returns:
            Record dictionary, or None if not found
        """
        pass

    @abstractmethod
    def _insert_new(self, document: dict) -> bool:
        """
        Persist ``document`` unless a record with its id exists.

        Returns:
            True if inserted, False if the id was already taken
        """
        pass

    @abstractmethod
    def _apply_update(self, invoice_id: str, fields: dict) -> Optional[dict]:
        """
        Replace ``fields`` on the record with ``invoice_id``.

        Returns:
            The merged record, or None if not found
        """
        pass

    @abstractmethod
    def delete_by_id(self, invoice_id: str) -> bool:
        """
        Delete a record. Deleting an unknown id is a no-op.

        Returns:
            True if a record was removed, False otherwise
        """
        pass

    @abstractmethod
    def count(self) -> int:
        """Number of stored records."""
        pass

    def describe(self) -> dict:
        """Backend-specific details for the health endpoint."""
        return {"backend": self.backend_name}

    def insert_if_absent(self, record: InvoiceRecord) -> bool:
        """
        Insert a new record unless its id is already stored.

        A repeated insert leaves storage untouched, which makes client
        retries idempotent. ``uploadedAt`` is set to the current time.

        Args:
            record: Full invoice record including its id

        Returns:
            True if inserted, False if a record with that id already exists

        Raises:
            ValidationError: If the record has no id
        """
        if not record.id:
            raise ValidationError("Missing invoice id")

        document = record.to_document()
        document["uploadedAt"] = utc_now_iso()
        return self._insert_new(document)

    def update_by_id(self, invoice_id: str, patch: InvoicePatch) -> dict:
        """
        Apply a partial update to an existing record.

        Fields present in the patch replace the stored values; lists are
        replaced wholesale.

        Returns:
            The merged record

        Raises:
            NotFoundError: If no record has that id
        """
        updated = self._apply_update(invoice_id, patch.to_update())
        if updated is None:
            raise NotFoundError("Not found")
        return updated
