"""
Invoice record models.

Records travel over the wire and sit in storage with camelCase keys (the
browser client's naming); Python code uses snake_case attributes. Fields the
client sends that are not declared here are kept as-is.
"""

from typing import Any
from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

INVOICE_NUMBER_MAX_LENGTH = 100
CLIENT_NAME_MAX_LENGTH = 500
DEFAULT_CATEGORY = "General"

# Values the client may send either as numbers or as text
Number = int | float | str | None


def _truncate(value: Any, limit: int) -> Any:
    if isinstance(value, str) and len(value) > limit:
        return value[:limit]
    return value


def _to_document(value: Any) -> Any:
    if isinstance(value, DocumentModel):
        return value.to_document()
    if isinstance(value, list):
        return [_to_document(v) for v in value]
    return value


class DocumentModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_document(self) -> dict:
        """
        Dump to a storage/wire dict with camelCase keys.

        Only fields that were actually provided are included, plus any extra
        fields the client sent, so a stored record round-trips unchanged.
        """
        fields = type(self).model_fields
        data = {}
        for name in self.model_fields_set:
            if name not in fields:
                continue
            data[fields[name].alias or name] = _to_document(getattr(self, name))
        data.update(self.model_extra or {})
        return data


class LineItem(DocumentModel):
    description: Number = None
    quantity: Number = None
    unit_price: Number = None
    our_price: Number = None
    amount: Number = None


class InvoiceFields(DocumentModel):
    """Fields shared by a full record and a patch, all optional."""

    file_name: Number = None
    raw_text_preview: Number = None
    invoice_number: Number = None
    client_name: Number = None
    date: Number = None
    year: int | str | None = None
    month: int | str | None = None
    month_name: Number = None
    quarter: str | int | None = None
    subtotal: Number = None
    tax: Number = None
    total: Number = None
    currency: Number = None
    payment_method: Number = None
    hst_number: Number = None
    line_items: list[LineItem] | None = None

    @field_validator("invoice_number")
    @classmethod
    def cap_invoice_number(cls, v):
        return _truncate(v, INVOICE_NUMBER_MAX_LENGTH)

    @field_validator("client_name")
    @classmethod
    def cap_client_name(cls, v):
        return _truncate(v, CLIENT_NAME_MAX_LENGTH)


class InvoiceRecord(InvoiceFields):
    """A full invoice record as posted by the client."""

    id: str | None = None
    category: str = DEFAULT_CATEGORY
    uploaded_at: str | None = None

    def to_document(self) -> dict:
        data = super().to_document()
        data.setdefault("category", self.category)
        return data


class InvoicePatch(InvoiceFields):
    """
    Partial update for an existing record.

    Every field is optional and only the fields present in the request are
    applied. ``lineItems`` replaces the stored list wholesale. ``id`` and
    ``uploadedAt`` can never be changed and are dropped from the patch.
    """

    category: str | None = None

    def to_update(self) -> dict:
        data = self.to_document()
        for key in ("id", "_id", "uploadedAt", "uploaded_at"):
            data.pop(key, None)
        return data
