from fastapi import APIRouter, Body, Depends
from loguru import logger
from ..deps import get_store
from ...models.invoice import InvoicePatch, InvoiceRecord
from ...services.errors import ValidationError
from ...services.storage import RecordStoreBase

router = APIRouter(prefix="/api/invoices", tags=["invoices"])


@router.get("")
def list_invoices(store: RecordStoreBase = Depends(get_store)):
    """All invoices, newest upload first"""
    return store.list_all()


@router.post("")
def save_invoice(
    record: InvoiceRecord | None = Body(None),
    store: RecordStoreBase = Depends(get_store),
):
    """
    Save an invoice extracted by the browser.

    The client generates the id, so re-posting the same invoice (e.g. a
    retry after a dropped response) is answered with ``exists: true`` and
    changes nothing.
    """
    if record is None:
        raise ValidationError("Missing invoice id")
    inserted = store.insert_if_absent(record)
    if not inserted:
        logger.info("Invoice already saved", invoice_id=record.id)
        return {"ok": True, "exists": True}

    logger.info(
        "Saved invoice",
        invoice_id=record.id,
        invoice_number=record.invoice_number,
        client=record.client_name,
    )
    return {"ok": True}


@router.put("/{invoice_id}")
def update_invoice(invoice_id: str, patch: InvoicePatch, store: RecordStoreBase = Depends(get_store)):
    """Replace the given fields on an invoice and return the merged record"""
    updated = store.update_by_id(invoice_id, patch)
    logger.info("Updated invoice", invoice_id=invoice_id, fields=sorted(patch.to_update()))
    return updated


@router.delete("/{invoice_id}")
def delete_invoice(invoice_id: str, store: RecordStoreBase = Depends(get_store)):
    """Delete an invoice; unknown ids succeed too"""
    if store.delete_by_id(invoice_id):
        logger.info("Deleted invoice", invoice_id=invoice_id)
    return {"ok": True}
