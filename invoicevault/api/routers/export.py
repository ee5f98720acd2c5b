from fastapi import APIRouter, Depends, Query
from fastapi.responses import Response
from loguru import logger
from ..deps import get_store
from ...core.config import settings
from ...services.export import generate
from ...services.storage import RecordStoreBase

router = APIRouter(prefix="/api", tags=["export"])


@router.get("/export")
def export_invoices(
    fmt: str | None = Query(default=None, alias="format"),
    store: RecordStoreBase = Depends(get_store),
):
    """
    Download every invoice as a file.

    ``?format=csv`` gives one row per invoice; ``?format=xlsx`` gives the
    ledger workbook with one row per line item. Without the parameter the
    EXPORT_FORMAT setting decides.
    """
    records = store.list_all()
    export = generate(records, fmt or settings.export_format)
    logger.info("Exported invoices", filename=export.filename, invoices=len(records), size=len(export.content))
    return Response(
        content=export.content,
        media_type=export.media_type,
        headers={"Content-Disposition": f'attachment; filename="{export.filename}"'},
    )
