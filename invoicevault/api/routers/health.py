from fastapi import APIRouter, Depends
from ..deps import get_store
from ...services.storage import RecordStoreBase
from ...services.storage.record_store_base import utc_now_iso

router = APIRouter(prefix="/api", tags=["health"])


@router.get("/health")
def health(store: RecordStoreBase = Depends(get_store)):
    """Liveness plus a record count; a storage failure surfaces as a 500"""
    return {
        "status": "ok",
        "invoiceCount": store.count(),
        "time": utc_now_iso(),
        **store.describe(),
    }
