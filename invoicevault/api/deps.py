from functools import lru_cache
from pydantic import BaseModel
from ..core.config import settings
from ..services.storage import RecordStoreBase, build_record_store


@lru_cache(maxsize=1)
def _default_store() -> RecordStoreBase:
    return build_record_store(settings)


def get_store() -> RecordStoreBase:
    """Process-wide record store (override in tests via dependency_overrides)"""
    return _default_store()


class LoginRequest(BaseModel):
    username: str = ""
    password: str = ""
