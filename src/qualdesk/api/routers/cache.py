"""Cache maintenance endpoints."""

from fastapi import APIRouter, Depends

from qualdesk.api.deps import get_cache_store
from qualdesk.api.schemas import (
    CacheInvalidateRequest,
    CacheInvalidateResponse,
    CacheStatusResponse,
)
from qualdesk.cache import CacheStore

router = APIRouter(prefix="/cache", tags=["cache"])


@router.get("", response_model=CacheStatusResponse)
async def cache_status(store: CacheStore = Depends(get_cache_store)) -> CacheStatusResponse:
    keys = store.keys()
    return CacheStatusResponse(keys=keys, count=len(keys))


@router.post("/invalidate", response_model=CacheInvalidateResponse)
async def invalidate(
    data: CacheInvalidateRequest,
    store: CacheStore = Depends(get_cache_store),
) -> CacheInvalidateResponse:
    """Drop one key; readers of it fetch again on their next read."""
    removed = store.invalidate(data.key)
    return CacheInvalidateResponse(key=data.key, removed=removed)


@router.post("/clear", response_model=CacheStatusResponse)
async def clear(store: CacheStore = Depends(get_cache_store)) -> CacheStatusResponse:
    store.clear_all()
    return CacheStatusResponse(keys=[], count=0)
