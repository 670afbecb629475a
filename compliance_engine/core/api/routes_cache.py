"""Routes for the evaluation cache."""

from fastapi import APIRouter, HTTPException

from compliance_engine.core.config import get_settings
from compliance_engine.rules import get_evaluation_cache
from .models import CacheStatsResponse

router = APIRouter(prefix="/cache", tags=["Cache"])


@router.get("/stats", response_model=CacheStatsResponse)
async def cache_stats() -> CacheStatsResponse:
    """Get evaluation cache statistics."""
    return CacheStatsResponse(
        enabled=get_settings().evaluation_cache_enabled,
        stats=get_evaluation_cache().stats(),
    )


@router.post("/clear")
async def clear_cache() -> dict:
    """Drop every cached evaluation."""
    cleared = get_evaluation_cache().clear()
    return {"status": "cleared", "entries_cleared": cleared}


@router.delete("/{key}")
async def invalidate_key(key: str) -> dict:
    """Drop the cached evaluation for one rule id."""
    if not get_evaluation_cache().invalidate(key):
        raise HTTPException(status_code=404, detail=f"No cached evaluation for: {key}")
    return {"status": "invalidated", "key": key}
