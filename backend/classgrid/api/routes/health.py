from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from classgrid.api.deps import get_store
from classgrid.services.store import TimetableStore

router = APIRouter()


@router.get("/health")
def health() -> dict:
    return {"status": "ok"}


@router.get("/health/live")
def health_live(store: TimetableStore = Depends(get_store)) -> dict:
    return {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "reoptimization_requested": store.reoptimization_requested,
    }
