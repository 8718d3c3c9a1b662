from fastapi import APIRouter, Depends

from classgrid.api.deps import get_store
from classgrid.schemas.conflict import ConflictCheckRequest, ConflictReport
from classgrid.services.conflict_service import detect_conflicts
from classgrid.services.store import TimetableStore

router = APIRouter()


@router.get("/", response_model=ConflictReport)
def current_conflicts(store: TimetableStore = Depends(get_store)) -> ConflictReport:
    return store.conflict_report()


@router.post("/detect", response_model=ConflictReport)
def detect(payload: ConflictCheckRequest, store: TimetableStore = Depends(get_store)) -> ConflictReport:
    """Check a posted assignment set without touching the stored schedule."""
    return detect_conflicts(
        payload.assignments,
        faculty_ids=payload.faculty_ids,
        room_ids=payload.room_ids,
        granularity_minutes=store.settings.slot_granularity_minutes,
        orphan_policy=payload.orphan_policy,
    )
