from fastapi import APIRouter, Depends, Query, status

from classgrid.api.deps import get_store
from classgrid.core.exceptions import ResourceNotFoundError
from classgrid.models.assignment import Assignment, AssignmentStatus
from classgrid.schemas.timetable import AssignmentUpdate, TimetableGrid, TimetableStats
from classgrid.services.store import TimetableStore
from classgrid.services.timetable_view import filter_assignments, timetable_grid, timetable_stats

router = APIRouter()


@router.get("/", response_model=list[Assignment])
def list_timetable(
    batch: str | None = Query(default=None),
    faculty_id: str | None = Query(default=None),
    room_id: str | None = Query(default=None),
    day: str | None = Query(default=None),
    status_filter: AssignmentStatus | None = Query(default=None, alias="status"),
    store: TimetableStore = Depends(get_store),
) -> list[Assignment]:
    return filter_assignments(
        store.annotated_assignments(),
        batch=batch,
        faculty_id=faculty_id,
        room_id=room_id,
        day=day.strip().capitalize() if day else None,
        status=status_filter,
    )


@router.get("/stats", response_model=TimetableStats)
def get_stats(store: TimetableStore = Depends(get_store)) -> TimetableStats:
    return timetable_stats(store.annotated_assignments())


@router.get("/grid", response_model=TimetableGrid)
def get_grid(store: TimetableStore = Depends(get_store)) -> TimetableGrid:
    return timetable_grid(store.annotated_assignments(), store.settings.weekdays, store.settings.time_slots)


@router.post("/assignments", response_model=Assignment, status_code=status.HTTP_201_CREATED)
def create_assignment(payload: Assignment, store: TimetableStore = Depends(get_store)) -> Assignment:
    created = store.create_assignment(payload)
    return _annotated(store, created.id)


@router.get("/assignments/{assignment_id}", response_model=Assignment)
def get_assignment(assignment_id: str, store: TimetableStore = Depends(get_store)) -> Assignment:
    store.get_assignment(assignment_id)
    return _annotated(store, assignment_id)


@router.put("/assignments/{assignment_id}", response_model=Assignment)
def update_assignment(
    assignment_id: str,
    payload: AssignmentUpdate,
    store: TimetableStore = Depends(get_store),
) -> Assignment:
    store.update_assignment(assignment_id, payload)
    return _annotated(store, assignment_id)


@router.delete("/assignments/{assignment_id}")
def delete_assignment(assignment_id: str, store: TimetableStore = Depends(get_store)) -> dict:
    store.delete_assignment(assignment_id)
    return {"success": True}


def _annotated(store: TimetableStore, assignment_id: str) -> Assignment:
    annotated = next((item for item in store.annotated_assignments() if item.id == assignment_id), None)
    if annotated is None:
        raise ResourceNotFoundError("Assignment", assignment_id)
    return annotated
