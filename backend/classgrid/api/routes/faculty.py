from fastapi import APIRouter, Depends, Query, status

from classgrid.api.deps import get_store
from classgrid.models.faculty import Faculty
from classgrid.schemas.faculty import FacultyOut, FacultyUpdate
from classgrid.schemas.workload import FacultyLoadSummary, LoadReport
from classgrid.services.store import TimetableStore

router = APIRouter()


@router.get("/", response_model=list[FacultyOut])
def list_faculty(
    search: str | None = Query(default=None),
    store: TimetableStore = Depends(get_store),
) -> list[FacultyOut]:
    return [store.faculty_out(item) for item in store.list_faculty(search=search)]


@router.post("/", response_model=FacultyOut, status_code=status.HTTP_201_CREATED)
def create_faculty(payload: Faculty, store: TimetableStore = Depends(get_store)) -> FacultyOut:
    return store.faculty_out(store.create_faculty(payload))


# Declared before /{faculty_id} so the literal path wins.
@router.get("/load-summary", response_model=FacultyLoadSummary)
def load_summary(store: TimetableStore = Depends(get_store)) -> FacultyLoadSummary:
    return store.load_summary()


@router.get("/{faculty_id}", response_model=FacultyOut)
def get_faculty(faculty_id: str, store: TimetableStore = Depends(get_store)) -> FacultyOut:
    return store.faculty_out(store.get_faculty(faculty_id))


@router.get("/{faculty_id}/load", response_model=LoadReport)
def faculty_load(faculty_id: str, store: TimetableStore = Depends(get_store)) -> LoadReport:
    return store.faculty_load(faculty_id)


@router.put("/{faculty_id}", response_model=FacultyOut)
def update_faculty(
    faculty_id: str,
    payload: FacultyUpdate,
    store: TimetableStore = Depends(get_store),
) -> FacultyOut:
    return store.faculty_out(store.update_faculty(faculty_id, payload))


@router.delete("/{faculty_id}")
def delete_faculty(faculty_id: str, store: TimetableStore = Depends(get_store)) -> dict:
    removed = store.delete_faculty(faculty_id)
    return {"success": True, "removed_assignments": removed}
