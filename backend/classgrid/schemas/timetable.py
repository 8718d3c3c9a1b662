from pydantic import BaseModel, Field

from classgrid.models.assignment import ApprovalStatus, Assignment
from classgrid.models.faculty import Faculty
from classgrid.models.room import Room
from classgrid.schemas.conflict import ConflictReport


class AssignmentUpdate(BaseModel):
    subject: str | None = Field(default=None, min_length=1, max_length=200)
    faculty_id: str | None = Field(default=None, min_length=1, max_length=36)
    room_id: str | None = Field(default=None, min_length=1, max_length=36)
    batch: str | None = Field(default=None, min_length=1, max_length=50)
    day: str | None = None
    time_slot: str | None = None
    approval: ApprovalStatus | None = None


class TimetableStats(BaseModel):
    total: int
    approved: int
    pending: int
    conflicts: int


class GridRow(BaseModel):
    time_slot: str
    cells: dict[str, list[str]]


class TimetableGrid(BaseModel):
    days: list[str]
    rows: list[GridRow]
    unplaced: list[str] = Field(default_factory=list)


class TimetableSnapshot(BaseModel):
    weekdays: list[str]
    time_slots: list[str]
    rooms: list[Room]
    faculty: list[Faculty]
    assignments: list[Assignment]


class GenerateRequest(BaseModel):
    commit: bool = False


class GenerateResponse(BaseModel):
    status: str
    message: str
    elapsed_seconds: float
    committed: bool
    report: ConflictReport
