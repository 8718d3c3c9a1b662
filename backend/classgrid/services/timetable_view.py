from __future__ import annotations

from collections.abc import Iterable

from classgrid.models.assignment import Assignment, AssignmentStatus
from classgrid.schemas.timegrid import parse_time_slot
from classgrid.schemas.timetable import GridRow, TimetableGrid, TimetableStats


def filter_assignments(
    assignments: Iterable[Assignment],
    *,
    batch: str | None = None,
    faculty_id: str | None = None,
    room_id: str | None = None,
    day: str | None = None,
    status: AssignmentStatus | None = None,
) -> list[Assignment]:
    selected: list[Assignment] = []
    for item in assignments:
        if batch is not None and item.batch != batch:
            continue
        if faculty_id is not None and item.faculty_id != faculty_id:
            continue
        if room_id is not None and item.room_id != room_id:
            continue
        if day is not None and item.day != day:
            continue
        if status is not None and item.status != status:
            continue
        selected.append(item)
    return selected


def timetable_stats(assignments: Iterable[Assignment]) -> TimetableStats:
    """Counts by derived status; expects annotated assignments."""
    items = list(assignments)
    return TimetableStats(
        total=len(items),
        approved=sum(1 for item in items if item.status == AssignmentStatus.approved),
        pending=sum(1 for item in items if item.status == AssignmentStatus.pending),
        conflicts=sum(1 for item in items if item.status == AssignmentStatus.conflict),
    )


def timetable_grid(assignments: Iterable[Assignment], days: list[str], slots: list[str]) -> TimetableGrid:
    """Lay assignments out on the day x slot grid.

    An assignment is placed in every grid slot its own slot overlaps, so a
    two-hour lab shows up in both hourly rows. Assignments outside the grid
    are listed in ``unplaced``.
    """
    grid_slots = [parse_time_slot(label) for label in slots]
    rows = [GridRow(time_slot=slot.label, cells={day: [] for day in days}) for slot in grid_slots]
    unplaced: list[str] = []
    for item in assignments:
        placed = False
        if item.day in days:
            for row, slot in zip(rows, grid_slots):
                if slot.overlaps(item.slot):
                    row.cells[item.day].append(item.id)
                    placed = True
        if not placed:
            unplaced.append(item.id)
    return TimetableGrid(days=list(days), rows=rows, unplaced=unplaced)
