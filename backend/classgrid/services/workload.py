from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from classgrid.models.assignment import Assignment
from classgrid.models.faculty import Faculty, FacultyStatus
from classgrid.schemas.timegrid import TimeSlot, parse_time_slot
from classgrid.schemas.workload import FacultyLoadSummary, LoadReport


def _unavailable_windows(faculty: Faculty) -> list[tuple[str, TimeSlot]]:
    windows: list[tuple[str, TimeSlot]] = []
    for entry in faculty.unavailable_slots:
        day, label = entry.split(" ", 1)
        windows.append((day, parse_time_slot(label)))
    return windows


def _build_report(faculty: Faculty, assignments: list[Assignment]) -> LoadReport:
    # Sum minutes, not float hours, so the total is exact.
    total_minutes = sum(item.slot.duration_minutes for item in assignments)
    current_load = total_minutes / 60
    windows = _unavailable_windows(faculty)
    unavailable = [
        item.id
        for item in assignments
        if any(day == item.day and slot.overlaps(item.slot) for day, slot in windows)
    ]
    return LoadReport(
        faculty_id=faculty.id,
        faculty_name=faculty.name,
        current_load=current_load,
        max_weekly_load=faculty.max_weekly_load,
        remaining_hours=faculty.max_weekly_load - current_load,
        overloaded=current_load > faculty.max_weekly_load,
        assignment_ids=[item.id for item in assignments],
        unavailable_assignment_ids=unavailable,
    )


def compute_faculty_load(faculty: Faculty, assignments: Iterable[Assignment]) -> LoadReport:
    """Weekly hours taught by ``faculty`` across ``assignments``.

    Every assignment referencing the faculty counts, whatever its status.
    Exceeding ``max_weekly_load`` sets ``overloaded``; it is a soft signal and
    never a conflict.
    """
    owned = [item for item in assignments if item.faculty_id == faculty.id]
    return _build_report(faculty, owned)


def summarize_faculty_loads(
    faculty_list: Iterable[Faculty],
    assignments: Iterable[Assignment],
    *,
    pending_requests: int = 0,
) -> FacultyLoadSummary:
    by_faculty: dict[str, list[Assignment]] = defaultdict(list)
    for item in assignments:
        by_faculty[item.faculty_id].append(item)

    faculty_list = list(faculty_list)
    reports = [_build_report(faculty, by_faculty.get(faculty.id, [])) for faculty in faculty_list]
    average = sum(report.current_load for report in reports) / len(reports) if reports else 0.0
    return FacultyLoadSummary(
        reports=reports,
        average_load=round(average, 1),
        overloaded_faculty_ids=[report.faculty_id for report in reports if report.overloaded],
        active_faculty_count=sum(1 for faculty in faculty_list if faculty.status == FacultyStatus.active),
        pending_requests=pending_requests,
    )
