from pydantic import BaseModel


class LoadReport(BaseModel):
    faculty_id: str
    faculty_name: str
    current_load: float
    max_weekly_load: int
    remaining_hours: float
    overloaded: bool
    assignment_ids: list[str]
    unavailable_assignment_ids: list[str]


class FacultyLoadSummary(BaseModel):
    reports: list[LoadReport]
    average_load: float
    overloaded_faculty_ids: list[str]
    active_faculty_count: int
    pending_requests: int = 0
