from typing import Literal

from pydantic import BaseModel

from classgrid.models.assignment import Assignment, AssignmentStatus

ConflictType = Literal[
    "room_conflict",
    "faculty_conflict",
    "batch_conflict",
    "orphaned_reference",
]


class ConflictDetail(BaseModel):
    id: str
    conflict_type: ConflictType
    description: str
    severity: Literal["hard", "soft"]
    day: str | None = None
    time_slot: str | None = None
    affected_assignments: list[str]


class ResolutionAction(BaseModel):
    action_type: Literal["move_slot", "change_room", "change_faculty"]
    description: str
    target_assignment_id: str


class ConflictReport(BaseModel):
    assignments: list[Assignment]
    conflicts: list[ConflictDetail]
    suggested_resolutions: list[ResolutionAction]

    @property
    def conflicting_ids(self) -> list[str]:
        return [item.id for item in self.assignments if item.status == AssignmentStatus.conflict]


class ConflictCheckRequest(BaseModel):
    assignments: list[Assignment]
    faculty_ids: list[str] | None = None
    room_ids: list[str] | None = None
    orphan_policy: Literal["fail", "flag"] | None = None
