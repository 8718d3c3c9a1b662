import uuid
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from classgrid.schemas.timegrid import TimeSlot, normalize_day, normalize_time_slot, parse_time_slot


class ApprovalStatus(str, Enum):
    approved = "approved"
    pending = "pending"


class AssignmentStatus(str, Enum):
    approved = "approved"
    pending = "pending"
    conflict = "conflict"


class Assignment(BaseModel):
    """One scheduled class occurrence.

    ``approval`` is set by administrators; ``status``, ``conflict_reason``
    and ``conflicts_with`` are derived by the conflict engine and any values
    supplied on input are overwritten.
    """

    id: str = Field(default_factory=lambda: str(uuid.uuid4()), min_length=1, max_length=36)
    subject: str = Field(min_length=1, max_length=200)
    faculty_id: str = Field(min_length=1, max_length=36)
    room_id: str = Field(min_length=1, max_length=36)
    batch: str = Field(min_length=1, max_length=50)
    day: str
    time_slot: str
    approval: ApprovalStatus = ApprovalStatus.pending
    status: AssignmentStatus | None = None
    conflict_reason: str | None = None
    conflicts_with: list[str] = Field(default_factory=list)

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str) -> str:
        return normalize_day(value)

    @field_validator("time_slot")
    @classmethod
    def validate_time_slot(cls, value: str) -> str:
        return normalize_time_slot(value)

    @field_validator("batch", "subject")
    @classmethod
    def strip_text(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("Value cannot be blank")
        return stripped

    @property
    def slot(self) -> TimeSlot:
        return parse_time_slot(self.time_slot)

    @property
    def duration_hours(self) -> float:
        return self.slot.duration_hours
