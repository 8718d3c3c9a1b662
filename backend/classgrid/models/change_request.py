import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator, model_validator

from classgrid.core.exceptions import InvalidTransitionError
from classgrid.schemas.timegrid import normalize_day, normalize_time_slot


class ChangeRequestKind(str, Enum):
    swap = "swap"
    cancel = "cancel"


class ChangeRequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"


class ChangeTarget(BaseModel):
    day: str | None = None
    time_slot: str | None = None
    room_id: str | None = Field(default=None, min_length=1, max_length=36)

    @field_validator("day")
    @classmethod
    def validate_day(cls, value: str | None) -> str | None:
        return None if value is None else normalize_day(value)

    @field_validator("time_slot")
    @classmethod
    def validate_time_slot(cls, value: str | None) -> str | None:
        return None if value is None else normalize_time_slot(value)

    @property
    def is_empty(self) -> bool:
        return self.day is None and self.time_slot is None and self.room_id is None


class ChangeRequest(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), min_length=1, max_length=36)
    faculty_id: str = Field(min_length=1, max_length=36)
    assignment_id: str = Field(min_length=1, max_length=36)
    kind: ChangeRequestKind
    target: ChangeTarget | None = None
    reason: str = Field(min_length=10, max_length=500)
    status: ChangeRequestStatus = ChangeRequestStatus.pending
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    reviewed_at: datetime | None = None
    review_note: str | None = Field(default=None, max_length=1000)

    @model_validator(mode="after")
    def validate_target(self) -> "ChangeRequest":
        if self.kind == ChangeRequestKind.swap:
            if self.target is None or self.target.is_empty:
                raise ValueError("A swap request needs a target day, time slot or room")
        elif self.target is not None and not self.target.is_empty:
            raise ValueError("A cancel request cannot carry a target")
        return self

    @property
    def is_terminal(self) -> bool:
        return self.status != ChangeRequestStatus.pending

    def _transition(self, target: ChangeRequestStatus, note: str | None) -> "ChangeRequest":
        if self.is_terminal:
            raise InvalidTransitionError(self.id, self.status.value, target.value)
        return self.model_copy(
            update={
                "status": target,
                "reviewed_at": datetime.now(timezone.utc),
                "review_note": note,
            }
        )

    def approve(self, note: str | None = None) -> "ChangeRequest":
        return self._transition(ChangeRequestStatus.approved, note)

    def reject(self, note: str | None = None) -> "ChangeRequest":
        return self._transition(ChangeRequestStatus.rejected, note)
