import uuid
from enum import Enum

from pydantic import BaseModel, EmailStr, Field, field_validator

from classgrid.schemas.timegrid import normalize_day, normalize_time_slot


class FacultyStatus(str, Enum):
    active = "active"
    inactive = "inactive"


def normalize_unavailable_slot(value: str) -> str:
    """Canonicalize a ``"<Day> <H:MM-H:MM>"`` entry."""
    parts = value.strip().split(None, 1)
    if len(parts) != 2:
        raise ValueError("Unavailable slot must look like '<Day> <H:MM-H:MM>'")
    return f"{normalize_day(parts[0])} {normalize_time_slot(parts[1])}"


class Faculty(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr | None = None
    department: str = Field(min_length=1, max_length=200)
    max_weekly_load: int = Field(ge=1, le=40)
    subjects: list[str] = Field(default_factory=list, max_length=50)
    preferences: list[str] = Field(default_factory=list, max_length=20)
    unavailable_slots: list[str] = Field(default_factory=list, max_length=100)
    status: FacultyStatus = FacultyStatus.active

    @field_validator("subjects")
    @classmethod
    def normalize_subjects(cls, value: list[str]) -> list[str]:
        seen: set[str] = set()
        subjects: list[str] = []
        for item in value:
            subject = item.strip()
            if not subject or subject in seen:
                continue
            seen.add(subject)
            subjects.append(subject)
        return subjects

    @field_validator("unavailable_slots")
    @classmethod
    def normalize_unavailable_slots(cls, value: list[str]) -> list[str]:
        normalized: list[str] = []
        for item in value:
            slot = normalize_unavailable_slot(item)
            if slot not in normalized:
                normalized.append(slot)
        return normalized
