from pydantic import BaseModel, EmailStr, Field

from classgrid.models.faculty import Faculty, FacultyStatus


class FacultyUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    email: EmailStr | None = None
    department: str | None = Field(default=None, min_length=1, max_length=200)
    max_weekly_load: int | None = Field(default=None, ge=1, le=40)
    subjects: list[str] | None = Field(default=None, max_length=50)
    preferences: list[str] | None = Field(default=None, max_length=20)
    unavailable_slots: list[str] | None = Field(default=None, max_length=100)
    status: FacultyStatus | None = None


class FacultyOut(Faculty):
    current_load: float
    overloaded: bool
