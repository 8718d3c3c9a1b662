import uuid
from enum import Enum

from pydantic import BaseModel, Field, field_validator


class RoomType(str, Enum):
    lecture_hall = "Lecture Hall"
    laboratory = "Laboratory"
    seminar_room = "Seminar Room"
    auditorium = "Auditorium"


class Room(BaseModel):
    id: str = Field(default_factory=lambda: str(uuid.uuid4()), min_length=1, max_length=36)
    name: str = Field(min_length=1, max_length=100)
    capacity: int = Field(ge=1, le=1000)
    type: RoomType
    equipment: list[str] = Field(default_factory=list, max_length=50)
    is_available: bool = True

    @field_validator("equipment")
    @classmethod
    def normalize_equipment(cls, value: list[str]) -> list[str]:
        seen: set[str] = set()
        items: list[str] = []
        for item in value:
            name = item.strip()
            if not name or name.lower() in seen:
                continue
            seen.add(name.lower())
            items.append(name)
        return items
