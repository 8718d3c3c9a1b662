from pydantic import BaseModel, Field

from classgrid.models.room import RoomType


class RoomUpdate(BaseModel):
    name: str | None = Field(default=None, min_length=1, max_length=100)
    capacity: int | None = Field(default=None, ge=1, le=1000)
    type: RoomType | None = None
    equipment: list[str] | None = Field(default=None, max_length=50)
    is_available: bool | None = None
