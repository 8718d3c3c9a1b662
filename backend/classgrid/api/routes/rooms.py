from fastapi import APIRouter, Depends, Query, status

from classgrid.api.deps import get_store
from classgrid.models.room import Room
from classgrid.schemas.room import RoomUpdate
from classgrid.services.store import TimetableStore

router = APIRouter()


@router.get("/", response_model=list[Room])
def list_rooms(
    search: str | None = Query(default=None),
    store: TimetableStore = Depends(get_store),
) -> list[Room]:
    return store.list_rooms(search=search)


@router.post("/", response_model=Room, status_code=status.HTTP_201_CREATED)
def create_room(payload: Room, store: TimetableStore = Depends(get_store)) -> Room:
    return store.create_room(payload)


@router.get("/{room_id}", response_model=Room)
def get_room(room_id: str, store: TimetableStore = Depends(get_store)) -> Room:
    return store.get_room(room_id)


@router.put("/{room_id}", response_model=Room)
def update_room(room_id: str, payload: RoomUpdate, store: TimetableStore = Depends(get_store)) -> Room:
    return store.update_room(room_id, payload)


@router.delete("/{room_id}")
def delete_room(room_id: str, store: TimetableStore = Depends(get_store)) -> dict:
    removed = store.delete_room(room_id)
    return {"success": True, "removed_assignments": removed}
