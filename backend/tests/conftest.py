import pytest
from fastapi.testclient import TestClient #gives you a fake http client that can call your FastAPI routes without running a real server.

from classgrid.api.deps import get_optimizer, get_store
from classgrid.main import app
from classgrid.models.faculty import Faculty
from classgrid.models.room import Room, RoomType
from classgrid.services.store import TimetableStore


@pytest.fixture
def rooms():
    return [
        Room(id="LH-101", name="LH-101", capacity=150, type=RoomType.lecture_hall, equipment=["Projector"]),
        Room(id="LAB-CS-01", name="LAB-CS-01", capacity=40, type=RoomType.laboratory),
        Room(id="SR-205", name="SR-205", capacity=25, type=RoomType.seminar_room, is_available=False),
    ]


@pytest.fixture
def faculty():
    return [
        Faculty(id="smith", name="Dr. Smith", department="Computer Science", max_weekly_load=20,
                subjects=["Data Structures", "Algorithms"], unavailable_slots=["Friday 16:00-17:00"]),
        Faculty(id="johnson", name="Prof. Johnson", department="Computer Science", max_weekly_load=18,
                subjects=["Database Systems"]),
        Faculty(id="brown", name="Dr. Brown", department="Information Technology", max_weekly_load=22,
                subjects=["Web Development"]),
    ]


@pytest.fixture
def store(rooms, faculty):
    store = TimetableStore() #fresh store per test so state never leaks between tests
    for room in rooms:
        store.create_room(room)
    for member in faculty:
        store.create_faculty(member)
    return store


@pytest.fixture() #test client
def client(store):
    app.dependency_overrides[get_store] = lambda: store

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def override_optimizer():
    def _override(optimizer):
        app.dependency_overrides[get_optimizer] = lambda: optimizer
    return _override
