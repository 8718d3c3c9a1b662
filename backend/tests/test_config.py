import pytest
from pydantic import ValidationError

from classgrid.core.config import Settings


def test_defaults_match_reference_timetable():
    settings = Settings()
    assert settings.weekdays == ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
    assert settings.time_slots[0] == "8:00-9:00"
    assert len(settings.time_slots) == 9
    assert settings.slot_granularity_minutes == 60
    assert settings.reference_delete_policy == "reject"


def test_list_settings_accept_comma_and_json(monkeypatch):
    monkeypatch.setenv("CLASSGRID_WEEKDAYS", "Monday, Wednesday,Friday")
    monkeypatch.setenv("CLASSGRID_CORS_ORIGINS", '["http://a.example", "http://b.example"]')
    settings = Settings()
    assert settings.weekdays == ["Monday", "Wednesday", "Friday"]
    assert settings.cors_origins == ["http://a.example", "http://b.example"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"weekdays": ["Moonday"]},
        {"weekdays": ["Monday", "Monday"]},
        {"time_slots": ["9:00-8:00"]},
        {"time_slots": ["9:00-10:00", "09:00-10:00"]},
        {"slot_granularity_minutes": 7},
        {"optimizer_timeout_seconds": 0},
        {"orphan_policy": "ignore"},
    ],
)
def test_invalid_settings(overrides):
    with pytest.raises(ValidationError):
        Settings(**overrides)


def test_time_slot_labels_are_normalized():
    settings = Settings(time_slots=["08:00-09:00", " 9:00 - 10:00 "])
    assert settings.time_slots == ["8:00-9:00", "9:00-10:00"]
