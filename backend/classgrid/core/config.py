from functools import lru_cache
import json
from pathlib import Path
from typing import Annotated, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


BACKEND_ENV_FILE = Path(__file__).resolve().parents[2] / ".env"

WEEKDAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)


def _split_list(value: str | list[str]) -> list[str]:
    if isinstance(value, str):
        stripped = value.strip()
        if stripped.startswith("["):
            try:
                parsed = json.loads(stripped)
                if isinstance(parsed, list):
                    return [str(item).strip() for item in parsed if str(item).strip()]
            except json.JSONDecodeError:
                pass
        return [item.strip() for item in value.split(",") if item.strip()]
    return value


class Settings(BaseSettings):
    # Resolve to backend/.env so the app can be started from any cwd.
    model_config = SettingsConfigDict(
        env_file=str(BACKEND_ENV_FILE),
        env_file_encoding="utf-8",
        env_prefix="CLASSGRID_",
        extra="ignore",
    )

    project_name: str = "ClassGrid API"
    api_prefix: str = "/api"
    log_level: str = "INFO"

    max_request_size_bytes: int = 2_500_000

    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:5173",
        "http://127.0.0.1:5173",
        "http://localhost:8080",
        "http://127.0.0.1:8080",
    ]

    weekdays: Annotated[list[str], NoDecode] = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday"]
    time_slots: Annotated[list[str], NoDecode] = [
        "8:00-9:00",
        "9:00-10:00",
        "10:00-11:00",
        "11:00-12:00",
        "12:00-13:00",
        "13:00-14:00",
        "14:00-15:00",
        "15:00-16:00",
        "16:00-17:00",
    ]
    slot_granularity_minutes: int = 60

    orphan_policy: Literal["fail", "flag"] = "fail"
    reference_delete_policy: Literal["reject", "cascade"] = "reject"

    optimizer_url: str | None = None
    optimizer_timeout_seconds: float = 30.0

    @field_validator("cors_origins", "weekdays", "time_slots", mode="before")
    @classmethod
    def split_lists(cls, value: str | list[str]) -> list[str]:
        return _split_list(value)

    @field_validator("weekdays")
    @classmethod
    def validate_weekdays(cls, value: list[str]) -> list[str]:
        invalid = [day for day in value if day not in WEEKDAY_NAMES]
        if invalid:
            raise ValueError(f"Invalid weekday(s): {', '.join(invalid)}")
        if len(set(value)) != len(value):
            raise ValueError("Duplicate weekday entries")
        return value

    @field_validator("time_slots")
    @classmethod
    def validate_time_slots(cls, value: list[str]) -> list[str]:
        # Imported here; timegrid depends on WEEKDAY_NAMES from this module.
        from classgrid.schemas.timegrid import normalize_time_slot

        labels = [normalize_time_slot(item) for item in value]
        if len(set(labels)) != len(labels):
            raise ValueError("Duplicate time slot entries")
        return labels

    @field_validator("slot_granularity_minutes")
    @classmethod
    def validate_granularity(cls, value: int) -> int:
        if value < 5 or 1440 % value != 0:
            raise ValueError("slot_granularity_minutes must divide a day and be at least 5")
        return value

    @field_validator("optimizer_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("optimizer_timeout_seconds must be > 0")
        return value


@lru_cache
def get_settings() -> Settings:
    return Settings()
