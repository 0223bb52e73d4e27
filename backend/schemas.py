import re
from datetime import datetime

from pydantic import BaseModel, field_validator
from sqlmodel import SQLModel

TIME_PATTERN = re.compile(r"^([0-1]?[0-9]|2[0-3]):[0-5][0-9]$")


def _validate_date(v: str) -> str:
    v = v.strip()
    try:
        datetime.strptime(v, "%Y-%m-%d")
    except ValueError as e:
        raise ValueError("Date must be in YYYY-MM-DD format") from e
    return v


def _validate_time(v: str) -> str:
    v = v.strip()
    if not TIME_PATTERN.match(v):
        raise ValueError("Invalid time (HH:MM)")
    return v


def _validate_min_length(v: str, size: int, label: str) -> str:
    if len(v.strip()) < size:
        raise ValueError(f"{label} must have at least {size} characters")
    return v


class HearingCreate(BaseModel):
    date: str  # YYYY-MM-DD format
    time: str  # HH:MM format
    location: str
    officer: str
    modality: str
    case_ref: str = ""

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return _validate_date(v)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return _validate_time(v)

    @field_validator("location")
    @classmethod
    def validate_location(cls, v):
        return _validate_min_length(v, 2, "Location")

    @field_validator("officer")
    @classmethod
    def validate_officer(cls, v):
        return _validate_min_length(v, 2, "Officer")

    @field_validator("modality")
    @classmethod
    def validate_modality(cls, v):
        return _validate_min_length(v, 1, "Modality")

    @field_validator("case_ref", mode="before")
    @classmethod
    def default_case_ref(cls, v):
        return v or ""


class HearingUpdate(BaseModel):
    """Partial update; a field left out keeps its current value."""

    date: str | None = None
    time: str | None = None
    location: str | None = None
    officer: str | None = None
    modality: str | None = None
    case_ref: str | None = None

    @field_validator("date")
    @classmethod
    def validate_date(cls, v):
        return None if v is None else _validate_date(v)

    @field_validator("time")
    @classmethod
    def validate_time(cls, v):
        return None if v is None else _validate_time(v)

    @field_validator("location")
    @classmethod
    def validate_location(cls, v):
        return None if v is None else _validate_min_length(v, 2, "Location")

    @field_validator("officer")
    @classmethod
    def validate_officer(cls, v):
        return None if v is None else _validate_min_length(v, 2, "Officer")

    @field_validator("modality")
    @classmethod
    def validate_modality(cls, v):
        return None if v is None else _validate_min_length(v, 1, "Modality")


class HearingResponse(SQLModel):
    id: int
    starts_at: datetime
    date_key: str
    time: str
    location: str
    officer: str
    modality: str
    case_ref: str = ""
    keywords: list[str] = []
    created_by: str | None = None
    created_at: datetime
    updated_at: datetime


class DayGroup(BaseModel):
    date_key: str
    hearings: list[HearingResponse]


class HearingListResponse(BaseModel):
    scope: str
    total: int
    days: list[DayGroup]
    modalities: list[str]
    next_cursor: str | None = None
    has_more: bool = False


class ImportResponse(BaseModel):
    ok: bool
    created: int
    failed: int
    message: str
    errors: list[str] = []


class CurrentUserResponse(BaseModel):
    email: str
    role: str

