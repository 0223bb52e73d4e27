from datetime import UTC, datetime

from sqlalchemy import JSON, Column, DateTime
from sqlmodel import Field, SQLModel


class Hearing(SQLModel, table=True):
    id: int | None = Field(default=None, primary_key=True)
    # Naive local time; the column type is explicit so no UTC coercion applies
    starts_at: datetime = Field(sa_column=Column(DateTime(timezone=False), index=True, nullable=False))
    date_key: str = Field(index=True)  # YYYY-MM-DD, derived from starts_at
    time: str  # HH:MM, derived from starts_at
    location: str
    officer: str
    modality: str = Field(index=True)
    case_ref: str = Field(default="")
    location_n: str
    officer_n: str
    modality_n: str
    case_ref_n: str = Field(default="")
    keywords: list[str] = Field(default_factory=list, sa_column=Column(JSON))
    created_by: str | None = Field(default=None)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC), sa_type=DateTime(timezone=True))
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC), sa_type=DateTime(timezone=True))


class UserAccount(SQLModel, table=True):
    __tablename__ = "user_account"

    id: int | None = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)  # Normalized: lower(trim(email))
    role: str = Field(default="pm")
    updated_at: datetime = Field(default_factory=lambda: datetime.now(UTC), sa_type=DateTime(timezone=True))
