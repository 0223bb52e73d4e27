"""Hearing record construction and partial update merge.

Every write path goes through here so that the normalized ``*_n`` fields,
``date_key``/``time`` and ``keywords`` always agree with the display fields.
"""
import logging
from datetime import UTC, datetime, timedelta

from models import Hearing
from normalizer import generate_keywords, normalize_text
from schemas import HearingCreate, HearingUpdate
from store import HearingStore

logger = logging.getLogger(__name__)

TEXT_FIELDS = ("location", "officer", "modality", "case_ref")
SCHEDULE_FIELDS = ("starts_at", "date_key", "time")
MUTABLE_FIELDS = (
    SCHEDULE_FIELDS
    + TEXT_FIELDS
    + tuple(f"{name}_n" for name in TEXT_FIELDS)
    + ("keywords", "updated_at")
)


def _to_int(value: str | None, default: int) -> int:
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number or default


def combine_date_time(date_str: str | None, time_str: str | None) -> datetime:
    """Combine a YYYY-MM-DD date and an HH:MM time into a local datetime.

    This is a fallback, not a validator: missing or non-numeric parts become
    the first valid unit (year/month/day 1, hour/minute 0) and out-of-range
    values roll over into the next unit instead of raising.
    """
    date_parts = (date_str or "").split("-")
    time_parts = (time_str or "").split(":")

    def part(parts, index):
        return parts[index] if index < len(parts) else None

    year = _to_int(part(date_parts, 0), 1)
    month = _to_int(part(date_parts, 1), 1)
    day = _to_int(part(date_parts, 2), 1)
    hour = _to_int(part(time_parts, 0), 0)
    minute = _to_int(part(time_parts, 1), 0)

    year += (month - 1) // 12
    month = (month - 1) % 12 + 1
    start_of_month = datetime(year, month, 1)
    return start_of_month + timedelta(days=day - 1, hours=hour, minutes=minute)


def schedule_fields(starts_at: datetime) -> dict:
    """date_key and time derived from starts_at."""
    return {
        "starts_at": starts_at,
        "date_key": starts_at.date().isoformat(),
        "time": f"{starts_at.hour:02d}:{starts_at.minute:02d}",
    }


def text_fields(name: str, value: str | None) -> dict:
    value = value or ""
    return {name: value.strip(), f"{name}_n": normalize_text(value)}


def keywords_for(fields: dict) -> list[str]:
    return generate_keywords(
        location=fields.get("location"),
        officer=fields.get("officer"),
        modality=fields.get("modality"),
        case_ref=fields.get("case_ref"),
        date_key=fields.get("date_key"),
        time=fields.get("time"),
    )


def hearing_fields(
    starts_at: datetime,
    location: str,
    officer: str,
    modality: str,
    case_ref: str | None = "",
    created_by: str | None = None,
    now: datetime | None = None,
) -> dict:
    """Full field set of a new hearing, ready for HearingStore.create."""
    now = now or datetime.now(UTC)
    fields = schedule_fields(starts_at)
    for name, value in zip(TEXT_FIELDS, (location, officer, modality, case_ref)):
        fields.update(text_fields(name, value))
    fields["keywords"] = keywords_for(fields)
    fields["created_by"] = created_by
    fields["created_at"] = now
    fields["updated_at"] = now
    return fields


def build_hearing(form: HearingCreate, created_by: str | None, now: datetime | None = None) -> dict:
    """Convert a validated single-record form into hearing fields."""
    starts_at = combine_date_time(form.date, form.time)
    return hearing_fields(
        starts_at,
        form.location,
        form.officer,
        form.modality,
        form.case_ref,
        created_by=created_by,
        now=now,
    )


def merge_update(current: Hearing, changes: HearingUpdate, now: datetime | None = None) -> dict:
    """Merge a partial update into the current hearing.

    Returns every mutable field of the merged record. Identity and creation
    provenance (id, created_by, created_at) are never part of the result.
    Keywords are always rebuilt from the merged fields.
    """
    supplied = changes.model_dump(exclude_unset=True, exclude_none=True)
    merged = {name: getattr(current, name) for name in MUTABLE_FIELDS}

    for name in TEXT_FIELDS:
        if name in supplied:
            merged.update(text_fields(name, supplied[name]))

    # Date and time can change independently; the other half comes from the record
    date_str = supplied.get("date", current.date_key)
    time_str = supplied.get("time", current.time)
    merged.update(schedule_fields(combine_date_time(date_str, time_str)))

    merged["keywords"] = keywords_for(merged)
    merged["updated_at"] = now or datetime.now(UTC)
    return merged


def create_hearing(store: HearingStore, form: HearingCreate, created_by: str | None) -> Hearing:
    hearing_id = store.create(build_hearing(form, created_by))
    logger.info(f"Created hearing {hearing_id} by {created_by}")
    return store.get(hearing_id)


def update_hearing(store: HearingStore, hearing_id: int, changes: HearingUpdate) -> Hearing | None:
    """Read, merge and write back. Returns None when the hearing does not exist.

    There is no revision check: concurrent updates are last-write-wins.
    """
    current = store.get(hearing_id)
    if current is None:
        logger.info(f"Update skipped, hearing {hearing_id} not found")
        return None

    store.update(hearing_id, merge_update(current, changes))
    logger.info(f"Updated hearing {hearing_id} fields={sorted(changes.model_fields_set)}")
    return store.get(hearing_id)
