"""List scopes and the text/modality filters applied on top of them."""
from collections.abc import Iterable
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from models import Hearing
from normalizer import normalize_text

SCOPES = ("all", "today", "week", "month")


@dataclass
class ScopeRange:
    """Half-open [start, end) range on starts_at."""

    name: str
    start: datetime
    end: datetime


def day_range(day: date) -> tuple[datetime, datetime]:
    start = datetime.combine(day, datetime.min.time())
    return start, start + timedelta(days=1)


def week_range(day: date) -> tuple[datetime, datetime]:
    """Sunday to the following Sunday."""
    sunday = day - timedelta(days=(day.weekday() + 1) % 7)
    start = datetime.combine(sunday, datetime.min.time())
    return start, start + timedelta(days=7)


def month_range(year: int, month: int) -> tuple[datetime, datetime]:
    if not 1 <= month <= 12:
        raise ValueError("Month must be between 1 and 12")
    start = datetime(year, month, 1)
    if month == 12:
        end = datetime(year + 1, 1, 1)
    else:
        end = datetime(year, month + 1, 1)
    return start, end


def resolve_scope(
    scope: str,
    year: int | None = None,
    month: int | None = None,
    today: date | None = None,
) -> ScopeRange | None:
    """Turn a scope name into a date range. 'all' has no range and returns None."""
    today = today or date.today()
    if scope == "all":
        return None
    if scope == "today":
        return ScopeRange(scope, *day_range(today))
    if scope == "week":
        return ScopeRange(scope, *week_range(today))
    if scope == "month":
        return ScopeRange(scope, *month_range(year or today.year, month or today.month))
    raise ValueError(f"Scope must be one of: {', '.join(SCOPES)}")


def matches_search(hearing: Hearing, query: str | None) -> bool:
    """Substring match of the normalized query against keywords, date and time."""
    needle = normalize_text(query)
    if not needle:
        return True
    if any(needle in keyword for keyword in hearing.keywords or []):
        return True
    return needle in (hearing.date_key or "") or needle in (hearing.time or "")


def matches_modalities(hearing: Hearing, selected: Iterable[str] | None) -> bool:
    selected = set(selected or ())
    return not selected or hearing.modality in selected


def filter_hearings(
    hearings: Iterable[Hearing],
    query: str | None = None,
    modalities: Iterable[str] | None = None,
) -> list[Hearing]:
    modalities = list(modalities or ())
    return [
        h for h in hearings
        if matches_search(h, query) and matches_modalities(h, modalities)
    ]


def group_by_date(hearings: Iterable[Hearing]) -> dict[str, list[Hearing]]:
    """Group by date_key; days ascending, each day ascending by time."""
    groups: dict[str, list[Hearing]] = {}
    for hearing in sorted(hearings, key=lambda h: (h.date_key, h.time, h.starts_at)):
        groups.setdefault(hearing.date_key, []).append(hearing)
    return groups


def available_modalities(hearings: Iterable[Hearing]) -> list[str]:
    return sorted({h.modality for h in hearings if h.modality})
