"""Tests for list scopes and the text/modality filters."""
from datetime import date, datetime

import pytest

from filters import (
    available_modalities,
    filter_hearings,
    group_by_date,
    matches_search,
    month_range,
    resolve_scope,
    week_range,
)
from hearings import hearing_fields
from models import Hearing


def make_hearing(hearing_id, starts_at, officer="Sgt. Silva", modality="PRESENCIAL", location="Fórum Central"):
    return Hearing(id=hearing_id, **hearing_fields(starts_at, location, officer, modality))


def test_month_range_is_half_open():
    assert month_range(2025, 3) == (datetime(2025, 3, 1), datetime(2025, 4, 1))
    assert month_range(2025, 12) == (datetime(2025, 12, 1), datetime(2026, 1, 1))


def test_month_range_rejects_invalid_month():
    with pytest.raises(ValueError):
        month_range(2025, 13)


def test_week_range_starts_on_sunday():
    # 2025-03-05 is a Wednesday
    assert week_range(date(2025, 3, 5)) == (datetime(2025, 3, 2), datetime(2025, 3, 9))
    assert week_range(date(2025, 3, 2)) == (datetime(2025, 3, 2), datetime(2025, 3, 9))
    assert week_range(date(2025, 3, 8)) == (datetime(2025, 3, 2), datetime(2025, 3, 9))


def test_resolve_scope():
    today = date(2025, 3, 5)
    assert resolve_scope("all", today=today) is None

    scope = resolve_scope("today", today=today)
    assert (scope.start, scope.end) == (datetime(2025, 3, 5), datetime(2025, 3, 6))

    scope = resolve_scope("month", year=2024, month=2, today=today)
    assert (scope.start, scope.end) == (datetime(2024, 2, 1), datetime(2024, 3, 1))

    scope = resolve_scope("month", today=today)
    assert (scope.start, scope.end) == (datetime(2025, 3, 1), datetime(2025, 4, 1))


def test_resolve_scope_unknown():
    with pytest.raises(ValueError):
        resolve_scope("year")


@pytest.mark.parametrize("query", ["sgt", "SGT", "silva", "Sgt. Sil", "forum", "fórum centr", "2025-03", "14:3", "  "])
def test_search_matches(query):
    hearing = make_hearing(1, datetime(2025, 3, 1, 14, 30))
    assert matches_search(hearing, query)


@pytest.mark.parametrize("query", ["cabo", "2024", "15:00", "videoconferencia"])
def test_search_misses(query):
    hearing = make_hearing(1, datetime(2025, 3, 1, 14, 30))
    assert not matches_search(hearing, query)


def test_filters_compose_with_and():
    hearings = [
        make_hearing(1, datetime(2025, 3, 1, 9, 0), officer="Sgt. Silva", modality="PRESENCIAL"),
        make_hearing(2, datetime(2025, 3, 1, 10, 0), officer="Sgt. Silva", modality="VIDEOCONFERÊNCIA"),
        make_hearing(3, datetime(2025, 3, 2, 11, 0), officer="Cb. Souza", modality="PRESENCIAL"),
    ]

    assert [h.id for h in filter_hearings(hearings)] == [1, 2, 3]
    assert [h.id for h in filter_hearings(hearings, query="silva")] == [1, 2]
    assert [h.id for h in filter_hearings(hearings, modalities=["PRESENCIAL"])] == [1, 3]
    assert [h.id for h in filter_hearings(hearings, query="silva", modalities=["PRESENCIAL"])] == [1]
    assert filter_hearings(hearings, query="souza", modalities=["VIDEOCONFERÊNCIA"]) == []


def test_group_by_date_orders_days_and_times():
    hearings = [
        make_hearing(1, datetime(2025, 3, 2, 9, 0)),
        make_hearing(2, datetime(2025, 3, 1, 15, 0)),
        make_hearing(3, datetime(2025, 3, 1, 8, 30)),
        make_hearing(4, datetime(2025, 3, 2, 7, 45)),
    ]

    groups = group_by_date(hearings)

    assert list(groups) == ["2025-03-01", "2025-03-02"]
    assert [h.id for h in groups["2025-03-01"]] == [3, 2]
    assert [h.id for h in groups["2025-03-02"]] == [4, 1]


def test_available_modalities_sorted_and_distinct():
    hearings = [
        make_hearing(1, datetime(2025, 3, 1, 9, 0), modality="VIDEOCONFERÊNCIA"),
        make_hearing(2, datetime(2025, 3, 1, 9, 0), modality="PRESENCIAL"),
        make_hearing(3, datetime(2025, 3, 1, 9, 0), modality="PRESENCIAL"),
    ]
    assert available_modalities(hearings) == ["PRESENCIAL", "VIDEOCONFERÊNCIA"]
