"""
Date coercion and range filtering.

Ranges are inclusive on both ends and relative filters resolve against an
explicit `now`, so nothing here depends on the wall clock.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta, timezone

import pytest

from bookkeeping.modules.reporting.date_filter import (
    DateFilter,
    coerce_datetime,
    filter_by_date,
    in_range,
    is_same_day,
    resolve_range,
)

from .conftest import NOW, YESTERDAY


# ---------------------------------------------------------------------------
# Suite A – coercion
# ---------------------------------------------------------------------------

def test_a1_coerce_accepts_the_stored_shapes() -> None:
    """A1: datetime, date, ISO text, epoch ms and timestamp mappings all coerce."""
    assert coerce_datetime(NOW) == NOW
    assert coerce_datetime(date(2024, 5, 1)) == datetime(2024, 5, 1)
    assert coerce_datetime("2024-05-01") == datetime(2024, 5, 1)
    assert coerce_datetime("2024-05-01T14:30:00") == NOW
    assert coerce_datetime({"__ts__": "2024-05-01T14:30:00"}) == NOW

    epoch = datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
    local = epoch.astimezone().replace(tzinfo=None)
    assert coerce_datetime(int(epoch.timestamp() * 1000)) == local
    assert coerce_datetime({"seconds": epoch.timestamp(), "nanoseconds": 0}) == local
    assert coerce_datetime({"_seconds": epoch.timestamp()}) == local
    assert coerce_datetime("2024-05-01T12:00:00Z") == local


@pytest.mark.parametrize("value", [None, "", "not a date", True, float("nan"), {"foo": 1}, object()])
def test_a2_coerce_unusable_values_yield_none(value) -> None:
    """A2: Anything unrecognised coerces to None instead of raising."""
    assert coerce_datetime(value) is None


def test_a3_coerce_uses_to_datetime_hook() -> None:
    """A3: Objects exposing to_datetime() are unwrapped."""

    class Stamp:
        def to_datetime(self):
            return NOW

    assert coerce_datetime(Stamp()) == NOW


# ---------------------------------------------------------------------------
# Suite B – resolving filters
# ---------------------------------------------------------------------------

def test_b1_all_means_no_range() -> None:
    assert resolve_range(DateFilter("all"), NOW) is None


def test_b2_today_and_yesterday_cover_whole_days() -> None:
    """B2: today/yesterday run from midnight to the last microsecond."""
    start, end = resolve_range(DateFilter("today"), NOW)
    assert start == datetime(2024, 5, 1)
    assert end == datetime(2024, 5, 1, 23, 59, 59, 999999)

    start, end = resolve_range(DateFilter("yesterday"), NOW)
    assert start == datetime(2024, 4, 30)
    assert end.date() == date(2024, 4, 30)


def test_b3_this_week_starts_on_monday() -> None:
    """B3: 2024-05-01 is a Wednesday, so the week starts on 2024-04-29."""
    start, end = resolve_range(DateFilter("thisWeek"), NOW)
    assert start == datetime(2024, 4, 29)
    assert end == datetime(2024, 5, 5, 23, 59, 59, 999999)
    assert DateFilter("week") == DateFilter("thisWeek")


def test_b4_this_month_handles_december() -> None:
    start, end = resolve_range(DateFilter("thisMonth"), datetime(2024, 12, 15))
    assert start == datetime(2024, 12, 1)
    assert end == datetime(2024, 12, 31, 23, 59, 59, 999999)


def test_b5_custom_range_is_inclusive() -> None:
    """B5: Records stamped on either boundary day are kept."""
    f = DateFilter("range", "2024-04-29", "2024-05-01")
    rng = f.resolve(NOW)
    assert in_range(datetime(2024, 4, 29, 0, 0), rng)
    assert in_range(datetime(2024, 5, 1, 23, 59, 59), rng)
    assert not in_range(datetime(2024, 5, 2), rng)
    assert not in_range(None, rng)


def test_b6_range_without_dates_passes_everything() -> None:
    assert resolve_range(DateFilter("range"), NOW) is None
    assert resolve_range(DateFilter("custom", start_date="2024-05-01"), NOW) is None


def test_b7_specific_day_defaults_end_to_start() -> None:
    start, end = resolve_range(DateFilter("specific", start_date="2024-04-30"), NOW)
    assert (start.date(), end.date()) == (date(2024, 4, 30), date(2024, 4, 30))


def test_b8_start_after_end_matches_nothing() -> None:
    f = DateFilter("range", "2024-05-02", "2024-05-01")
    assert filter_by_date([{"createdAt": NOW}], f, now=NOW) == []


def test_b9_bad_inputs_raise_value_error() -> None:
    with pytest.raises(ValueError):
        DateFilter("fortnight")
    with pytest.raises(ValueError):
        resolve_range(DateFilter("range", "2024-13-01", "2024-05-01"), NOW)


def test_b10_labels() -> None:
    assert DateFilter().label() == "All Time"
    assert DateFilter("thisMonth").label() == "This Month"
    assert DateFilter("range", "2024-04-29", "2024-05-01").label() == "Apr 29, 2024 - May 01, 2024"


def test_b12_label_matches_what_the_range_covers() -> None:
    """A range missing one end passes every record, so it reads as All Time."""
    half = DateFilter("range", "2024-05-01", None)
    assert resolve_range(half, NOW) is None
    assert half.label() == "All Time"
    assert DateFilter("range").label() == "All Time"
    assert DateFilter("specific", "2024-05-01").label() == "May 01, 2024 - May 01, 2024"


def test_b11_from_mapping_accepts_view_shape() -> None:
    f = DateFilter.from_mapping({"type": "range", "startDate": "2024-04-29", "endDate": "2024-05-01"})
    assert f == DateFilter("range", "2024-04-29", "2024-05-01")
    assert DateFilter.from_mapping(None) == DateFilter()


# ---------------------------------------------------------------------------
# Suite C – filtering
# ---------------------------------------------------------------------------

def test_c1_today_versus_yesterday() -> None:
    """C1: A record from yesterday is excluded by 'today' and kept by 'yesterday'."""
    records = [{"id": "a", "createdAt": NOW}, {"id": "b", "createdAt": YESTERDAY}, {"id": "c"}]
    assert [r["id"] for r in filter_by_date(records, DateFilter("today"), now=NOW)] == ["a"]
    assert [r["id"] for r in filter_by_date(records, DateFilter("yesterday"), now=NOW)] == ["b"]
    assert [r["id"] for r in filter_by_date(records, DateFilter("all"), now=NOW)] == ["a", "b", "c"]


def test_c2_filter_reads_the_requested_field() -> None:
    records = [{"date": YESTERDAY, "createdAt": NOW}]
    assert filter_by_date(records, DateFilter("today"), "date", NOW) == []


def test_c3_is_same_day() -> None:
    assert is_same_day(NOW.replace(hour=0), NOW)
    assert not is_same_day(NOW - timedelta(days=1), NOW)
    assert not is_same_day(None, NOW)
