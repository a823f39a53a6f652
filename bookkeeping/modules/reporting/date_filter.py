# bookkeeping/modules/reporting/date_filter.py
"""
Date coercion and date-range filtering shared by every report and dashboard.

Records carry their dates in several shapes depending on where the snapshot
came from (live store, offline cache, hand-entered strings). Everything is
normalised to a *local naive* datetime before comparing, and ranges are
inclusive on both ends.
"""
from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from typing import Any, Iterable, List, Mapping, Optional, Tuple, Union

DateLike = Union[str, date, datetime, None]
DateRange = Tuple[datetime, datetime]

FILTER_TYPES = ("all", "today", "yesterday", "thisWeek", "thisMonth", "range", "custom", "specific")
_ALIASES = {"week": "thisWeek", "month": "thisMonth"}
_RANGE_TYPES = ("range", "custom", "specific")

_DAY = timedelta(days=1)
_TICK = timedelta(microseconds=1)


# ------------------------------ Coercion ------------------------------------

def _from_epoch(seconds: float) -> Optional[datetime]:
    try:
        return datetime.fromtimestamp(seconds)
    except (OverflowError, OSError, ValueError):
        return None


def _from_iso(text: str) -> Optional[datetime]:
    s = text.strip()
    if not s:
        return None
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    try:
        if len(s) == 10:
            return datetime.combine(date.fromisoformat(s), time.min)
        return coerce_datetime(datetime.fromisoformat(s))
    except ValueError:
        return None


def coerce_datetime(value: Any) -> Optional[datetime]:
    """
    Best-effort conversion of a stored date to a local naive datetime.

    Accepted: datetime, date, ISO strings, epoch milliseconds,
    {"seconds", "nanoseconds"} / {"_seconds", ...} mappings (serialized
    database timestamps), {"__ts__": iso} mappings and objects exposing
    to_datetime(). Anything else yields None.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone().replace(tzinfo=None)
        return value
    if isinstance(value, date):
        return datetime.combine(value, time.min)
    if isinstance(value, (int, float)):
        if isinstance(value, float) and (math.isnan(value) or math.isinf(value)):
            return None
        return _from_epoch(value / 1000.0)
    if isinstance(value, str):
        return _from_iso(value)
    if isinstance(value, Mapping):
        if "__ts__" in value:
            raw = value["__ts__"]
            return _from_iso(raw) if isinstance(raw, str) else None
        for key in ("seconds", "_seconds"):
            if key in value:
                try:
                    secs = float(value[key])
                    nanos = float(value.get("nanoseconds", value.get("_nanoseconds", 0)) or 0)
                except (TypeError, ValueError):
                    return None
                return _from_epoch(secs + nanos / 1e9)
        return None
    to_dt = getattr(value, "to_datetime", None)
    if callable(to_dt):
        return coerce_datetime(to_dt())
    return None


def _parse_calendar_date(value: DateLike, what: str) -> date:
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError as e:
        raise ValueError(f"Invalid {what}: {value!r} (expected YYYY-MM-DD)") from e


def start_of_day(d: date) -> datetime:
    return datetime.combine(d, time.min)


def end_of_day(d: date) -> datetime:
    return datetime.combine(d, time.max)


# ------------------------------ Filter --------------------------------------

@dataclass(frozen=True)
class DateFilter:
    """
    {type, startDate?, endDate?} as chosen in the UI.

    Relative types are resolved against the instant passed to resolve(),
    so the same filter object can be reused across days.
    """

    type: str = "all"
    start_date: DateLike = None
    end_date: DateLike = None

    def __post_init__(self) -> None:
        kind = _ALIASES.get(self.type, self.type)
        if kind not in FILTER_TYPES:
            raise ValueError(f"Unknown date filter type: {self.type!r}")
        object.__setattr__(self, "type", kind)

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> "DateFilter":
        """Accept the {type, startDate, endDate} shape used by views and saved state."""
        if not data:
            return cls()
        return cls(
            type=str(data.get("type") or "all"),
            start_date=data.get("startDate", data.get("start_date")),
            end_date=data.get("endDate", data.get("end_date")),
        )

    def resolve(self, now: Optional[datetime] = None) -> Optional[DateRange]:
        return resolve_range(self, now)

    def label(self) -> str:
        if self.type == "all":
            return "All Time"
        if self.type == "today":
            return "Today"
        if self.type == "yesterday":
            return "Yesterday"
        if self.type == "thisWeek":
            return "This Week"
        if self.type == "thisMonth":
            return "This Month"
        # caller dates do not depend on `now`
        rng = resolve_range(self)
        if rng is None:
            return "All Time"
        start, end = rng
        return f"{start:%b %d, %Y} - {end:%b %d, %Y}"


def resolve_range(f: DateFilter, now: Optional[datetime] = None) -> Optional[DateRange]:
    """
    Concrete inclusive [start, end] for a filter, or None when every record passes.

    End bounds sit on the last microsecond of their day, so "today" is the
    same set as the half-open [midnight, next midnight).
    """
    now = now or datetime.now()
    today = now.date()

    if f.type == "all":
        return None
    if f.type == "today":
        return start_of_day(today), end_of_day(today)
    if f.type == "yesterday":
        y = today - _DAY
        return start_of_day(y), end_of_day(y)
    if f.type == "thisWeek":
        monday = today - timedelta(days=today.weekday())
        start = start_of_day(monday)
        return start, start + 7 * _DAY - _TICK
    if f.type == "thisMonth":
        first = today.replace(day=1)
        nxt = date(first.year + (first.month == 12), first.month % 12 + 1, 1)
        return start_of_day(first), start_of_day(nxt) - _TICK

    # range / custom / specific
    start_raw = f.start_date
    end_raw = f.end_date
    if f.type == "specific" and not end_raw:
        end_raw = start_raw
    if not start_raw or not end_raw:
        return None
    start = _parse_calendar_date(start_raw, "start date")
    end = _parse_calendar_date(end_raw, "end date")
    return start_of_day(start), end_of_day(end)


def in_range(value: Any, rng: Optional[DateRange]) -> bool:
    if rng is None:
        return True
    d = coerce_datetime(value)
    if d is None:
        return False
    return rng[0] <= d <= rng[1]


def filter_by_date(
    records: Iterable[Mapping[str, Any]],
    f: DateFilter,
    field: str = "createdAt",
    now: Optional[datetime] = None,
) -> List[Mapping[str, Any]]:
    """Records whose `field` falls inside the filter's range (order preserved)."""
    rng = resolve_range(f, now)
    if rng is None:
        return list(records)
    return [r for r in records if in_range(r.get(field), rng)]


def is_same_day(value: Any, now: Optional[datetime] = None) -> bool:
    d = coerce_datetime(value)
    return d is not None and d.date() == (now or datetime.now()).date()
