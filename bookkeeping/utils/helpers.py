# utils/helpers.py
from datetime import datetime
import logging
import math
from typing import Any, Union, Optional

NumberLike = Union[float, int, str]

_log = logging.getLogger(__name__)


def to_float(v: Any) -> float:
    """
    Lenient numeric coercion used by every aggregate.

    Anything that does not parse as a finite number (None, "", "abc", NaN)
    counts as 0.0, and so do booleans. A numeric prefix is deliberately not
    read either: "12abc" is 0, not 12.
    """
    if isinstance(v, bool):
        return 0.0
    try:
        x = float(v)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(x) or math.isinf(x):
        return 0.0
    return x


def to_int(v: Any) -> int:
    """Integer variant of to_float(); fractional values are truncated toward zero."""
    return int(to_float(v))


def fmt_money(
    v: NumberLike,
    places: int = 2,
    *,
    strict: bool = False,
    sentinel: Optional[str] = None,
) -> str:
    """
    Format a number as money with thousands separators and a fixed number of decimals.

    Behavior on parse failure:
      - By default (strict=False, sentinel=None), returns str(v).
      - If `sentinel` is provided (e.g., "N/A"), returns that sentinel instead.
      - If `strict=True`, raises ValueError on parse failures.
    """
    try:
        x = float(v)
    except Exception as e:
        _log.debug("fmt_money: failed to parse %r as float: %s", v, e)
        if strict:
            raise ValueError(f"Could not parse {v!r} as a number.") from e
        return str(sentinel) if sentinel is not None else str(v)
    return f"{x:,.{places}f}"


def fmt_amount(v: Any) -> str:
    """
    Report-style amount: thousands separators, at most two decimals,
    trailing zeros dropped (9500 -> "9,500", 12.5 -> "12.5").
    """
    x = round(to_float(v), 2)
    if x == int(x):
        return f"{int(x):,}"
    return f"{x:,.2f}".rstrip("0").rstrip(".")


def fmt_date(d: Optional[datetime], pattern: str = "%b %d, %Y", empty: str = "-") -> str:
    """Format a datetime/date for reports ("May 01, 2024"); None -> `empty`."""
    if d is None:
        return empty
    return d.strftime(pattern)
