"""
Month calendar utilities for FinHistLab.

The engine works on a monthly grid. Internally months are ``datetime64[M]``
values; dense series are indexed by the month-end ``Timestamp`` of each month.
"""

from __future__ import annotations

import calendar
from datetime import date, datetime

import numpy as np
import pandas as pd


def month_range(start: date, months: int) -> np.ndarray:
    """
    Generate a range of monthly dates starting from a given date.

    **Args:**
        start: The starting date for the range (any day of the first month)
        months: Number of months to generate

    **Returns:**
        A numpy array of ``datetime64[M]`` values representing consecutive months

    **Example:**
        ```python
        from datetime import date
        from finhistlab.core.utils import month_range

        months = month_range(date(2023, 1, 31), 12)
        # ['2023-01' '2023-02' ... '2023-12']
        ```
    """
    s = np.datetime64(start, "M")
    return s + np.arange(months).astype("timedelta64[M]")


def to_month(d: date | np.datetime64 | pd.Timestamp) -> np.datetime64:
    """Truncate a date-like value to its ``datetime64[M]`` month."""
    if isinstance(d, pd.Timestamp):
        d = d.to_datetime64()
    return np.datetime64(d, "M")


def month_end(d: date) -> date:
    """Return the last calendar day of the month containing ``d``."""
    return date(d.year, d.month, calendar.monthrange(d.year, d.month)[1])


def as_date(d: date) -> date:
    """Drop the time part of a ``datetime`` or ``pd.Timestamp``; plain dates pass through."""
    if isinstance(d, datetime):
        return d.date()
    return d


def is_month_end(d: date) -> bool:
    d = as_date(d)
    return d == month_end(d)


def is_month_start(d: date) -> bool:
    return d.day == 1


def months_between(start: date, end: date) -> int:
    """Inclusive number of calendar months from ``start``'s month to ``end``'s."""
    return (end.year - start.year) * 12 + (end.month - start.month) + 1


def month_ends(months: np.ndarray) -> pd.DatetimeIndex:
    """
    Convert ``datetime64[M]`` months to a ``DatetimeIndex`` of month-end dates.

    The next month's first day minus one day is the current month's last day,
    which handles leap years without a calendar lookup.
    """
    months = np.asarray(months, dtype="datetime64[M]")
    last_days = (months + np.timedelta64(1, "M")).astype("datetime64[D]") - np.timedelta64(
        1, "D"
    )
    return pd.DatetimeIndex(last_days.astype("datetime64[ns]"), name="date")


def month_end_range(start: date, end: date) -> pd.DatetimeIndex:
    """Month-end dates for every month from ``start`` to ``end`` inclusive."""
    if end < start:
        raise ValueError(f"end {end} is before start {start}")
    return month_ends(month_range(start, months_between(start, end)))


def parse_period_string(period: str) -> tuple[date, date]:
    """
    Parse ``"YYYY-MM"`` or ``"YYYY-MM:YYYY-MM"`` into an inclusive date interval.

    Returns:
        ``(first day of the start month, last day of the end month)``

    Raises:
        ValueError: If the string does not follow either notation
    """
    parts = [p.strip() for p in str(period).split(":")]
    if len(parts) not in (1, 2):
        raise ValueError(
            f"Invalid period format: {period!r}. Expected 'YYYY-MM' or 'YYYY-MM:YYYY-MM'"
        )

    bounds = []
    for part in parts:
        try:
            year_s, month_s = part.split("-")
            bounds.append(date(int(year_s), int(month_s), 1))
        except ValueError as exc:
            raise ValueError(
                f"Invalid month {part!r} in period {period!r}. Expected YYYY-MM"
            ) from exc

    start = bounds[0]
    end = month_end(bounds[-1])
    if end < start:
        raise ValueError(f"Period {period!r} ends before it starts")
    return start, end


def fiscal_month_index(calendar_month: int, fiscal_year_end_month: int) -> int:
    """
    0-based position of a calendar month within the fiscal year.

    - Year ending December: Jan=0, ..., Dec=11
    - Year ending June: Jul=0, ..., Jun=11
    """
    fy_start_month = fiscal_year_end_month % 12 + 1
    return (calendar_month - fy_start_month) % 12
