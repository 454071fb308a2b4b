"""Period window helpers: bounds, comparison periods and monthly series."""

from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta

from .models import PeriodKind, PeriodWindow

# Inclusive end of a day at millisecond resolution.
END_OF_DAY = time(23, 59, 59, 999000)


def window_bounds(window: PeriodWindow) -> tuple[datetime, datetime]:
    """Return ``(start, end)`` naive datetimes, both inclusive."""

    return (
        datetime.combine(window.from_date, time.min),
        datetime.combine(window.to_date, END_OF_DAY),
    )


def _month_end(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def previous_period(window: PeriodWindow) -> PeriodWindow:
    """Return the comparison window that precedes ``window``.

    YEAR windows compare against the whole previous calendar year; every other
    kind compares against the calendar month before ``from_date``'s month.
    """

    if window.kind is PeriodKind.YEAR:
        year = window.from_date.year - 1
        return PeriodWindow(date(year, 1, 1), date(year, 12, 31), PeriodKind.YEAR)

    first_of_month = window.from_date.replace(day=1)
    last_of_previous = first_of_month - timedelta(days=1)
    return PeriodWindow(
        last_of_previous.replace(day=1),
        last_of_previous,
        PeriodKind.MONTH,
    )


def month_windows(from_date: date, to_date: date) -> list[PeriodWindow]:
    """Calendar-month windows covering ``[from_date, to_date]``.

    Each window spans a whole month, starting with ``from_date``'s month, so a
    trend series always has one point per calendar month.
    """

    windows: list[PeriodWindow] = []
    year, month = from_date.year, from_date.month
    while date(year, month, 1) <= to_date:
        windows.append(PeriodWindow(date(year, month, 1), _month_end(year, month), PeriodKind.MONTH))
        year, month = (year + 1, 1) if month == 12 else (year, month + 1)
    return windows


__all__ = ["END_OF_DAY", "month_windows", "previous_period", "window_bounds"]
