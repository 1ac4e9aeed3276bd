"""Calendar/duration helpers — day counts, year windows, elapsed-month fractions.

Dates are read as the start of that day. An elapsed-month interval therefore
runs from ``window_start`` up to (but excluding) ``as_of``, and an ``as_of``
past the window saturates at the end of ``window_end``.

Two month formulas live here:

  - ``months_elapsed_fraction``: exact calendar weighting. Each boundary month
    contributes ``days covered / days in that month``, months in between
    contribute 1. This is the formula balances are computed with.
  - ``approximate_months_elapsed``: elapsed days / 30.44. Kept for the
    reconciliation pass, which uses it to cross-check the exact figures.
"""

from __future__ import annotations

import calendar
import math
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import NamedTuple, Optional
from zoneinfo import ZoneInfo

from leave_engine.common.constants import (
    DAYS_PER_MONTH_APPROX,
    DAYS_PER_YEAR_APPROX,
    MONTHS_PER_YEAR,
    ZERO,
)
from leave_engine.common.exceptions import InvalidRangeError
from leave_engine.config import settings


class YearWindow(NamedTuple):
    """Jan 1 through Dec 31 of one calendar year, both bounds inclusive."""

    start: date
    end: date

    @property
    def year(self) -> int:
        return self.start.year

    @property
    def day_count(self) -> int:
        return inclusive_day_count(self.start, self.end)

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


def inclusive_day_count(start: date, end: date) -> int:
    """Number of calendar days from ``start`` to ``end``, counting both ends."""
    if end < start:
        raise InvalidRangeError(start, end)
    return (end - start).days + 1


def year_window(year: int) -> YearWindow:
    return YearWindow(date(year, 1, 1), date(year, 12, 31))


def clip_to_window(
    start: date,
    end: date,
    window: YearWindow,
) -> Optional[tuple[date, date]]:
    """Intersect ``[start, end]`` with ``window``; None when they do not overlap."""
    lo = max(start, window.start)
    hi = min(end, window.end)
    if hi < lo:
        return None
    return lo, hi


def _month_offset(day: date) -> Decimal:
    """Fraction of its month already elapsed at the start of ``day``."""
    days_in_month = calendar.monthrange(day.year, day.month)[1]
    return Decimal(day.day - 1) / Decimal(days_in_month)


def _elapsed_stop(window_start: date, window_end: date, as_of: date) -> date:
    if window_end < window_start:
        raise InvalidRangeError(window_start, window_end)
    return min(as_of, window_end + timedelta(days=1))


def _clamp_months(months: Decimal) -> Decimal:
    return max(ZERO, min(MONTHS_PER_YEAR, months))


def months_elapsed_fraction(window_start: date, window_end: date, as_of: date) -> Decimal:
    """Exact elapsed months in ``[window_start, window_end]`` as of ``as_of``, in [0, 12]."""
    stop = _elapsed_stop(window_start, window_end, as_of)
    if stop <= window_start:
        return ZERO
    whole = (stop.year - window_start.year) * 12 + (stop.month - window_start.month)
    return _clamp_months(Decimal(whole) + _month_offset(stop) - _month_offset(window_start))


def approximate_months_elapsed(window_start: date, window_end: date, as_of: date) -> Decimal:
    """Elapsed months using 30.44-day months, in [0, 12]."""
    stop = _elapsed_stop(window_start, window_end, as_of)
    if stop <= window_start:
        return ZERO
    days = (stop - window_start).days
    return _clamp_months(Decimal(days) / DAYS_PER_MONTH_APPROX)


def completed_years(since: date, as_of: date) -> int:
    """Whole 365.25-day years from ``since`` to ``as_of``; 0 if ``since`` is later."""
    if since > as_of:
        return 0
    return math.floor((as_of - since).days / DAYS_PER_YEAR_APPROX)


def resolve_as_of(as_of: Optional[date] = None) -> date:
    """Caller-boundary helper: normalise ``as_of``, defaulting to today in TIMEZONE."""
    if as_of is None:
        return datetime.now(ZoneInfo(settings.TIMEZONE)).date()
    if isinstance(as_of, datetime):
        return as_of.date()
    return as_of
