"""Accrual and carry-over calculators — pure functions over entitlement tables."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Mapping

from leave_engine.common.constants import (
    MONTHS_PER_YEAR,
    ONE_DECIMAL,
    ZERO,
    LeaveTypeCode,
    MonthFormula,
)
from leave_engine.common.dates import (
    approximate_months_elapsed,
    months_elapsed_fraction,
    year_window,
)
from leave_engine.leave.policy import DEFAULT_POLICY, LeavePolicy
from leave_engine.leave.schemas import LeaveDays

# (window_start, window_end, as_of) -> months in [0, 12]
MonthFraction = Callable[[date, date, date], Decimal]

MONTH_FORMULAS: dict[MonthFormula, MonthFraction] = {
    MonthFormula.exact: months_elapsed_fraction,
    MonthFormula.approximate: approximate_months_elapsed,
}


@dataclass(frozen=True)
class AccrualResult:
    months_worked: Decimal
    accrued: LeaveDays


def round_days(value: Decimal) -> Decimal:
    """Round a day count to one decimal place, halves away from zero."""
    return value.quantize(ONE_DECIMAL, rounding=ROUND_HALF_UP)


def months_worked_in_year(
    hire_date: date,
    year: int,
    as_of: date,
    *,
    month_fraction: MonthFraction = months_elapsed_fraction,
) -> Decimal:
    """Months of service inside ``year`` as of ``as_of``.

    A hire date after the year, or an ``as_of`` before the service start,
    yields zero rather than an error.
    """
    window = year_window(year)
    start = max(hire_date, window.start)
    if start > window.end:
        return ZERO
    return month_fraction(start, window.end, as_of)


def calculate_accrual(
    entitlements: Mapping[LeaveTypeCode, Decimal],
    hire_date: date,
    year: int,
    as_of: date,
    *,
    policy: LeavePolicy = DEFAULT_POLICY,
    month_fraction: MonthFraction = months_elapsed_fraction,
) -> AccrualResult:
    """Accrued-to-date days per leave type.

    Accruing types earn ``entitlement / 12`` per month worked; a zero
    entitlement earns zero. Everything else is available in full at once.
    """
    months = months_worked_in_year(hire_date, year, as_of, month_fraction=month_fraction)
    accrued: LeaveDays = {}
    for leave_type in LeaveTypeCode:
        entitled = entitlements.get(leave_type, ZERO)
        if leave_type in policy.accruing_types:
            accrued[leave_type] = round_days(entitled / MONTHS_PER_YEAR * months)
        else:
            accrued[leave_type] = entitled
    return AccrualResult(months_worked=months, accrued=accrued)


def carry_over_cap(prior_entitlement: Decimal, *, policy: LeavePolicy = DEFAULT_POLICY) -> Decimal:
    """``min(5, floor(prior_entitlement / 3))`` under the default policy."""
    share = Decimal(math.floor(prior_entitlement / policy.carry_over_divisor))
    return max(ZERO, min(policy.carry_over_max_days, share))


def calculate_carry_over(
    prior_entitlements: Mapping[LeaveTypeCode, Decimal],
    prior_used: Mapping[LeaveTypeCode, Decimal],
    *,
    policy: LeavePolicy = DEFAULT_POLICY,
) -> LeaveDays:
    """Unused prior-year days that roll forward, capped per policy."""
    carry: LeaveDays = {lt: ZERO for lt in LeaveTypeCode}
    for leave_type in policy.carry_over_types:
        entitled = prior_entitlements.get(leave_type, ZERO)
        unused = entitled - prior_used.get(leave_type, ZERO)
        cap = carry_over_cap(entitled, policy=policy)
        carry[leave_type] = max(ZERO, min(unused, cap))
    return carry
