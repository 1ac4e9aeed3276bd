"""Leave policy tables and the entitlement resolver.

Policy is plain data: a base table, managerial overrides, a tenure ladder and
per-role special adjustments. ``resolve_entitlements`` walks the tables in a
fixed order:

  1. Start from the base (statutory BCEA minimum) table.
  2. Managerial roles replace VACATION / PERSONAL / STUDY_LEAVE outright.
  3. Everyone else climbs the tenure ladder; each rung replaces VACATION.
  4. Special adjustments for SUPER_ADMIN / SENIOR_EMPLOYEE / INTERN.
  5. Clamp to zero.

Tests and callers can pass an alternate ``LeavePolicy`` wherever the default
one is accepted.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional

from leave_engine.common.constants import ZERO, LeaveTypeCode, OrgRole
from leave_engine.common.dates import completed_years, year_window
from leave_engine.leave.schemas import EmployeeProfile, LeaveDays

LT = LeaveTypeCode


class AdjustmentMode(str, enum.Enum):
    set = "set"
    add = "add"
    max = "max"


@dataclass(frozen=True)
class Adjustment:
    """One special adjustment; ``floor`` is applied after the mode."""

    mode: AdjustmentMode
    value: Decimal
    floor: Optional[Decimal] = None

    def apply(self, current: Decimal) -> Decimal:
        if self.mode is AdjustmentMode.set:
            result = self.value
        elif self.mode is AdjustmentMode.max:
            result = max(current, self.value)
        else:
            result = current + self.value
        if self.floor is not None:
            result = max(self.floor, result)
        return result


def _days(**values: int) -> dict[LeaveTypeCode, Decimal]:
    return {LT[name]: Decimal(v) for name, v in values.items()}


_DIRECTOR_TIER = _days(vacation=30, personal=5, study_leave=15)
_MANAGER_TIER = _days(vacation=27, personal=4, study_leave=10)
_SUPERVISOR_TIER = _days(vacation=25, personal=3, study_leave=5)


@dataclass(frozen=True)
class LeavePolicy:
    base_entitlements: Mapping[LeaveTypeCode, Decimal] = field(
        default_factory=lambda: _days(
            vacation=21,
            sick_leave=30,
            personal=3,
            emergency=0,
            maternity=120,
            paternity=10,
            bereavement=3,
            study_leave=0,
            unpaid_leave=0,
        )
    )
    managerial_overrides: Mapping[OrgRole, Mapping[LeaveTypeCode, Decimal]] = field(
        default_factory=lambda: {
            OrgRole.director: _DIRECTOR_TIER,
            OrgRole.hr_director: _DIRECTOR_TIER,
            OrgRole.department_manager: _MANAGER_TIER,
            OrgRole.hr_manager: _MANAGER_TIER,
            OrgRole.supervisor: _SUPERVISOR_TIER,
        }
    )
    # (completed years, VACATION days), ascending
    tenure_ladder: tuple[tuple[int, Decimal], ...] = (
        (1, Decimal(21)),
        (5, Decimal(25)),
        (10, Decimal(30)),
        (15, Decimal(32)),
        (20, Decimal(35)),
    )
    special_adjustments: Mapping[OrgRole, Mapping[LeaveTypeCode, Adjustment]] = field(
        default_factory=lambda: {
            OrgRole.super_admin: {
                LT.vacation: Adjustment(AdjustmentMode.max, Decimal(35)),
                LT.personal: Adjustment(AdjustmentMode.set, Decimal(7)),
                LT.study_leave: Adjustment(AdjustmentMode.set, Decimal(20)),
            },
            OrgRole.senior_employee: {
                LT.vacation: Adjustment(AdjustmentMode.add, Decimal(2)),
                LT.study_leave: Adjustment(AdjustmentMode.set, Decimal(3)),
            },
            OrgRole.intern: {
                LT.vacation: Adjustment(AdjustmentMode.add, Decimal(-6), floor=Decimal(15)),
                LT.sick_leave: Adjustment(AdjustmentMode.set, Decimal(10)),
            },
        }
    )
    accruing_types: frozenset[LeaveTypeCode] = frozenset(
        {LT.vacation, LT.sick_leave, LT.personal, LT.study_leave}
    )
    carry_over_types: frozenset[LeaveTypeCode] = frozenset({LT.vacation})
    carry_over_max_days: Decimal = Decimal(5)
    carry_over_divisor: int = 3

    def is_managerial(self, role: Optional[OrgRole]) -> bool:
        return role is not None and role in self.managerial_overrides


DEFAULT_POLICY = LeavePolicy()


def resolve_entitlements(
    role: Optional[object],
    tenure_years: int,
    *,
    policy: LeavePolicy = DEFAULT_POLICY,
) -> LeaveDays:
    """Annual entitlement per leave type for ``role`` after ``tenure_years`` of service.

    Unrecognised roles are treated like a plain employee.
    """
    org_role = OrgRole.parse(role) if role is not None else None
    entitlements: LeaveDays = {
        lt: Decimal(policy.base_entitlements.get(lt, ZERO)) for lt in LeaveTypeCode
    }

    if policy.is_managerial(org_role):
        entitlements.update(policy.managerial_overrides[org_role])
    else:
        for threshold, vacation_days in policy.tenure_ladder:
            if tenure_years >= threshold:
                entitlements[LT.vacation] = vacation_days

    for leave_type, adjustment in policy.special_adjustments.get(org_role, {}).items():
        entitlements[leave_type] = adjustment.apply(entitlements[leave_type])

    return {lt: max(ZERO, days) for lt, days in entitlements.items()}


def tenure_for_year(hire_date: date, year: int, as_of: date) -> int:
    """Completed years of service measured at the earlier of ``as_of`` and Dec 31."""
    return completed_years(hire_date, min(as_of, year_window(year).end))


def entitlements_for(
    employee: EmployeeProfile,
    year: int,
    as_of: date,
    *,
    policy: LeavePolicy = DEFAULT_POLICY,
) -> LeaveDays:
    tenure = tenure_for_year(employee.hire_date, year, as_of)
    return resolve_entitlements(employee.role, tenure, policy=policy)
