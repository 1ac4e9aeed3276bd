"""Enums and constants for the leave engine — matching the leave-request store values."""

from __future__ import annotations

import enum
from decimal import Decimal
from typing import Optional


# ── Leave ───────────────────────────────────────────────────────────

class LeaveTypeCode(str, enum.Enum):
    vacation = "VACATION"
    sick_leave = "SICK_LEAVE"
    personal = "PERSONAL"
    emergency = "EMERGENCY"
    maternity = "MATERNITY"
    paternity = "PATERNITY"
    bereavement = "BEREAVEMENT"
    study_leave = "STUDY_LEAVE"
    unpaid_leave = "UNPAID_LEAVE"


class LeaveStatus(str, enum.Enum):
    pending = "PENDING"
    approved = "APPROVED"
    rejected = "REJECTED"
    cancelled = "CANCELLED"


# ── Roles ───────────────────────────────────────────────────────────

class OrgRole(str, enum.Enum):
    super_admin = "SUPER_ADMIN"
    director = "DIRECTOR"
    hr_director = "HR_DIRECTOR"
    department_manager = "DEPARTMENT_MANAGER"
    hr_manager = "HR_MANAGER"
    supervisor = "SUPERVISOR"
    senior_employee = "SENIOR_EMPLOYEE"
    employee = "EMPLOYEE"
    intern = "INTERN"

    @classmethod
    def parse(cls, value: object) -> Optional["OrgRole"]:
        """Return the matching role, or None for anything unrecognised."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().upper())
        except ValueError:
            return None


# ── Verification ────────────────────────────────────────────────────

class IssueType(str, enum.Enum):
    overuse = "OVERUSE"
    negative_balance = "NEGATIVE_BALANCE"


class RecommendationType(str, enum.Enum):
    unused_leave = "UNUSED_LEAVE"
    mid_year_hire = "MID_YEAR_HIRE"


class Severity(str, enum.Enum):
    high = "HIGH"


class Priority(str, enum.Enum):
    medium = "MEDIUM"
    info = "INFO"


class MonthFormula(str, enum.Enum):
    exact = "exact"
    approximate = "approximate"


# ── Misc constants ──────────────────────────────────────────────────

ZERO = Decimal("0")
ONE_DECIMAL = Decimal("0.1")
MONTHS_PER_YEAR = Decimal("12")
DAYS_PER_MONTH_APPROX = Decimal("30.44")
DAYS_PER_YEAR_APPROX = 365.25
# as_of.month must exceed this (i.e. August onwards) for UNUSED_LEAVE
UNUSED_LEAVE_AFTER_MONTH = 7
DATE_FORMAT = "%d-%b-%Y"
