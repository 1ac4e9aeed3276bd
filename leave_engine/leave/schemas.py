"""Leave engine Pydantic v2 schemas — collaborator inputs and computed outputs.

Naming conventions:
  - *Profile / *Record  → inputs read from external collaborators
  - *Brief              → compact embedded representations
  - *Summary / *Report  → engine outputs, rebuilt on every call
"""

from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from leave_engine.common.constants import (
    IssueType,
    LeaveStatus,
    LeaveTypeCode,
    MonthFormula,
    OrgRole,
    Priority,
    RecommendationType,
    Severity,
)

EmployeeId = Union[uuid.UUID, int, str]
LeaveDays = dict[LeaveTypeCode, Decimal]


def _as_date(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.date()
    return value


# ═════════════════════════════════════════════════════════════════════
# Collaborator inputs
# ═════════════════════════════════════════════════════════════════════


class EmployeeProfile(BaseModel):
    """Employee directory record. Unknown roles are kept verbatim."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: EmployeeId
    name: str
    employee_number: Optional[str] = None
    department: Optional[str] = None
    hire_date: date
    role: Optional[str] = None

    @field_validator("hire_date", mode="before")
    @classmethod
    def _hire_date_as_date(cls, v: Any) -> Any:
        return _as_date(v)

    @field_validator("role", mode="before")
    @classmethod
    def _role_as_str(cls, v: Any) -> Any:
        if isinstance(v, OrgRole):
            return v.value
        return v

    @property
    def org_role(self) -> Optional[OrgRole]:
        return OrgRole.parse(self.role) if self.role else None


class LeaveRequestRecord(BaseModel):
    """Row from the leave-request store. ``total_days`` may be missing."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    employee_id: EmployeeId
    leave_type: LeaveTypeCode
    start_date: date
    end_date: Optional[date] = None
    total_days: Optional[Decimal] = None
    status: LeaveStatus
    created_at: Optional[datetime] = None

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _dates_as_date(cls, v: Any) -> Any:
        return _as_date(v)


# ═════════════════════════════════════════════════════════════════════
# Embedded / shared
# ═════════════════════════════════════════════════════════════════════


class EmployeeBrief(BaseModel):
    """Employee info embedded in balance and verification output."""

    id: EmployeeId
    name: str
    employee_number: Optional[str] = None
    department: Optional[str] = None
    hire_date: date
    role: Optional[str] = None
    years_of_service: int = 0


# ═════════════════════════════════════════════════════════════════════
# Balance
# ═════════════════════════════════════════════════════════════════════


class BalanceRecord(BaseModel):
    """Composed balance for one leave type. ``remaining`` is floored at zero."""

    entitled: Decimal
    accrued: Decimal
    carried_over: Decimal = Decimal("0")
    used: Decimal = Decimal("0")
    pending: Decimal = Decimal("0")
    available: Decimal
    remaining: Decimal


class LeaveHistoryYear(BaseModel):
    """Approved leave taken in one calendar year."""

    year: int
    total: Decimal = Decimal("0")
    by_type: LeaveDays = Field(default_factory=dict)


class BalanceSummary(BaseModel):
    """Full balance view for one employee in the as-of year."""

    employee: EmployeeBrief
    year: int
    as_of: date
    months_worked: Decimal
    entitlements: LeaveDays
    accruals: LeaveDays
    carry_over: LeaveDays
    used: LeaveDays
    pending: LeaveDays
    balances: dict[LeaveTypeCode, BalanceRecord]
    history: list[LeaveHistoryYear] = Field(default_factory=list)


# ═════════════════════════════════════════════════════════════════════
# Verification
# ═════════════════════════════════════════════════════════════════════


class Issue(BaseModel):
    """Policy violation found by the reconciliation pass."""

    type: IssueType
    leave_type: LeaveTypeCode
    message: str
    severity: Severity = Severity.high
    amount: Decimal = Field(
        ..., description="Signed figure behind the issue (excess days or raw balance)"
    )


class Recommendation(BaseModel):
    """Advisory note; never an error."""

    type: RecommendationType
    leave_type: Optional[LeaveTypeCode] = None
    message: str
    priority: Priority


class EntitlementComparison(BaseModel):
    """Primary accrual figures against the independently recomputed ones."""

    expected: LeaveDays
    recomputed: LeaveDays
    formula: MonthFormula
    tolerance: Decimal
    match: bool


class UsageSummary(BaseModel):
    """Raw usage in the verified year, straight from the request store."""

    approved: LeaveDays = Field(default_factory=dict)
    pending: LeaveDays = Field(default_factory=dict)
    rejected: int = 0
    cancelled: int = 0
    total_approved: Decimal = Decimal("0")
    total_pending: Decimal = Decimal("0")


class VerifiedBalance(BaseModel):
    """Balance re-derived by the verifier. ``raw_balance`` keeps its sign."""

    entitled: Decimal
    accrued: Decimal
    used: Decimal
    pending: Decimal
    raw_balance: Decimal
    remaining: Decimal
    utilization_rate: int = 0


class VerificationReport(BaseModel):
    """Reconciliation outcome. Mismatches are reported here, never raised."""

    employee: EmployeeBrief
    year: int
    as_of: date
    entitlements: EntitlementComparison
    usage: UsageSummary
    balances: dict[LeaveTypeCode, VerifiedBalance]
    issues: list[Issue] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)

    @property
    def has_issues(self) -> bool:
        return bool(self.issues) or not self.entitlements.match
