"""Leave entitlement & balance engine.

Outbound surface:

  - ``compute_balances(employee, source, as_of)`` → BalanceSummary
  - ``verify_balances(employee, source, year, as_of)`` → VerificationReport
"""

from __future__ import annotations

from datetime import date
from typing import Any

from leave_engine.leave.schemas import BalanceSummary, EmployeeProfile, VerificationReport
from leave_engine.leave.service import LeaveBalanceService
from leave_engine.leave.sources import LeaveRequestSource
from leave_engine.leave.verification import VerificationService

__version__ = "1.0.0"


async def compute_balances(
    employee: EmployeeProfile,
    source: LeaveRequestSource,
    as_of: date,
    **options: Any,
) -> BalanceSummary:
    return await LeaveBalanceService.compute_balances(employee, source, as_of, **options)


async def verify_balances(
    employee: EmployeeProfile,
    source: LeaveRequestSource,
    year: int,
    as_of: date,
    **options: Any,
) -> VerificationReport:
    return await VerificationService.verify_balances(employee, source, year, as_of, **options)


__all__ = [
    "BalanceSummary",
    "EmployeeProfile",
    "LeaveBalanceService",
    "VerificationReport",
    "VerificationService",
    "compute_balances",
    "verify_balances",
]
