"""Leave balance service — the balance composer.

Business logic:
  - Annual entitlement from role + tenure (policy tables)
  - Accrued-to-date amounts for the as-of year
  - VACATION carry-over from the prior year, capped
  - Approved / pending usage straight from the leave-request store
  - Per-type balance records and a trailing leave history

Every figure is recomputed on each call; nothing is cached or persisted.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import date
from decimal import Decimal
from typing import Mapping, Optional

from leave_engine.common.constants import ZERO, LeaveStatus, LeaveTypeCode
from leave_engine.common.dates import completed_years, resolve_as_of, year_window
from leave_engine.common.exceptions import MissingEmployeeError
from leave_engine.config import settings
from leave_engine.leave.accrual import calculate_accrual, calculate_carry_over
from leave_engine.leave.policy import DEFAULT_POLICY, LeavePolicy, entitlements_for
from leave_engine.leave.schemas import (
    BalanceRecord,
    BalanceSummary,
    EmployeeBrief,
    EmployeeId,
    EmployeeProfile,
    LeaveDays,
    LeaveHistoryYear,
)
from leave_engine.leave.sources import EmployeeDirectory, LeaveRequestSource
from leave_engine.leave.usage import sum_days_by_type, total_days

logger = logging.getLogger(__name__)


# ═════════════════════════════════════════════════════════════════════
# LeaveBalanceService
# ═════════════════════════════════════════════════════════════════════


class LeaveBalanceService:
    """Async balance operations: carry-over, history, composition."""

    # ─────────────────────────────────────────────────────────────────
    # Helpers
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    def build_employee_brief(employee: EmployeeProfile, as_of: date) -> EmployeeBrief:
        """Build EmployeeBrief with years of service as of ``as_of``."""
        return EmployeeBrief(
            id=employee.id,
            name=employee.name,
            employee_number=employee.employee_number,
            department=employee.department,
            hire_date=employee.hire_date,
            role=employee.role,
            years_of_service=completed_years(employee.hire_date, as_of),
        )

    @staticmethod
    def compose_balances(
        entitlements: Mapping[LeaveTypeCode, Decimal],
        accruals: Mapping[LeaveTypeCode, Decimal],
        carry_over: Mapping[LeaveTypeCode, Decimal],
        used: Mapping[LeaveTypeCode, Decimal],
        pending: Mapping[LeaveTypeCode, Decimal],
    ) -> dict[LeaveTypeCode, BalanceRecord]:
        """Combine the snapshots into one BalanceRecord per leave type.

        ``available`` takes the larger of accrued and entitled (not their sum)
        plus carry-over. ``remaining`` is floored at zero; a raw deficit is
        surfaced by the verifier as NEGATIVE_BALANCE instead.
        """
        balances: dict[LeaveTypeCode, BalanceRecord] = {}
        for leave_type in LeaveTypeCode:
            entitled = entitlements.get(leave_type, ZERO)
            accrued = accruals.get(leave_type, ZERO)
            carried = carry_over.get(leave_type, ZERO)
            used_days = used.get(leave_type, ZERO)
            pending_days = pending.get(leave_type, ZERO)

            available = max(accrued, entitled) + carried
            balances[leave_type] = BalanceRecord(
                entitled=entitled,
                accrued=accrued,
                carried_over=carried,
                used=used_days,
                pending=pending_days,
                available=available,
                remaining=max(ZERO, available - used_days - pending_days),
            )
        return balances

    # ─────────────────────────────────────────────────────────────────
    # Carry-over
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def carry_over_for(
        employee: EmployeeProfile,
        source: LeaveRequestSource,
        prior_year: int,
        as_of: date,
        *,
        policy: LeavePolicy = DEFAULT_POLICY,
    ) -> LeaveDays:
        """Days rolling into ``prior_year + 1`` from unused ``prior_year`` leave."""
        prior_entitlements = entitlements_for(employee, prior_year, as_of, policy=policy)
        prior_used = await sum_days_by_type(
            source, employee.id, LeaveStatus.approved, year_window(prior_year),
        )
        return calculate_carry_over(prior_entitlements, prior_used, policy=policy)

    # ─────────────────────────────────────────────────────────────────
    # History
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def get_leave_history(
        source: LeaveRequestSource,
        employee_id: EmployeeId,
        as_of: date,
        years: Optional[int] = None,
    ) -> list[LeaveHistoryYear]:
        """Approved leave for the trailing ``years`` calendar years, newest first."""
        count = settings.LEAVE_HISTORY_YEARS if years is None else years
        history_years = [as_of.year - offset for offset in range(max(0, count))]

        tallies = await asyncio.gather(
            *(
                sum_days_by_type(source, employee_id, LeaveStatus.approved, year_window(y))
                for y in history_years
            )
        )

        return [
            LeaveHistoryYear(
                year=y,
                total=total_days(by_type),
                by_type={lt: days for lt, days in by_type.items() if days},
            )
            for y, by_type in zip(history_years, tallies)
        ]

    # ─────────────────────────────────────────────────────────────────
    # Balances
    # ─────────────────────────────────────────────────────────────────

    @staticmethod
    async def compute_balances(
        employee: EmployeeProfile,
        source: LeaveRequestSource,
        as_of: date,
        *,
        history_years: Optional[int] = None,
        policy: LeavePolicy = DEFAULT_POLICY,
    ) -> BalanceSummary:
        """Full balance summary for the calendar year containing ``as_of``.

        The store reads have no dependency on each other and run
        concurrently; composition starts once all of them have finished.
        A failed read propagates and aborts the calculation.
        """
        year = as_of.year
        window = year_window(year)

        # ── Entitlement + accrual (pure) ────────────────────────────
        entitlements = entitlements_for(employee, year, as_of, policy=policy)
        accrual = calculate_accrual(
            entitlements, employee.hire_date, year, as_of, policy=policy,
        )

        # ── Store reads ─────────────────────────────────────────────
        used, pending, carry_over, history = await asyncio.gather(
            sum_days_by_type(source, employee.id, LeaveStatus.approved, window),
            sum_days_by_type(source, employee.id, LeaveStatus.pending, window),
            LeaveBalanceService.carry_over_for(
                employee, source, year - 1, as_of, policy=policy,
            ),
            LeaveBalanceService.get_leave_history(
                source, employee.id, as_of, history_years,
            ),
        )

        # ── Compose ─────────────────────────────────────────────────
        balances = LeaveBalanceService.compose_balances(
            entitlements, accrual.accrued, carry_over, used, pending,
        )

        logger.info(
            "Computed leave balances for employee %s (%d, %.2f months worked)",
            employee.id,
            year,
            accrual.months_worked,
        )

        return BalanceSummary(
            employee=LeaveBalanceService.build_employee_brief(employee, as_of),
            year=year,
            as_of=as_of,
            months_worked=accrual.months_worked.quantize(Decimal("0.01")),
            entitlements=entitlements,
            accruals=accrual.accrued,
            carry_over=carry_over,
            used=used,
            pending=pending,
            balances=balances,
            history=history,
        )

    @staticmethod
    async def get_balance_summary(
        directory: EmployeeDirectory,
        source: LeaveRequestSource,
        employee_id: EmployeeId,
        as_of: Optional[date] = None,
        *,
        history_years: Optional[int] = None,
        policy: LeavePolicy = DEFAULT_POLICY,
    ) -> BalanceSummary:
        """Look up the employee, then compute balances as of ``as_of`` (default today)."""
        employee = await directory.get_employee(employee_id)
        if employee is None:
            raise MissingEmployeeError(employee_id)

        return await LeaveBalanceService.compute_balances(
            employee,
            source,
            resolve_as_of(as_of),
            history_years=history_years,
            policy=policy,
        )
