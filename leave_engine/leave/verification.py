"""Leave balance reconciliation — an independent recomputation pass.

The verifier shares the entitlement resolver and accrual calculator with the
balance composer but never reads the composer's output:

  - Accrual is computed twice: once with the exact calendar-month formula the
    composer uses (``expected``) and once with the verifier's own formula
    (``recomputed``, the 30.44-day approximation unless configured otherwise).
    The two are compared within a tolerance. A difference between the
    formulas is expected for hires near month boundaries and is reported as
    ``match=False``, never raised.
  - Usage is re-read from the request store in one query and re-grouped here.

Issues and recommendations are data, not exceptions.
"""

from __future__ import annotations

import logging
import math
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Mapping, Optional, Union

from leave_engine.common.constants import (
    DATE_FORMAT,
    UNUSED_LEAVE_AFTER_MONTH,
    ZERO,
    IssueType,
    LeaveStatus,
    LeaveTypeCode,
    MonthFormula,
    Priority,
    RecommendationType,
    Severity,
)
from leave_engine.common.dates import resolve_as_of, year_window
from leave_engine.common.exceptions import MissingEmployeeError
from leave_engine.config import settings
from leave_engine.leave.accrual import (
    MONTH_FORMULAS,
    calculate_accrual,
    months_worked_in_year,
)
from leave_engine.leave.policy import DEFAULT_POLICY, LeavePolicy, entitlements_for
from leave_engine.leave.schemas import (
    EmployeeId,
    EmployeeProfile,
    EntitlementComparison,
    Issue,
    Recommendation,
    UsageSummary,
    VerificationReport,
    VerifiedBalance,
)
from leave_engine.leave.service import LeaveBalanceService
from leave_engine.leave.sources import EmployeeDirectory, LeaveRequestSource
from leave_engine.leave.usage import group_days_by_type, total_days

logger = logging.getLogger(__name__)


def _as_decimal(value: Any) -> Decimal:
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compare_objects(
    expected: Mapping[Any, Any],
    actual: Mapping[Any, Any],
    tolerance: Union[Decimal, float, int] = Decimal("0.1"),
) -> bool:
    """True when every key in either map differs by at most ``tolerance``.

    Keys missing from one side read as 0.
    """
    limit = _as_decimal(tolerance)
    for key in set(expected) | set(actual):
        if abs(_as_decimal(expected.get(key)) - _as_decimal(actual.get(key))) > limit:
            return False
    return True


def _utilization_rate(used: Decimal, entitled: Decimal) -> int:
    if entitled <= 0:
        return 0
    return int((used / entitled * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


# ═════════════════════════════════════════════════════════════════════
# VerificationService
# ═════════════════════════════════════════════════════════════════════


class VerificationService:
    """Recompute balances independently and flag what does not add up."""

    @staticmethod
    def _check_balance(
        leave_type: LeaveTypeCode,
        entitled: Decimal,
        accrued: Decimal,
        used: Decimal,
        pending: Decimal,
    ) -> tuple[VerifiedBalance, list[Issue]]:
        raw_balance = accrued - used - pending
        balance = VerifiedBalance(
            entitled=entitled,
            accrued=accrued,
            used=used,
            pending=pending,
            raw_balance=raw_balance,
            remaining=max(ZERO, raw_balance),
            utilization_rate=_utilization_rate(used, entitled),
        )

        issues: list[Issue] = []
        if used > accrued:
            issues.append(Issue(
                type=IssueType.overuse,
                leave_type=leave_type,
                message=f"{leave_type.value}: Used {used} days but only accrued {accrued} days",
                severity=Severity.high,
                amount=used - accrued,
            ))
        if raw_balance < 0:
            issues.append(Issue(
                type=IssueType.negative_balance,
                leave_type=leave_type,
                message=f"{leave_type.value}: Negative balance of {raw_balance} days",
                severity=Severity.high,
                amount=raw_balance,
            ))
        return balance, issues

    @staticmethod
    async def verify_balances(
        employee: EmployeeProfile,
        source: LeaveRequestSource,
        year: int,
        as_of: date,
        *,
        tolerance: Optional[Decimal] = None,
        formula: Optional[MonthFormula] = None,
        policy: LeavePolicy = DEFAULT_POLICY,
    ) -> VerificationReport:
        """Reconcile ``employee``'s ``year`` against the request store as of ``as_of``."""
        tolerance = settings.RECONCILIATION_TOLERANCE if tolerance is None else tolerance
        formula = MonthFormula(formula or settings.RECONCILIATION_MONTH_FORMULA)
        month_fraction = MONTH_FORMULAS[formula]
        window = year_window(year)

        # ── Entitlement + two accrual derivations ───────────────────
        entitlements = entitlements_for(employee, year, as_of, policy=policy)
        expected = calculate_accrual(
            entitlements, employee.hire_date, year, as_of, policy=policy,
        )
        recomputed = calculate_accrual(
            entitlements, employee.hire_date, year, as_of,
            policy=policy, month_fraction=month_fraction,
        )
        match = compare_objects(expected.accrued, recomputed.accrued, tolerance)
        if not match:
            logger.warning(
                "Reconciliation mismatch for employee %s (%d): exact vs %s accrual differ by more than %s",
                employee.id, year, formula.value, tolerance,
            )

        # ── Raw usage, one read for every status ────────────────────
        requests = await source.fetch_requests(
            employee.id, start=window.start, end=window.end,
        )
        approved = group_days_by_type(r for r in requests if r.status == LeaveStatus.approved)
        pending = group_days_by_type(r for r in requests if r.status == LeaveStatus.pending)
        usage = UsageSummary(
            approved=approved,
            pending=pending,
            rejected=sum(1 for r in requests if r.status == LeaveStatus.rejected),
            cancelled=sum(1 for r in requests if r.status == LeaveStatus.cancelled),
            total_approved=total_days(approved),
            total_pending=total_days(pending),
        )

        # ── Per-type balances, issues, recommendations ──────────────
        balances: dict[LeaveTypeCode, VerifiedBalance] = {}
        issues: list[Issue] = []
        recommendations: list[Recommendation] = []

        for leave_type in LeaveTypeCode:
            entitled = entitlements.get(leave_type, ZERO)
            used = approved.get(leave_type, ZERO)
            balance, found = VerificationService._check_balance(
                leave_type,
                entitled,
                recomputed.accrued.get(leave_type, ZERO),
                used,
                pending.get(leave_type, ZERO),
            )
            balances[leave_type] = balance
            issues.extend(found)

            if entitled > 0 and used == 0 and as_of.month > UNUSED_LEAVE_AFTER_MONTH:
                recommendations.append(Recommendation(
                    type=RecommendationType.unused_leave,
                    leave_type=leave_type,
                    message=f"{leave_type.value}: No leave used this year, consider taking time off",
                    priority=Priority.medium,
                ))

        if employee.hire_date > window.start:
            months = math.ceil(months_worked_in_year(
                employee.hire_date, year, as_of, month_fraction=month_fraction,
            ))
            recommendations.append(Recommendation(
                type=RecommendationType.mid_year_hire,
                message=(
                    f"Employee hired mid-year ({employee.hire_date.strftime(DATE_FORMAT)}), "
                    f"leave pro-rated for {months} months"
                ),
                priority=Priority.info,
            ))

        if issues:
            logger.info(
                "Verification for employee %s (%d) raised %d issue(s)",
                employee.id, year, len(issues),
            )

        return VerificationReport(
            employee=LeaveBalanceService.build_employee_brief(employee, as_of),
            year=year,
            as_of=as_of,
            entitlements=EntitlementComparison(
                expected=expected.accrued,
                recomputed=recomputed.accrued,
                formula=formula,
                tolerance=tolerance,
                match=match,
            ),
            usage=usage,
            balances=balances,
            issues=issues,
            recommendations=recommendations,
        )

    @staticmethod
    async def verify_for_employee(
        directory: EmployeeDirectory,
        source: LeaveRequestSource,
        employee_id: EmployeeId,
        year: Optional[int] = None,
        as_of: Optional[date] = None,
        **options: Any,
    ) -> VerificationReport:
        """Look up the employee, then verify ``year`` (default: the as-of year)."""
        employee = await directory.get_employee(employee_id)
        if employee is None:
            raise MissingEmployeeError(employee_id)

        resolved = resolve_as_of(as_of)
        return await VerificationService.verify_balances(
            employee,
            source,
            resolved.year if year is None else year,
            resolved,
            **options,
        )
