"""Leave calculator test suite — entitlement resolution, accrual, carry-over and
usage aggregation.

Pure functions only; balance composition and reconciliation live in
test_balance.py and test_verification.py.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta
from decimal import Decimal

import pytest

from leave_engine.common.constants import LeaveStatus, LeaveTypeCode, OrgRole
from leave_engine.common.dates import approximate_months_elapsed, year_window
from leave_engine.leave.accrual import (
    calculate_accrual,
    calculate_carry_over,
    carry_over_cap,
    months_worked_in_year,
    round_days,
)
from leave_engine.leave.policy import (
    DEFAULT_POLICY,
    Adjustment,
    AdjustmentMode,
    LeavePolicy,
    entitlements_for,
    resolve_entitlements,
    tenure_for_year,
)
from leave_engine.leave.sources import InMemoryLeaveRequestSource
from leave_engine.leave.usage import empty_days, group_days_by_type, sum_days_by_type, total_days
from tests.conftest import _make_employee, _make_request

LT = LeaveTypeCode
D = Decimal


# ═════════════════════════════════════════════════════════════════════
# 1. Entitlement resolver
# ═════════════════════════════════════════════════════════════════════


class TestResolveEntitlements:
    """Tests for resolve_entitlements() against the default policy."""

    def test_new_employee_gets_base_table(self):
        """EMPLOYEE with no tenure → statutory base values."""
        ent = resolve_entitlements(OrgRole.employee, 0)
        assert ent == {
            LT.vacation: D(21),
            LT.sick_leave: D(30),
            LT.personal: D(3),
            LT.emergency: D(0),
            LT.maternity: D(120),
            LT.paternity: D(10),
            LT.bereavement: D(3),
            LT.study_leave: D(0),
            LT.unpaid_leave: D(0),
        }

    @pytest.mark.parametrize(
        "tenure, vacation",
        [(0, 21), (1, 21), (4, 21), (5, 25), (9, 25), (10, 30), (15, 32), (20, 35), (32, 35)],
    )
    def test_tenure_ladder_replaces_vacation(self, tenure, vacation):
        """Each rung replaces the previous value rather than adding to it."""
        assert resolve_entitlements("EMPLOYEE", tenure)[LT.vacation] == D(vacation)

    def test_director_override_beats_tenure_ladder(self):
        """DIRECTOR with 12 years → 30 / 5 / 15 regardless of tenure."""
        ent = resolve_entitlements(OrgRole.director, 12)
        assert ent[LT.vacation] == D(30)
        assert ent[LT.personal] == D(5)
        assert ent[LT.study_leave] == D(15)

    def test_director_override_not_raised_by_long_tenure(self):
        """20 years would mean 35 on the ladder; the override still says 30."""
        assert resolve_entitlements(OrgRole.hr_director, 20)[LT.vacation] == D(30)

    @pytest.mark.parametrize(
        "role, vacation, personal, study",
        [
            (OrgRole.department_manager, 27, 4, 10),
            (OrgRole.hr_manager, 27, 4, 10),
            (OrgRole.supervisor, 25, 3, 5),
        ],
    )
    def test_managerial_tiers(self, role, vacation, personal, study):
        ent = resolve_entitlements(role, 3)
        assert (ent[LT.vacation], ent[LT.personal], ent[LT.study_leave]) == (
            D(vacation), D(personal), D(study),
        )

    def test_intern_reduced_but_floored(self):
        """INTERN: 21 − 6 → 15 (the floor), sick leave set to 10."""
        ent = resolve_entitlements(OrgRole.intern, 0)
        assert ent[LT.vacation] == D(15)
        assert ent[LT.sick_leave] == D(10)

    def test_intern_with_tenure_loses_six_days(self):
        """INTERN on the 10-year rung: 30 − 6 = 24, above the floor."""
        assert resolve_entitlements(OrgRole.intern, 10)[LT.vacation] == D(24)

    def test_super_admin_special_adjustment(self):
        ent = resolve_entitlements(OrgRole.super_admin, 0)
        assert ent[LT.vacation] == D(35)
        assert ent[LT.personal] == D(7)
        assert ent[LT.study_leave] == D(20)

    def test_senior_employee_adds_two_days(self):
        ent = resolve_entitlements(OrgRole.senior_employee, 5)
        assert ent[LT.vacation] == D(27)
        assert ent[LT.study_leave] == D(3)

    def test_unknown_role_falls_through_to_ladder(self):
        assert resolve_entitlements("JANITOR", 5)[LT.vacation] == D(25)
        assert resolve_entitlements(None, 0)[LT.vacation] == D(21)

    def test_role_matching_is_case_insensitive(self):
        assert resolve_entitlements("director", 0)[LT.study_leave] == D(15)

    def test_entitlements_never_negative(self):
        """Every role (and an unknown one) at every tenure yields values ≥ 0."""
        roles = list(OrgRole) + ["UNKNOWN_ROLE", None]
        for role in roles:
            for tenure in range(0, 41):
                ent = resolve_entitlements(role, tenure)
                assert set(ent) == set(LeaveTypeCode)
                assert all(v >= 0 for v in ent.values()), (role, tenure)

    def test_alternate_policy_is_clamped(self):
        """A substituted policy that subtracts too much is clamped to zero."""
        policy = LeavePolicy(
            special_adjustments={
                OrgRole.employee: {LT.personal: Adjustment(AdjustmentMode.add, D(-10))},
            },
        )
        ent = resolve_entitlements(OrgRole.employee, 0, policy=policy)
        assert ent[LT.personal] == D(0)
        assert ent[LT.vacation] == D(21)

    def test_alternate_base_table(self):
        policy = LeavePolicy(base_entitlements={LT.vacation: D(15)}, tenure_ladder=())
        ent = resolve_entitlements(OrgRole.employee, 12, policy=policy)
        assert ent[LT.vacation] == D(15)
        assert ent[LT.sick_leave] == D(0)


class TestEntitlementsFor:
    """Tests for the year-aware wrapper (tenure measured per year)."""

    def test_tenure_measured_at_as_of_within_year(self):
        emp = _make_employee(hire_date=date(2014, 3, 15))
        assert tenure_for_year(emp.hire_date, 2026, date(2026, 3, 15)) == 12
        assert entitlements_for(emp, 2026, date(2026, 3, 15))[LT.vacation] == D(30)

    def test_tenure_capped_at_year_end_for_past_years(self):
        """Verifying 2018 from 2026 uses tenure at 2018-12-31 (4 years)."""
        emp = _make_employee(hire_date=date(2014, 3, 15))
        assert tenure_for_year(emp.hire_date, 2018, date(2026, 6, 1)) == 4
        assert entitlements_for(emp, 2018, date(2026, 6, 1))[LT.vacation] == D(21)

    def test_future_hire_treated_as_zero_service(self):
        emp = _make_employee(hire_date=date(2027, 1, 1))
        assert entitlements_for(emp, 2026, date(2026, 6, 1))[LT.vacation] == D(21)

    def test_director_gets_managerial_tier(self):
        """DIRECTOR hired mid-March, as-of year end → managerial override applies."""
        emp = _make_employee(role=OrgRole.director, hire_date=date(2014, 3, 15))
        ent = entitlements_for(emp, 2026, date(2026, 12, 31))
        assert (ent[LT.vacation], ent[LT.personal], ent[LT.study_leave]) == (D(30), D(5), D(15))


# ═════════════════════════════════════════════════════════════════════
# 2. Accrual calculator
# ═════════════════════════════════════════════════════════════════════


class TestCalculateAccrual:
    """Tests for calculate_accrual()."""

    def test_mid_year_accrual_for_january_hire(self):
        """Hired Jan 1, as of Jul 1 → 6 months, VACATION 21/12 × 6 = 10.5."""
        ent = resolve_entitlements(OrgRole.employee, 0)
        result = calculate_accrual(ent, date(2026, 1, 1), 2026, date(2026, 7, 1))

        assert result.months_worked == D(6)
        assert result.accrued[LT.vacation] == D("10.5")
        assert result.accrued[LT.sick_leave] == D("15.0")
        assert result.accrued[LT.personal] == D("1.5")

    def test_non_accruing_types_available_in_full(self):
        ent = resolve_entitlements(OrgRole.employee, 0)
        result = calculate_accrual(ent, date(2026, 1, 1), 2026, date(2026, 1, 2))
        assert result.accrued[LT.maternity] == D(120)
        assert result.accrued[LT.paternity] == D(10)
        assert result.accrued[LT.bereavement] == D(3)

    def test_zero_entitlement_accruing_type_stays_zero(self):
        """STUDY_LEAVE accrues monthly, but 0 entitlement earns 0, not a phantom amount."""
        ent = resolve_entitlements(OrgRole.employee, 0)
        result = calculate_accrual(ent, date(2026, 1, 1), 2026, date(2026, 12, 1))
        assert result.accrued[LT.study_leave] == D(0)

    def test_hired_after_year_accrues_nothing(self):
        ent = resolve_entitlements(OrgRole.employee, 0)
        result = calculate_accrual(ent, date(2027, 2, 1), 2026, date(2026, 7, 1))
        assert result.months_worked == D(0)
        assert result.accrued[LT.vacation] == D(0)
        assert result.accrued[LT.maternity] == D(120)

    def test_as_of_before_year_accrues_nothing(self):
        ent = resolve_entitlements(OrgRole.employee, 0)
        result = calculate_accrual(ent, date(2020, 1, 1), 2026, date(2025, 12, 1))
        assert result.accrued[LT.vacation] == D(0)

    def test_as_of_after_year_accrues_everything(self):
        ent = resolve_entitlements(OrgRole.employee, 0)
        result = calculate_accrual(ent, date(2020, 1, 1), 2026, date(2027, 2, 1))
        assert result.months_worked == D(12)
        assert result.accrued[LT.vacation] == D("21.0")

    def test_mid_year_hire_prorated(self):
        """Hired Jul 1, as of year end → 6 months of VACATION."""
        ent = resolve_entitlements(OrgRole.employee, 0)
        result = calculate_accrual(ent, date(2026, 7, 1), 2026, date(2027, 1, 1))
        assert result.accrued[LT.vacation] == D("10.5")

    def test_approximate_formula_can_be_substituted(self):
        """181 / 30.44 months → 21/12 × 5.946 = 10.41 → 10.4."""
        ent = resolve_entitlements(OrgRole.employee, 0)
        result = calculate_accrual(
            ent, date(2026, 1, 1), 2026, date(2026, 7, 1),
            month_fraction=approximate_months_elapsed,
        )
        assert result.accrued[LT.vacation] == D("10.4")

    def test_accrual_bounded_by_entitlement(self):
        """For every day of the year: 0 ≤ accrued ≤ entitlement for accruing types."""
        for role in (OrgRole.employee, OrgRole.director, OrgRole.intern, OrgRole.super_admin):
            ent = resolve_entitlements(role, 7)
            day = date(2026, 1, 1)
            while day <= date(2026, 12, 31):
                result = calculate_accrual(ent, date(2026, 1, 1), 2026, day)
                assert D(0) <= result.months_worked <= D(12)
                for lt in DEFAULT_POLICY.accruing_types:
                    assert D(0) <= result.accrued[lt] <= ent[lt], (role, day, lt)
                day += timedelta(days=1)

    def test_months_worked_for_mid_year_hire(self):
        assert months_worked_in_year(date(2026, 7, 1), 2026, date(2026, 10, 1)) == D(3)


class TestRoundDays:
    """Tests for one-decimal rounding."""

    def test_half_rounds_up(self):
        assert round_days(D("10.45")) == D("10.5")
        assert round_days(D("10.44")) == D("10.4")
        assert round_days(D("2.25")) == D("2.3")


# ═════════════════════════════════════════════════════════════════════
# 3. Carry-over calculator
# ═════════════════════════════════════════════════════════════════════


class TestCarryOver:
    """Tests for calculate_carry_over() and carry_over_cap()."""

    def test_unused_above_cap_is_capped(self):
        """21 entitled, 10 used → 11 unused, cap min(5, 7) = 5."""
        carry = calculate_carry_over({LT.vacation: D(21)}, {LT.vacation: D(10)})
        assert carry[LT.vacation] == D(5)

    def test_unused_below_cap_carries_in_full(self):
        carry = calculate_carry_over({LT.vacation: D(21)}, {LT.vacation: D(19)})
        assert carry[LT.vacation] == D(2)

    def test_half_day_unused(self):
        carry = calculate_carry_over({LT.vacation: D(21)}, {LT.vacation: D("18.5")})
        assert carry[LT.vacation] == D("2.5")

    def test_overuse_carries_nothing(self):
        carry = calculate_carry_over({LT.vacation: D(21)}, {LT.vacation: D(25)})
        assert carry[LT.vacation] == D(0)

    def test_small_entitlement_cap_is_a_third(self):
        """12 entitled → cap floor(12/3) = 4."""
        carry = calculate_carry_over({LT.vacation: D(12)}, {})
        assert carry[LT.vacation] == D(4)

    def test_other_types_never_carry(self):
        carry = calculate_carry_over(
            {LT.vacation: D(21), LT.sick_leave: D(30), LT.personal: D(3)}, {},
        )
        assert all(v == 0 for lt, v in carry.items() if lt is not LT.vacation)
        assert set(carry) == set(LeaveTypeCode)

    def test_cap_values(self):
        assert carry_over_cap(D(21)) == D(5)
        assert carry_over_cap(D(9)) == D(3)
        assert carry_over_cap(D(2)) == D(0)
        assert carry_over_cap(D(0)) == D(0)

    def test_carry_over_bounded(self):
        """0 ≤ carry ≤ min(5, floor(E/3)) across entitlements and usage."""
        for entitled in range(0, 40):
            for used in (0, 1, 5, 10, 20, 30, 45):
                carry = calculate_carry_over(
                    {LT.vacation: D(entitled)}, {LT.vacation: D(used)},
                )[LT.vacation]
                assert D(0) <= carry <= min(D(5), D(entitled // 3))


# ═════════════════════════════════════════════════════════════════════
# 4. Usage aggregator
# ═════════════════════════════════════════════════════════════════════


class TestGroupDaysByType:
    """Tests for group_days_by_type()."""

    def test_sums_per_type_including_half_days(self):
        emp = _make_employee()
        records = [
            _make_request(emp.id, total_days="3"),
            _make_request(emp.id, total_days="0.5"),
            _make_request(emp.id, leave_type=LT.sick_leave, total_days="2"),
        ]
        totals = group_days_by_type(records)
        assert totals[LT.vacation] == D("3.5")
        assert totals[LT.sick_leave] == D(2)
        assert totals[LT.maternity] == D(0)
        assert total_days(totals) == D("5.5")

    def test_missing_total_days_counts_as_zero(self, caplog):
        """Null totals are coerced to 0 and logged, never raised."""
        emp = _make_employee()
        records = [
            _make_request(emp.id, total_days=None),
            _make_request(emp.id, total_days="2"),
        ]
        with caplog.at_level(logging.WARNING, logger="leave_engine.leave.usage"):
            totals = group_days_by_type(records)

        assert totals[LT.vacation] == D(2)
        assert "no total_days" in caplog.text

    def test_empty_input(self):
        assert group_days_by_type([]) == empty_days()


class TestSumDaysByType:
    """Tests for sum_days_by_type() over the in-memory source."""

    async def test_filters_status_window_and_employee(self):
        emp = _make_employee()
        other = _make_employee(name="Other Person")
        source = InMemoryLeaveRequestSource([
            _make_request(emp.id, total_days="2"),
            _make_request(emp.id, total_days="1", status=LeaveStatus.pending),
            _make_request(emp.id, total_days="4", status=LeaveStatus.rejected),
            _make_request(emp.id, total_days="5", start_date=date(2025, 12, 31)),
            _make_request(emp.id, total_days="1", start_date=date(2026, 12, 31)),
            _make_request(other.id, total_days="9"),
        ])

        approved = await sum_days_by_type(source, emp.id, LeaveStatus.approved, year_window(2026))
        pending = await sum_days_by_type(source, emp.id, LeaveStatus.pending, year_window(2026))

        assert approved[LT.vacation] == D(3)
        assert pending[LT.vacation] == D(1)

    async def test_source_accepts_plain_dicts(self):
        source = InMemoryLeaveRequestSource([
            {
                "employee_id": "emp-1",
                "leave_type": "SICK_LEAVE",
                "start_date": date(2026, 5, 4),
                "total_days": 1.5,
                "status": "APPROVED",
            },
        ])
        totals = await sum_days_by_type(source, "emp-1", LeaveStatus.approved, year_window(2026))
        assert totals[LT.sick_leave] == D("1.5")
        assert len(source) == 1
