"""Shared test fixtures — employee / leave-request factories and in-memory collaborators.

Reusable across all test modules (calendar, entitlement, balances, verification).
No database: the engine only ever sees collaborator protocols, so tests use
the list- and dict-backed implementations from ``leave_engine.leave.sources``.
"""

from __future__ import annotations

import uuid
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional, Union

import pytest

from leave_engine.common.constants import LeaveStatus, LeaveTypeCode, OrgRole
from leave_engine.leave.schemas import EmployeeProfile, LeaveRequestRecord
from leave_engine.leave.sources import (
    InMemoryEmployeeDirectory,
    InMemoryLeaveRequestSource,
)


# ── Model factories ─────────────────────────────────────────────────

def _make_employee(
    *,
    name: str = "Thandi Nkosi",
    department: str = "Finance",
    hire_date: date = date(2024, 1, 1),
    role: Union[OrgRole, str, None] = OrgRole.employee,
) -> EmployeeProfile:
    return EmployeeProfile(
        id=uuid.uuid4(),
        name=name,
        employee_number=f"EMP-{uuid.uuid4().hex[:6].upper()}",
        department=department,
        hire_date=hire_date,
        role=role,
    )


def _make_request(
    employee_id,
    *,
    leave_type: LeaveTypeCode = LeaveTypeCode.vacation,
    start_date: date = date(2026, 3, 2),
    total_days: Optional[Union[str, int, Decimal]] = "1",
    status: LeaveStatus = LeaveStatus.approved,
) -> LeaveRequestRecord:
    return LeaveRequestRecord(
        employee_id=employee_id,
        leave_type=leave_type,
        start_date=start_date,
        end_date=start_date,
        total_days=Decimal(str(total_days)) if total_days is not None else None,
        status=status,
        created_at=datetime.now(timezone.utc),
    )


class FailingSource:
    """Leave-request store whose every read fails."""

    async def fetch_requests(self, employee_id, *, start, end, statuses=None):
        raise RuntimeError("leave store unavailable")


# ── Fixtures ────────────────────────────────────────────────────────

@pytest.fixture
def employee() -> EmployeeProfile:
    """Plain EMPLOYEE hired 2024-01-01."""
    return _make_employee()


@pytest.fixture
def source() -> InMemoryLeaveRequestSource:
    return InMemoryLeaveRequestSource()


@pytest.fixture
def directory(employee) -> InMemoryEmployeeDirectory:
    return InMemoryEmployeeDirectory([employee])
