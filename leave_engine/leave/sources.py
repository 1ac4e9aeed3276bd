"""External collaborators the engine reads from, plus in-memory implementations.

The engine never writes to either store. Any exception raised by a source
propagates unchanged and fails the calculation that issued the read.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Collection, Iterable, Optional, Protocol, Sequence

from leave_engine.common.constants import LeaveStatus
from leave_engine.leave.schemas import EmployeeId, EmployeeProfile, LeaveRequestRecord


class LeaveRequestSource(Protocol):
    """Leave-request store query: one employee, a start-date window, optional statuses."""

    async def fetch_requests(
        self,
        employee_id: EmployeeId,
        *,
        start: date,
        end: date,
        statuses: Optional[Collection[LeaveStatus]] = None,
    ) -> Sequence[LeaveRequestRecord]:
        ...


class EmployeeDirectory(Protocol):
    """Employee directory lookup; None when the id is unknown."""

    async def get_employee(self, employee_id: EmployeeId) -> Optional[EmployeeProfile]:
        ...


class InMemoryLeaveRequestSource:
    """List-backed ``LeaveRequestSource``; accepts records, dicts or ORM-like rows."""

    def __init__(self, records: Iterable[Any] = ()) -> None:
        self._records: list[LeaveRequestRecord] = []
        for record in records:
            self.add(record)

    def add(self, record: Any) -> LeaveRequestRecord:
        validated = LeaveRequestRecord.model_validate(record)
        self._records.append(validated)
        return validated

    def __len__(self) -> int:
        return len(self._records)

    async def fetch_requests(
        self,
        employee_id: EmployeeId,
        *,
        start: date,
        end: date,
        statuses: Optional[Collection[LeaveStatus]] = None,
    ) -> list[LeaveRequestRecord]:
        wanted = set(statuses) if statuses is not None else None
        return [
            r
            for r in self._records
            if str(r.employee_id) == str(employee_id)
            and start <= r.start_date <= end
            and (wanted is None or r.status in wanted)
        ]


class InMemoryEmployeeDirectory:
    """Dict-backed ``EmployeeDirectory`` keyed by ``str(id)``."""

    def __init__(self, employees: Iterable[Any] = ()) -> None:
        self._employees: dict[str, EmployeeProfile] = {}
        for employee in employees:
            profile = EmployeeProfile.model_validate(employee)
            self._employees[str(profile.id)] = profile

    async def get_employee(self, employee_id: EmployeeId) -> Optional[EmployeeProfile]:
        return self._employees.get(str(employee_id))
