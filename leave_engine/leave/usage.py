"""Usage aggregation — leave-request rows reduced into per-type day totals.

Missing ``total_days`` values count as zero and are logged as a data-quality
warning, never raised.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Iterable, Mapping

from leave_engine.common.constants import ZERO, LeaveStatus, LeaveTypeCode
from leave_engine.common.dates import YearWindow
from leave_engine.leave.schemas import EmployeeId, LeaveDays, LeaveRequestRecord
from leave_engine.leave.sources import LeaveRequestSource

logger = logging.getLogger(__name__)


def empty_days() -> LeaveDays:
    return {lt: ZERO for lt in LeaveTypeCode}


def group_days_by_type(records: Iterable[LeaveRequestRecord]) -> LeaveDays:
    """Sum ``total_days`` per leave type; every type is present in the result."""
    totals = empty_days()
    for record in records:
        if record.total_days is None:
            logger.warning(
                "Data quality: %s leave for employee %s starting %s has no total_days; counting 0",
                record.leave_type.value,
                record.employee_id,
                record.start_date,
            )
            continue
        totals[record.leave_type] += record.total_days
    return totals


def total_days(days: Mapping[LeaveTypeCode, Decimal]) -> Decimal:
    return sum(days.values(), ZERO)


async def sum_days_by_type(
    source: LeaveRequestSource,
    employee_id: EmployeeId,
    status: LeaveStatus,
    window: YearWindow,
) -> LeaveDays:
    """Per-type totals of ``status`` requests starting inside ``window``."""
    records = await source.fetch_requests(
        employee_id,
        start=window.start,
        end=window.end,
        statuses=(status,),
    )
    totals = group_days_by_type(records)
    logger.debug(
        "Aggregated %d %s request(s) for employee %s in %d",
        len(records),
        status.value,
        employee_id,
        window.year,
    )
    return totals
