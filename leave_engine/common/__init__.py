"""Common module — shared enums and exceptions for the leave engine."""

from leave_engine.common.constants import (
    DATE_FORMAT,
    IssueType,
    LeaveStatus,
    LeaveTypeCode,
    MonthFormula,
    OrgRole,
    Priority,
    RecommendationType,
    Severity,
)
from leave_engine.common.exceptions import (
    AppException,
    InvalidRangeError,
    MissingEmployeeError,
    NotFoundException,
    ValidationException,
)

__all__ = [
    # Constants / Enums
    "DATE_FORMAT",
    "IssueType",
    "LeaveStatus",
    "LeaveTypeCode",
    "MonthFormula",
    "OrgRole",
    "Priority",
    "RecommendationType",
    "Severity",
    # Exceptions
    "AppException",
    "InvalidRangeError",
    "MissingEmployeeError",
    "NotFoundException",
    "ValidationException",
]
