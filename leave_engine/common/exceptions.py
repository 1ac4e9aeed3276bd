"""Custom exceptions and RFC 7807 Problem Detail bodies.

The engine has no HTTP layer of its own; callers that expose it over HTTP
render failures with ``AppException.to_problem_detail``.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Optional

BASE_ERROR_URI = "https://hr.example.com/errors"


# ── Exception hierarchy ─────────────────────────────────────────────

class AppException(Exception):
    """Base for all engine exceptions → RFC 7807 JSON."""

    def __init__(
        self,
        status_code: int,
        error_type: str,
        title: str,
        detail: str,
        errors: Optional[dict[str, Any]] = None,
    ) -> None:
        self.status_code = status_code
        self.error_type = error_type
        self.title = title
        self.detail = detail
        self.errors = errors
        super().__init__(detail)

    def to_problem_detail(self, instance: Optional[str] = None) -> dict[str, Any]:
        return _build_problem_detail(self, instance)


class NotFoundException(AppException):
    """404 — entity not found."""

    def __init__(self, entity_type: str, entity_id: Any) -> None:
        super().__init__(
            status_code=404,
            error_type="not-found",
            title=f"{entity_type} Not Found",
            detail=f"{entity_type} with id '{entity_id}' does not exist.",
        )


class ValidationException(AppException):
    """422 — business-logic validation failures."""

    def __init__(
        self,
        errors: dict[str, list[str]],
        detail: str = "One or more fields failed validation.",
    ) -> None:
        super().__init__(
            status_code=422,
            error_type="validation-error",
            title="Validation Error",
            detail=detail,
            errors=errors,
        )


class InvalidRangeError(ValidationException):
    """422 — a date window whose end falls before its start."""

    def __init__(self, start: date, end: date) -> None:
        self.start = start
        self.end = end
        super().__init__(
            {"end": [f"{end.isoformat()} is before {start.isoformat()}."]},
            detail=f"Invalid date range: {start.isoformat()} → {end.isoformat()}.",
        )
        self.error_type = "invalid-range"


class MissingEmployeeError(NotFoundException):
    """404 — the employee directory has no record for the requested id."""

    def __init__(self, employee_id: Any) -> None:
        super().__init__("Employee", employee_id)
        self.employee_id = employee_id
        self.detail = (
            f"Cannot compute leave balance: employee '{employee_id}' does not exist."
        )
        self.args = (self.detail,)


# ── RFC 7807 builder ────────────────────────────────────────────────

def _build_problem_detail(
    exc: AppException,
    instance: Optional[str] = None,
) -> dict[str, Any]:
    body: dict[str, Any] = {
        "type": f"{BASE_ERROR_URI}/{exc.error_type}",
        "title": exc.title,
        "status": exc.status_code,
        "detail": exc.detail,
    }
    if instance:
        body["instance"] = instance
    if exc.errors:
        body["errors"] = exc.errors
    return body
