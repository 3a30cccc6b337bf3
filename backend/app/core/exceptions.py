"""
Domain errors and the field-keyed validation response used by the HTTP layer.
"""

import logging
from typing import Dict, List

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger("personnel.errors")


class PersonnelError(Exception):
    """Base class for errors raised by the domain layer."""


class CompensationAlreadyExistsError(PersonnelError):
    """Raised when the store rejects a second compensation for one employee."""

    def __init__(self, employee_id: str):
        self.employee_id = employee_id
        super().__init__(f"Compensation for employee '{employee_id}' already exists.")


def validation_problem(errors: Dict[str, List[str]]) -> JSONResponse:
    """Build a 400 response whose body maps field names to their messages."""
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=errors)


def _field_name(loc: tuple) -> str:
    # ("body", "employeeId") -> "EmployeeId"; a body-level error has no field part
    parts = [str(part) for part in loc if part not in ("body", "query", "path")]
    if not parts:
        return "Body"
    name = parts[-1]
    return name[:1].upper() + name[1:]


async def request_validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies with the same field-keyed 400 shape."""
    errors: Dict[str, List[str]] = {}
    for error in exc.errors():
        errors.setdefault(_field_name(tuple(error["loc"])), []).append(error["msg"])

    logger.warning(
        f"Request validation failed: {len(errors)} field(s)",
        extra={"path": request.url.path, "method": request.method},
    )
    return validation_problem(errors)
