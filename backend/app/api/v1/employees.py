import logging
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from app.api.deps import get_employee_service
from app.core.exceptions import CompensationAlreadyExistsError, validation_problem
from app.schemas.employee import (
    Compensation,
    CompensationCreate,
    Employee,
    EmployeeCreate,
    EmployeeUpdate,
)
from app.schemas.reporting import ReportingStructure
from app.services.employee_service import EmployeeService

logger = logging.getLogger("personnel.api.employees")

router = APIRouter()

# Error key used for every compensation validation failure
EMPLOYEE_ID_FIELD = "EmployeeId"

_VALIDATION_RESPONSES = {
    status.HTTP_400_BAD_REQUEST: {
        "description": "Field-keyed validation errors",
        "content": {"application/json": {"example": {EMPLOYEE_ID_FIELD: ["EmployeeId is required."]}}},
    }
}


def _employee_not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="Employee not found",
    )


@router.post("", response_model=Employee, status_code=status.HTTP_201_CREATED, responses=_VALIDATION_RESPONSES)
async def create_employee(
    employee: EmployeeCreate,
    request: Request,
    response: Response,
    service: EmployeeService = Depends(get_employee_service),
) -> Any:
    """
    Create an employee. The server assigns the id.
    """
    logger.debug(f"Received employee create request for '{employee.first_name} {employee.last_name}'")

    created = await service.create(employee)
    response.headers["Location"] = str(request.url_for("get_employee_by_id", employee_id=created.employee_id))
    return created


@router.post(
    "/compensation",
    response_model=Compensation,
    status_code=status.HTTP_201_CREATED,
    responses=_VALIDATION_RESPONSES,
)
async def create_compensation(
    compensation: CompensationCreate,
    request: Request,
    response: Response,
    service: EmployeeService = Depends(get_employee_service),
) -> Any:
    """
    Create an employee's compensation.

    Checked in order, stopping at the first failure: the employee id is
    present, the employee exists, and the employee has no compensation yet.
    """
    employee_id = compensation.employee_id
    if not employee_id:
        return validation_problem({EMPLOYEE_ID_FIELD: ["EmployeeId is required."]})

    logger.debug(f"Received compensation create request for employee '{employee_id}'")

    if not await service.employee_exists(employee_id):
        return validation_problem({EMPLOYEE_ID_FIELD: [f"Employee '{employee_id}' does not exist."]})

    if await service.compensation_exists(employee_id):
        return validation_problem(
            {EMPLOYEE_ID_FIELD: [f"Compensation for employee '{employee_id}' already exists."]}
        )

    try:
        created = await service.create_compensation(compensation)
    except CompensationAlreadyExistsError as e:
        return validation_problem({EMPLOYEE_ID_FIELD: [str(e)]})

    response.headers["Location"] = str(
        request.url_for("get_compensation_by_employee_id", employee_id=created.employee_id)
    )
    return created


@router.get("/{employee_id}", response_model=Employee)
async def get_employee_by_id(
    employee_id: str,
    service: EmployeeService = Depends(get_employee_service),
) -> Any:
    """
    Get employee by ID.
    """
    logger.debug(f"Received employee get request for '{employee_id}'")

    employee = await service.get_by_id(employee_id)
    if employee is None:
        raise _employee_not_found()
    return employee


@router.put("/{employee_id}", response_model=Employee)
async def update_employee(
    employee_id: str,
    employee: EmployeeUpdate,
    service: EmployeeService = Depends(get_employee_service),
) -> Any:
    """
    Replace an employee. Every attribute, direct reports included, is
    overwritten; the id comes from the path.
    """
    logger.debug(f"Received employee update request for '{employee_id}'")

    existing = await service.get_by_id(employee_id)
    if existing is None:
        raise _employee_not_found()

    replacement = Employee(
        employee_id=employee_id,
        compensation=existing.compensation,
        **employee.model_dump(),
    )
    return await service.update(replacement)


@router.get("/{employee_id}/reporting-structure", response_model=ReportingStructure)
async def get_employee_reporting_structure(
    employee_id: str,
    service: EmployeeService = Depends(get_employee_service),
) -> Any:
    """
    Get an employee together with the number of direct and indirect reports.
    """
    logger.debug(f"Received reporting structure get request for '{employee_id}'")

    reporting_structure = await service.get_reporting_structure(employee_id)
    if reporting_structure is None:
        raise _employee_not_found()
    return reporting_structure


@router.get("/{employee_id}/compensation", response_model=Compensation)
async def get_compensation_by_employee_id(
    employee_id: str,
    service: EmployeeService = Depends(get_employee_service),
) -> Any:
    """
    Get an employee's compensation.
    """
    logger.debug(f"Received compensation get request for employee '{employee_id}'")

    compensation = await service.get_compensation_by_employee_id(employee_id)
    if compensation is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Compensation not found",
        )
    return compensation
