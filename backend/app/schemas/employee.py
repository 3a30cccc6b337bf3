"""
Wire and value schemas for employees and compensation.

Field names are snake_case in Python and camelCase on the wire; input
accepts either spelling.
"""
from datetime import date
from decimal import Decimal
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PlainSerializer, field_validator
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


# Decimal on the way in, JSON number on the way out; bounded by the Numeric(12, 2) column
Salary = Annotated[
    Decimal,
    Field(ge=0, max_digits=12, decimal_places=2),
    PlainSerializer(float, return_type=float, when_used="json"),
]


class CompensationBase(CamelModel):
    salary: Salary
    effective_date: date


class CompensationCreate(CompensationBase):
    """Request body for POST /employee/compensation.

    employee_id is optional here so that a missing value reaches the
    ordered validation in the router instead of failing schema parsing.
    """
    employee_id: Optional[str] = None


class Compensation(CompensationBase):
    compensation_id: str
    employee_id: str


class EmployeeBase(CamelModel):
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    position: Optional[str] = None
    department: Optional[str] = None
    direct_reports: List[str] = Field(default_factory=list)

    @field_validator("direct_reports", mode="before")
    @classmethod
    def _report_ids(cls, value: Any) -> Any:
        # Accept [{"employeeId": "..."}] as well as plain id strings
        if value is None:
            return []
        if isinstance(value, list):
            return [
                item.get("employeeId") or item.get("employee_id") if isinstance(item, dict) else item
                for item in value
            ]
        return value


class EmployeeCreate(EmployeeBase):
    """Request body for POST /employee. Any client-supplied id is ignored."""


class EmployeeUpdate(EmployeeBase):
    """Request body for PUT /employee/{id}. Replaces every attribute."""


class Employee(EmployeeBase):
    employee_id: str
    compensation: Optional[Compensation] = None
