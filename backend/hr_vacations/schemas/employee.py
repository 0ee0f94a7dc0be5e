# ruff: noqa: TC001, TC003
from __future__ import annotations

import uuid
from datetime import date, datetime
from decimal import Decimal

from pydantic import BaseModel, Field

from hr_vacations.models.enums import EmployeeStatus


class CreateEmployeeRequest(BaseModel):
    """Request body for creating an employee."""

    user_id: uuid.UUID | None = None
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    department: str | None = Field(default=None, max_length=100)
    position: str | None = Field(default=None, max_length=100)
    hire_date: date | None = None
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=255)
    salary: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    manager_id: uuid.UUID | None = None


class EmployeePatch(BaseModel):
    """Partial update for an employee.

    Only fields explicitly present in the payload are applied, so sending
    ``"manager_id": null`` clears the manager while omitting it leaves the
    current value untouched.
    """

    first_name: str | None = Field(default=None, min_length=1, max_length=100)
    last_name: str | None = Field(default=None, min_length=1, max_length=100)
    email: str | None = Field(default=None, min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    department: str | None = Field(default=None, max_length=100)
    position: str | None = Field(default=None, max_length=100)
    hire_date: date | None = None
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=255)
    salary: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    manager_id: uuid.UUID | None = None
    status: EmployeeStatus | None = None


class EmployeeResponse(BaseModel):
    """Response schema for an employee."""

    id: uuid.UUID
    user_id: uuid.UUID | None
    first_name: str
    last_name: str
    email: str
    department: str | None
    position: str | None
    hire_date: date | None
    phone: str | None
    address: str | None
    salary: Decimal | None
    manager_id: uuid.UUID | None
    manager_first_name: str | None = None
    manager_last_name: str | None = None
    status: EmployeeStatus
    created_at: datetime
    updated_at: datetime


class EmployeeListResponse(BaseModel):
    """List of employees."""

    items: list[EmployeeResponse]
    total: int
