# ruff: noqa: B008, TC001, TC003
from __future__ import annotations

import uuid

from fastapi import APIRouter, Query, status

from hr_vacations.api.deps import AdminDep, AuthDep
from hr_vacations.db import SessionDep
from hr_vacations.schemas.balance import BalanceResponse
from hr_vacations.schemas.employee import (
    CreateEmployeeRequest,
    EmployeeListResponse,
    EmployeePatch,
    EmployeeResponse,
)
from hr_vacations.services import balance as balance_service
from hr_vacations.services import employee as employee_service

employees_router = APIRouter(prefix="/employees", tags=["employees"])


@employees_router.get("", response_model=EmployeeListResponse)
async def list_employees(
    session: SessionDep,
    auth: AuthDep,
    include_inactive: bool = Query(default=False),
) -> EmployeeListResponse:
    """List employees (active only unless requested)."""
    return await employee_service.list_employees(session, include_inactive)


@employees_router.post("", response_model=EmployeeResponse, status_code=status.HTTP_201_CREATED)
async def create_employee(
    payload: CreateEmployeeRequest,
    session: SessionDep,
    auth: AdminDep,
) -> EmployeeResponse:
    """Create an employee (admin only)."""
    return await employee_service.create_employee(session, auth, payload)


@employees_router.get("/{employee_id}", response_model=EmployeeResponse)
async def get_employee(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AuthDep,
) -> EmployeeResponse:
    return await employee_service.get_employee(session, employee_id)


@employees_router.patch("/{employee_id}", response_model=EmployeeResponse)
async def update_employee(
    employee_id: uuid.UUID,
    payload: EmployeePatch,
    session: SessionDep,
    auth: AdminDep,
) -> EmployeeResponse:
    """Apply a partial update to an employee (admin only)."""
    return await employee_service.update_employee(session, auth, employee_id, payload)


@employees_router.delete("/{employee_id}", response_model=EmployeeResponse)
async def deactivate_employee(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
) -> EmployeeResponse:
    """Mark an employee inactive (admin only). History is kept."""
    return await employee_service.deactivate_employee(session, auth, employee_id)


@employees_router.get("/{employee_id}/balance", response_model=BalanceResponse)
async def get_employee_balance(
    employee_id: uuid.UUID,
    session: SessionDep,
    auth: AdminDep,
    year: int | None = Query(default=None, ge=1970, le=9999),
) -> BalanceResponse:
    """Get any employee's vacation balance (admin only)."""
    return await balance_service.get_employee_balance(session, employee_id, year)
