"""Employee directory: lookups used by the vacation workflow plus admin CRUD.

Employees are never deleted. Deactivation flips ``status`` to ``inactive`` and
leaves balances and requests in place.
"""

# ruff: noqa: TC003
from __future__ import annotations

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import aliased
from sqlmodel import col

from hr_vacations.exceptions import ConflictError, NotFoundError, ValidationError
from hr_vacations.models.employee import Employee
from hr_vacations.models.enums import AuditAction, AuditEntityType, EmployeeStatus
from hr_vacations.schemas.employee import EmployeeListResponse, EmployeeResponse
from hr_vacations.services.audit import model_to_audit_dict, write_audit_log

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncSession

    from hr_vacations.schemas.auth import AuthContext
    from hr_vacations.schemas.employee import CreateEmployeeRequest, EmployeePatch


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _build_employee_response(employee: Employee, manager: Employee | None = None) -> EmployeeResponse:
    """Map an employee model to its response schema."""
    return EmployeeResponse(
        id=employee.id,
        user_id=employee.user_id,
        first_name=employee.first_name,
        last_name=employee.last_name,
        email=employee.email,
        department=employee.department,
        position=employee.position,
        hire_date=employee.hire_date,
        phone=employee.phone,
        address=employee.address,
        salary=employee.salary,
        manager_id=employee.manager_id,
        manager_first_name=manager.first_name if manager else None,
        manager_last_name=manager.last_name if manager else None,
        status=EmployeeStatus(employee.status),
        created_at=employee.created_at,
        updated_at=employee.updated_at,
    )


async def _get_employee_or_404(session: AsyncSession, employee_id: uuid.UUID) -> Employee:
    result = await session.execute(select(Employee).where(col(Employee.id) == employee_id))
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFoundError("Employee not found")
    return employee


async def _get_manager(session: AsyncSession, manager_id: uuid.UUID | None) -> Employee | None:
    if manager_id is None:
        return None
    result = await session.execute(select(Employee).where(col(Employee.id) == manager_id))
    manager = result.scalar_one_or_none()
    if manager is None:
        raise NotFoundError("Manager not found")
    return manager


async def _check_unique_fields(
    session: AsyncSession,
    email: str | None,
    user_id: uuid.UUID | None,
    exclude_id: uuid.UUID | None = None,
) -> None:
    """Raise 409 if another employee already uses the email or user_id."""
    clauses = []
    if email is not None:
        clauses.append(col(Employee.email) == email)
    if user_id is not None:
        clauses.append(col(Employee.user_id) == user_id)
    if not clauses:
        return

    query = select(Employee).where(or_(*clauses))
    if exclude_id is not None:
        query = query.where(col(Employee.id) != exclude_id)
    result = await session.execute(query.limit(1))
    if result.scalar_one_or_none() is not None:
        raise ConflictError("An employee with this email or user already exists")


async def _check_manager_chain(session: AsyncSession, employee_id: uuid.UUID, manager_id: uuid.UUID) -> None:
    """Reject a manager assignment that would make the hierarchy cyclic.

    Walks up from the proposed manager; reaching ``employee_id`` means the
    employee would end up managing themselves transitively.
    """
    if manager_id == employee_id:
        raise ValidationError("An employee cannot be their own manager")

    seen: set[uuid.UUID] = set()
    current: uuid.UUID | None = manager_id
    while current is not None and current not in seen:
        if current == employee_id:
            raise ValidationError("Manager assignment would create a reporting cycle")
        seen.add(current)
        result = await session.execute(select(col(Employee.manager_id)).where(col(Employee.id) == current))
        current = result.scalar_one_or_none()


# ---------------------------------------------------------------------------
# Lookups used by the vacation workflow
# ---------------------------------------------------------------------------


async def get_employee_for_user(session: AsyncSession, user_id: uuid.UUID) -> Employee:
    """Resolve the employee record linked to an authenticated user."""
    result = await session.execute(select(Employee).where(col(Employee.user_id) == user_id))
    employee = result.scalar_one_or_none()
    if employee is None:
        raise NotFoundError("Employee record not found")
    return employee


# ---------------------------------------------------------------------------
# Read path
# ---------------------------------------------------------------------------


async def get_employee(session: AsyncSession, employee_id: uuid.UUID) -> EmployeeResponse:
    employee = await _get_employee_or_404(session, employee_id)
    manager = await _get_manager(session, employee.manager_id)
    return _build_employee_response(employee, manager)


async def list_employees(session: AsyncSession, include_inactive: bool = False) -> EmployeeListResponse:
    """List employees with their manager's name, ordered by last then first name."""
    manager = aliased(Employee)
    query = select(Employee, manager).outerjoin(manager, col(Employee.manager_id) == manager.id)
    if not include_inactive:
        query = query.where(col(Employee.status) == EmployeeStatus.ACTIVE.value)
    query = query.order_by(col(Employee.last_name), col(Employee.first_name))

    result = await session.execute(query)
    items = [_build_employee_response(employee, mgr) for employee, mgr in result.all()]
    return EmployeeListResponse(items=items, total=len(items))


# ---------------------------------------------------------------------------
# Write path (admin)
# ---------------------------------------------------------------------------


async def create_employee(
    session: AsyncSession,
    auth: AuthContext,
    payload: CreateEmployeeRequest,
) -> EmployeeResponse:
    await _check_unique_fields(session, payload.email, payload.user_id)
    manager = await _get_manager(session, payload.manager_id)

    employee = Employee(**payload.model_dump())
    session.add(employee)
    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("An employee with this email or user already exists") from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EMPLOYEE,
        entity_id=employee.id,
        action=AuditAction.CREATE,
        after_json=model_to_audit_dict(employee),
    )

    await session.commit()
    await session.refresh(employee)
    return _build_employee_response(employee, manager)


async def update_employee(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID,
    patch: EmployeePatch,
) -> EmployeeResponse:
    """Apply the fields present in ``patch`` to an employee."""
    employee = await _get_employee_or_404(session, employee_id)
    changes = patch.model_dump(exclude_unset=True)

    for required in ("first_name", "last_name", "email", "status"):
        if required in changes and changes[required] is None:
            raise ValidationError(f"{required} cannot be null")

    if "email" in changes:
        await _check_unique_fields(session, changes["email"], None, exclude_id=employee.id)
    if changes.get("manager_id") is not None:
        await _get_manager(session, changes["manager_id"])
        await _check_manager_chain(session, employee.id, changes["manager_id"])

    before_dict = model_to_audit_dict(employee)
    for key, value in changes.items():
        setattr(employee, key, value)

    try:
        await session.flush()
    except IntegrityError:
        await session.rollback()
        raise ConflictError("An employee with this email or user already exists") from None

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EMPLOYEE,
        entity_id=employee.id,
        action=AuditAction.UPDATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(employee),
    )

    await session.commit()
    await session.refresh(employee)
    manager = await _get_manager(session, employee.manager_id)
    return _build_employee_response(employee, manager)


async def deactivate_employee(
    session: AsyncSession,
    auth: AuthContext,
    employee_id: uuid.UUID,
) -> EmployeeResponse:
    """Soft-delete: mark the employee inactive, keeping all history."""
    employee = await _get_employee_or_404(session, employee_id)
    if employee.status == EmployeeStatus.INACTIVE.value:
        raise ConflictError("Employee is already inactive")

    before_dict = model_to_audit_dict(employee)
    employee.status = EmployeeStatus.INACTIVE.value
    await session.flush()

    await write_audit_log(
        session,
        actor_id=auth.user_id,
        entity_type=AuditEntityType.EMPLOYEE,
        entity_id=employee.id,
        action=AuditAction.DEACTIVATE,
        before_json=before_dict,
        after_json=model_to_audit_dict(employee),
    )

    await session.commit()
    await session.refresh(employee)
    manager = await _get_manager(session, employee.manager_id)
    return _build_employee_response(employee, manager)
