from sqlmodel import SQLModel

from hr_vacations.models.audit import AuditLog
from hr_vacations.models.balance import DEFAULT_ALLOTMENT_DAYS, VacationBalance
from hr_vacations.models.base import TimestampMixin, UUIDBase
from hr_vacations.models.employee import Employee
from hr_vacations.models.enums import (
    AuditAction,
    AuditEntityType,
    EmployeeStatus,
    RequestStatus,
    Role,
)
from hr_vacations.models.request import VacationRequest

__all__ = [
    "DEFAULT_ALLOTMENT_DAYS",
    "AuditAction",
    "AuditEntityType",
    "AuditLog",
    "Employee",
    "EmployeeStatus",
    "RequestStatus",
    "Role",
    "SQLModel",
    "TimestampMixin",
    "UUIDBase",
    "VacationBalance",
    "VacationRequest",
]
