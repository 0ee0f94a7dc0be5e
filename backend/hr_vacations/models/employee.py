# ruff: noqa: TC003
from __future__ import annotations

import uuid
from datetime import date
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from hr_vacations.models.base import TimestampMixin, UUIDBase
from hr_vacations.models.enums import EmployeeStatus


class Employee(UUIDBase, TimestampMixin, table=True):
    """Directory entry for a person. Owns vacation requests and balances."""

    __tablename__ = "employees"

    user_id: uuid.UUID | None = Field(default=None, unique=True, index=True)
    first_name: str = Field(max_length=100)
    last_name: str = Field(max_length=100)
    email: str = Field(max_length=255, unique=True)
    department: str | None = Field(default=None, max_length=100)
    position: str | None = Field(default=None, max_length=100)
    hire_date: date | None = None
    phone: str | None = Field(default=None, max_length=50)
    address: str | None = Field(default=None, max_length=255)
    salary: Decimal | None = Field(default=None, max_digits=10, decimal_places=2)
    manager_id: uuid.UUID | None = Field(
        default=None,
        sa_column=sa.Column(sa.Uuid, sa.ForeignKey("employees.id"), nullable=True, index=True),
    )
    status: str = Field(
        default=EmployeeStatus.ACTIVE, max_length=20, index=True, sa_column_kwargs={"server_default": "active"}
    )
